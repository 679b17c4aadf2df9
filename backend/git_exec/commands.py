"""
Shell command builders, one per git operation.

Each builder returns the literal text run by ``sh -c`` in the git container.
Interpolated values are validated first (models.git_models); the commit
message is additionally shell-quoted. Builders are pure: the same inputs
always produce byte-identical commands.
"""
import shlex
from typing import List, Optional

from pydantic import ValidationError

from git_exec.context import GitContext
from git_exec.errors import GitInputError
from models.git_models import PushRequest, RepositoryTarget

BRANCH_LIST_COMMAND = "git branch"


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    message = errors[0].get('msg', str(exc))
    # pydantic prefixes ValueError messages raised in validators
    return message.removeprefix('Value error, ')


def validate_repository(repository_url: Optional[str], repo_path: Optional[str] = "") -> RepositoryTarget:
    """
    Validate a repository URL and repo path.

    Raises:
        GitInputError: If either value is unsafe to interpolate
    """
    try:
        return RepositoryTarget(url=repository_url, repo_path=repo_path or "")
    except ValidationError as e:
        raise GitInputError(_first_error(e)) from e


def validate_push(branch: Optional[str], commit_message: str) -> PushRequest:
    """
    Validate a push branch and commit message.

    Raises:
        GitInputError: If either value is rejected
    """
    try:
        return PushRequest(branch=branch, commit_message=commit_message)
    except ValidationError as e:
        raise GitInputError(_first_error(e)) from e


def build_clone_command(context: GitContext) -> str:
    """
    git clone <url> <target>, run from the workspace root.

    target is the repo path without its leading slash, or "." when unset.
    """
    target = validate_repository(context.repository_url, context.project.repo_path)
    return f"git clone {target.url} {context.clone_target}"


def build_push_command(repository_url: str, branch: str, commit_message: str) -> str:
    """
    Reset origin, stage everything, commit if anything is staged, push HEAD.

    The remote is reset to the canonical URL so a token can never linger in
    .git/config; credentials come from GIT_ASKPASS instead.
    """
    target = validate_repository(repository_url)
    push = validate_push(branch, commit_message)

    steps: List[str] = [
        f"git remote set-url origin '{target.url}'",
        "git add -A",
        f"git diff --cached --quiet || git commit -m {shlex.quote(push.commit_message)}",
        f"git push origin HEAD:{push.branch}",
    ]
    return " && ".join(steps)


def build_diff_command(context_lines: int = 10) -> str:
    """Mark untracked files intent-to-add, then diff the work tree against HEAD."""
    return f"git add -N . && git diff HEAD --unified={int(context_lines)}"


def parse_branch_output(output: str) -> List[str]:
    """Branch names from `git branch` output (current marker stripped, blanks dropped)."""
    branches = []
    for line in output.split("\n"):
        name = line.strip()
        if name.startswith("* "):
            name = name[2:].strip()
        if name:
            branches.append(name)
    return branches
