"""
Git operations executed in ephemeral containers on behalf of a task.

Every operation follows the same path:

    SSH preflight -> command builder -> credential resolution ->
    container spec -> container runner -> (on failure) error diagnostics

Operations are synchronous; each call owns exactly one container, created
and deleted within the call.

Security:
    - Tokens reach git only through GIT_ASKPASS and a container env var;
      they are never part of a command string or a remote URL
    - SSH keys are written into the container through exec environment,
      never through a command argument
    - Error text is redacted of every secret the context carries
"""
import logging
import threading
from typing import List, Optional, Union

from config.settings import AppConfig
from git_exec.commands import (
    BRANCH_LIST_COMMAND,
    build_clone_command,
    build_diff_command,
    build_push_command,
    parse_branch_output,
    validate_repository,
)
from git_exec.container_config import assemble_container_spec
from git_exec.context import GitContext, GitContextProvider, RunRecord, resolve_git_context
from git_exec.credentials import resolve_credentials
from git_exec.diagnostics import enhance_git_error_message
from git_exec.engine import ContainerEngine, DockerContainerEngine
from git_exec.errors import GitCommandError
from git_exec.redaction import redact_secrets
from git_exec.runner import ContainerRunner
from git_exec.ssh import ssh_injection_for, validate_ssh_setup
from git_exec.types import OperationResult, SideStepResult

logger = logging.getLogger(__name__)

ContextSource = Union[GitContext, GitContextProvider]


class GitOperations:
    """
    Clone, push, branch listing and repository state capture for tasks.

    Args:
        engine: Container engine (defaults to the local Docker daemon)
        db: DatabaseManager for repository state records, created on first use
        runner: Override the container runner (tests)
    """

    def __init__(
        self,
        engine: Optional[ContainerEngine] = None,
        db=None,
        runner: Optional[ContainerRunner] = None
    ):
        self.engine = engine or DockerContainerEngine()
        self.runner = runner or ContainerRunner(self.engine)
        self._db = db

    @property
    def db(self):
        if self._db is None:
            from database import DatabaseManager
            self._db = DatabaseManager()
        return self._db

    def clone_repository(self, source: ContextSource) -> OperationResult:
        """
        Clone the project repository into the task workspace.

        Runs from the workspace root; the clone target is the repo path
        (leading slash stripped) or "." when the project has none.

        Raises:
            GitPreflightError: SSH setup incomplete or unsafe input
            ContainerRuntimeError: Container engine failure
            GitCommandError: git clone failed
        """
        context = resolve_git_context(source)
        self._preflight(context)

        command = build_clone_command(context)
        logger.info(f"Cloning repository for task {context.task_id} into {context.clone_target}")

        return self._run_git_command(
            context,
            command,
            error_message="Failed to clone repository",
            working_dir=context.workplace_path,
        )

    def push_changes_to_branch(
        self,
        source: ContextSource,
        commit_message: Optional[str] = None
    ) -> Optional[OperationResult]:
        """
        Commit all workspace changes and push HEAD to the task's push branch.

        Returns None without creating a container when auto-push is disabled,
        no branch is configured, or the project has no repository URL.

        Raises:
            GitPreflightError: SSH setup incomplete or unsafe input
            ContainerRuntimeError: Container engine failure
            GitCommandError: Any step of the push chain failed
        """
        context = resolve_git_context(source)
        if not context.auto_push_enabled or not context.auto_push_branch:
            return None
        if not context.repository_url:
            return None

        commit_message = commit_message or AppConfig.DEFAULT_COMMIT_MESSAGE
        self._preflight(context)

        command = build_push_command(context.repository_url, context.auto_push_branch, commit_message)
        logger.info(f"Pushing task {context.task_id} changes to {context.auto_push_branch}")

        return self._run_git_command(
            context,
            command,
            error_message="Failed to push changes",
        )

    def fetch_branches(self, source: ContextSource) -> SideStepResult:
        """
        List local branches of the workspace repository.

        Best effort: failures are logged and returned as FAILED with an
        empty list, never raised.

        Returns:
            SideStepResult with the branch names as data
        """
        context = resolve_git_context(source)
        if not context.repository_url:
            return SideStepResult.empty([])

        try:
            self._preflight(context)
            result = self._run_git_command(
                context,
                BRANCH_LIST_COMMAND,
                error_message="Failed to fetch branches",
            )
        except Exception as e:
            logger.error(f"Failed to fetch branches for task {context.task_id}: {e}")
            return SideStepResult.failed(str(e), data=[])

        branches = parse_branch_output(result.logs)
        if not branches:
            return SideStepResult.empty([])
        return SideStepResult.succeeded(branches)

    def capture_repository_state(self, run: RunRecord) -> SideStepResult:
        """
        Record the workspace's uncommitted diff against a run.

        Untracked files are marked intent-to-add (not committed) so they show
        up in the diff. An empty diff records nothing.

        Returns:
            SideStepResult with the created RepoState, EMPTY when there was
            nothing to record, FAILED (logged, not raised) on error
        """
        context = resolve_git_context(run)
        if not context.repository_url:
            return SideStepResult.empty()

        try:
            self._preflight(context)
            result = self._run_git_command(
                context,
                build_diff_command(AppConfig.DIFF_CONTEXT_LINES),
                error_message="Failed to capture git diff",
            )
            diff_output = result.logs
            if not diff_output.strip():
                logger.debug(f"No uncommitted changes for run {run.run_id}")
                return SideStepResult.empty()

            repo_state = self.db.record_repository_state(
                run_id=run.run_id,
                uncommitted_diff=diff_output,
                repository_path=context.git_working_dir,
            )
        except Exception as e:
            logger.error(f"Failed to capture repository state for run {run.run_id}: {e}")
            return SideStepResult.failed(str(e))

        return SideStepResult.succeeded(repo_state)

    def _preflight(self, context: GitContext) -> None:
        """
        Checks that must pass before any container is created.

        Inputs are validated first so the SSH check sees exactly the URL the
        command will carry.

        Raises:
            GitInputError: Unsafe repository URL or repo path
            SSHKeyMissingError, SSHMountPathMissingError: SSH setup incomplete
        """
        validate_repository(context.repository_url, context.project.repo_path)
        validate_ssh_setup(context, context.repository_url)

    def _run_git_command(
        self,
        context: GitContext,
        command: str,
        error_message: str,
        working_dir: Optional[str] = None
    ) -> OperationResult:
        """
        Run one shell command in a fresh git container for this context.

        Args:
            context: Task git context
            command: Shell command text (never contains credentials)
            error_message: Prefix for the raised error on failure
            working_dir: Override the working directory (clone uses the
                workspace root); defaults to workspace root + repo path
        """
        validate_repository(context.repository_url, context.project.repo_path)

        credential = resolve_credentials(context.user, context.repository_url)
        spec = assemble_container_spec(
            context,
            command,
            working_dir=working_dir or context.git_working_dir,
            credential=credential,
        )
        secrets: List[str] = context.secret_values()

        try:
            return self.runner.run(spec, ssh_injection=ssh_injection_for(context), secrets=secrets)
        except GitCommandError as e:
            enhanced = enhance_git_error_message(e.logs, context, command, ssh_injection=e.ssh_injection)
            logger.error(f"{error_message} for task {context.task_id} (exit {e.exit_code})")
            raise GitCommandError(
                redact_secrets(f"{error_message}: {enhanced}", secrets),
                exit_code=e.exit_code,
                logs=e.logs,
                ssh_injection=e.ssh_injection,
            ) from e


# Singleton instance with thread-safe initialization
_git_operations: Optional[GitOperations] = None
_git_operations_lock = threading.Lock()


def get_git_operations() -> GitOperations:
    """
    Get or create the shared GitOperations instance.

    Thread-safe using double-checked locking pattern.
    """
    global _git_operations

    if _git_operations is not None:
        return _git_operations

    with _git_operations_lock:
        if _git_operations is None:
            _git_operations = GitOperations()
        return _git_operations
