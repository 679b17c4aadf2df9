"""
Exception taxonomy for container-mediated git operations.

    GitOperationError
    ├── GitPreflightError          raised before any container exists
    │   ├── SSHKeyMissingError
    │   ├── SSHMountPathMissingError
    │   └── GitInputError          rejected URL / branch / path / message
    ├── ContainerRuntimeError      engine create/start/wait/logs failures
    └── GitCommandError            git exited non-zero inside the container

Nothing in this package retries; callers decide what to do with a failure.
"""
from typing import Optional


class GitOperationError(RuntimeError):
    """Base class for every error raised by the git execution engine."""
    pass


class GitPreflightError(GitOperationError):
    """Configuration problem detected before a container was created."""
    pass


class SSHKeyMissingError(GitPreflightError):
    """SSH repository URL but the user has no SSH key configured."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message or
            "SSH authentication required: The repository uses SSH authentication but no SSH key "
            "is configured. Please add an SSH key in your user settings."
        )


class SSHMountPathMissingError(GitPreflightError):
    """SSH repository URL, user has a key, but the agent has nowhere to mount it."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message or
            "SSH configuration incomplete: The agent does not have an SSH mount path configured. "
            "Please configure the agent's SSH mount path."
        )


class GitInputError(GitPreflightError, ValueError):
    """A repository URL, branch, path or commit message failed validation."""
    pass


class ContainerRuntimeError(GitOperationError):
    """
    Container engine failure wrapped with the lower-level failure class.

    The original exception is chained as __cause__.
    """

    def __init__(self, original: BaseException, message: Optional[str] = None):
        self.original_class = type(original).__name__
        detail = message if message is not None else str(original)
        super().__init__(f"Git operation error: {detail} ({self.original_class})")


class GitCommandError(GitOperationError):
    """
    Git command exited non-zero.

    Attributes:
        exit_code: Container exit status
        logs: Cleaned, secret-redacted combined stdout/stderr
        ssh_injection: Outcome of SSH key injection, when one was attempted
    """

    def __init__(self, message: str, exit_code: int, logs: str = "", ssh_injection=None):
        self.exit_code = exit_code
        self.logs = logs
        self.ssh_injection = ssh_injection
        super().__init__(message)
