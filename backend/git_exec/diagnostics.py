"""
Actionable diagnostics for failed git commands.

git reports every SSH authentication problem with the same couple of lines.
enhance_git_error_message() turns that into a message naming what is
actually missing for this task.
"""
import logging
from typing import Optional

from git_exec.context import GitContext
from git_exec.ssh import is_ssh_url
from git_exec.types import SideStepResult

logger = logging.getLogger(__name__)

SSH_FAILURE_SIGNATURES = (
    "Permission denied (publickey)",
    "Could not read from remote repository",
)

NO_SSH_KEY_MESSAGE = (
    "SSH authentication failed: No SSH key configured for your user account. "
    "Please add an SSH key in your user settings to access this repository."
)
NO_MOUNT_PATH_MESSAGE = (
    "SSH authentication failed: Agent is missing SSH mount path configuration. "
    "Please configure the agent's SSH mount path."
)
NO_REPOSITORY_ACCESS_MESSAGE = (
    "SSH authentication failed: The SSH key may not have access to this repository. "
    "Please ensure your SSH key is added to the repository's deploy keys or your GitHub/GitLab account."
)


def is_ssh_auth_failure(error_text: Optional[str]) -> bool:
    return bool(error_text) and any(sig in error_text for sig in SSH_FAILURE_SIGNATURES)


def enhance_git_error_message(
    original_error: str,
    context: GitContext,
    command: Optional[str] = None,
    ssh_injection: Optional[SideStepResult] = None
) -> str:
    """
    Map raw git failure output to a specific, actionable message.

    Only SSH authentication failures against SSH remotes are rewritten, in
    priority order: no user key, no agent mount path, key injection failed,
    key without access. Anything else is returned unchanged.

    Args:
        original_error: Cleaned git output
        context: Task git context
        command: The command that failed, named in the debug log when an
            SSH failure is rewritten
        ssh_injection: Result of the SSH key injection step, if attempted
    """
    if not is_ssh_auth_failure(original_error) or not is_ssh_url(context.repository_url):
        return original_error

    if command:
        logger.debug(f"SSH authentication failure for task {context.task_id} running: {command}")

    if not (context.user.ssh_key or "").strip():
        return NO_SSH_KEY_MESSAGE

    if not (context.agent.ssh_mount_path or "").strip():
        return NO_MOUNT_PATH_MESSAGE

    if ssh_injection is not None and not ssh_injection.ok:
        return (
            "SSH authentication failed: The SSH key could not be installed in the git container "
            f"({ssh_injection.reason}). Please check the agent's SSH mount path is writable."
        )

    return NO_REPOSITORY_ACCESS_MESSAGE
