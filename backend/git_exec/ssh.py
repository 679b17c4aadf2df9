"""
SSH support for git containers.

- is_ssh_url(): recognises git@host:path and ssh:// remotes
- validate_ssh_setup(): preflight, raises before any container is created
- inject_ssh_key(): best-effort key write into a started container

The private key is passed to the container through the exec environment,
base64 encoded, so it never appears in an exec argv.
"""
import base64
import logging
import posixpath
import re
from typing import Any, Optional

from git_exec.context import GitContext
from git_exec.engine import ContainerEngine
from git_exec.errors import SSHKeyMissingError, SSHMountPathMissingError
from git_exec.types import SSHInjection, SideStepResult

logger = logging.getLogger(__name__)

_SSH_URL_PATTERN = re.compile(r'\Agit@|ssh://')

# Exec environment variable carrying the encoded key
_KEY_ENV_VAR = 'GITEXEC_SSH_KEY_B64'

# $1 is the target path, passed as an argument so it is never re-parsed
_WRITE_KEY_SCRIPT = f'printf %s "${_KEY_ENV_VAR}" | base64 -d > "$1"'


def is_ssh_url(url: Optional[str]) -> bool:
    """True for git@host:org/repo and ssh://... remotes."""
    return bool(url) and _SSH_URL_PATTERN.search(url) is not None


def validate_ssh_setup(context: GitContext, repository_url: Optional[str]) -> None:
    """
    Fail fast when an SSH remote cannot possibly authenticate.

    No-op for non-SSH URLs.

    Raises:
        SSHKeyMissingError: User has no SSH key configured
        SSHMountPathMissingError: Agent has no in-container key path
    """
    if not is_ssh_url(repository_url):
        return

    if not (context.user.ssh_key or "").strip():
        raise SSHKeyMissingError()

    if not (context.agent.ssh_mount_path or "").strip():
        raise SSHMountPathMissingError()


def ssh_injection_for(context: GitContext) -> Optional[SSHInjection]:
    """Key injection plan for this context, or None when not applicable."""
    if not is_ssh_url(context.repository_url):
        return None
    if not context.user.ssh_key or not context.agent.ssh_mount_path:
        return None
    return SSHInjection(private_key=context.user.ssh_key, mount_path=context.agent.ssh_mount_path)


def inject_ssh_key(engine: ContainerEngine, handle: Any, injection: SSHInjection) -> SideStepResult:
    """
    Write the user's private key into a running container.

    Steps: mkdir -p <dir>, decode key to <mount_path>, chmod 600 key,
    chmod 700 dir. Failures are logged and reported, never raised: the git
    command that follows fails with its own authentication error.

    Returns:
        SideStepResult SUCCEEDED with the key path, or FAILED with a reason
    """
    key_path = injection.mount_path
    key_dir = posixpath.dirname(key_path) or '/'
    encoded = base64.b64encode(injection.private_key.encode('utf-8')).decode('ascii')

    steps = [
        (['mkdir', '-p', key_dir], None),
        (['sh', '-c', _WRITE_KEY_SCRIPT, 'sh', key_path], {_KEY_ENV_VAR: encoded}),
        (['chmod', '600', key_path], None),
        (['chmod', '700', key_dir], None),
    ]

    try:
        for argv, environment in steps:
            exit_code, output = engine.exec(handle, argv, environment=environment)
            if exit_code not in (0, None):
                detail = output.decode('utf-8', errors='replace').strip() if output else ''
                reason = f"'{argv[0]}' exited with {exit_code}" + (f": {detail}" if detail else '')
                logger.error(f"Failed to setup SSH key in container {engine.describe(handle)}: {reason}")
                return SideStepResult.failed(reason)
    except Exception as e:
        reason = f"{e} ({type(e).__name__})"
        logger.error(f"Failed to setup SSH key in container {engine.describe(handle)}: {reason}")
        return SideStepResult.failed(reason)

    logger.debug(f"Installed SSH key at {key_path} in container {engine.describe(handle)}")
    return SideStepResult.succeeded(key_path)
