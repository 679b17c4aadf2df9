"""
Container spec assembly for git operations.

Builds the ContainerSpec for one operation from the task's agent and project
settings, then layers credential injection on top when a descriptor applies.
"""
import logging
import shlex
from typing import List, Optional, Union

from config.settings import AppConfig
from git_exec.context import GitContext
from git_exec.credentials import generate_askpass_script
from git_exec.types import ContainerSpec, CredentialDescriptor

logger = logging.getLogger(__name__)


def build_environment(context: GitContext) -> List[str]:
    """Agent env vars followed by project secrets, as KEY=value strings."""
    env = list(context.agent.env_strings)
    env.extend(f"{key}={value}" for key, value in context.project.secrets.items())
    return env


def wrap_with_credential_setup(
    original_cmd: Union[List[str], str],
    descriptor: CredentialDescriptor,
    askpass_path: Optional[str] = None
) -> List[str]:
    """
    Prefix a command with askpass script installation.

    Accepts the ["-c", script] form or any other token list / string, and
    always returns the ["-c", script] form. The original command only runs
    if the script was installed.
    """
    askpass_path = askpass_path or AppConfig.ASKPASS_PATH
    script = generate_askpass_script(descriptor)
    quoted_path = shlex.quote(askpass_path)

    setup = f"printf '%s' {shlex.quote(script)} > {quoted_path} && chmod +x {quoted_path}"

    if isinstance(original_cmd, (list, tuple)) and len(original_cmd) >= 2 and original_cmd[0] == "-c":
        body = original_cmd[1]
    elif isinstance(original_cmd, str):
        body = original_cmd
    else:
        body = " ".join(original_cmd)

    return ["-c", f"{setup} && {body}"]


def assemble_container_spec(
    context: GitContext,
    command: str,
    working_dir: str,
    credential: Optional[CredentialDescriptor] = None
) -> ContainerSpec:
    """
    Assemble the container spec for one git operation.

    Args:
        context: Task git context
        command: Shell command for ``sh -c``
        working_dir: In-container working directory
        credential: Askpass credential, if the host has one for this user

    Returns:
        ContainerSpec whose command never contains the credential secret
    """
    spec = ContainerSpec(
        image=context.agent.docker_image,
        entrypoint=[AppConfig.CONTAINER_SHELL],
        command=["-c", command],
        working_dir=working_dir,
        user=str(context.agent.user_id),
        environment=build_environment(context),
        binds=list(context.volume_binds),
    )

    if credential is not None:
        spec.environment.append(credential.env_entry)
        spec.environment.append(f"GIT_ASKPASS={AppConfig.ASKPASS_PATH}")
        spec.command = wrap_with_credential_setup(spec.command, credential)
        logger.debug(f"Injected {credential.platform} credentials via {credential.env_var} for task {context.task_id}")

    return spec
