"""
Git hosting credentials and askpass generation.

Platforms are table driven: each entry says how to recognise the host in a
repository URL, which username convention git expects, which environment
variable carries the secret, and where the secret lives on the user. Adding
a host is a new GitPlatform entry; nothing else changes.

The askpass script never contains the secret. It echoes the *name* of an
environment variable, which the shell expands at prompt time.
"""
import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from git_exec.context import UserCredentials
from git_exec.types import CredentialDescriptor

logger = logging.getLogger(__name__)

_ENV_VAR_NAME = re.compile(r'^[A-Z_][A-Z0-9_]*$')


@dataclass(frozen=True)
class GitPlatform:
    """How to authenticate against one git hosting platform."""
    name: str
    host_pattern: str  # regex searched in the repository URL
    username: str
    env_var: str
    secret_getter: Callable[[UserCredentials], Optional[str]]

    def matches(self, url: str) -> bool:
        return re.search(self.host_pattern, url) is not None


GIT_PLATFORMS: Tuple[GitPlatform, ...] = (
    GitPlatform(
        name='github',
        host_pattern=r'github\.com',
        username='x-access-token',
        env_var='GITHUB_TOKEN',
        secret_getter=lambda user: user.github_token,
    ),
)


def git_platform_from_url(url: Optional[str], platforms: Tuple[GitPlatform, ...] = GIT_PLATFORMS) -> Optional[GitPlatform]:
    """
    Determine the hosting platform from a repository URL.

    Returns:
        Matching GitPlatform, or None for unknown hosts
    """
    if not url:
        return None
    for platform in platforms:
        if platform.matches(url):
            return platform
    return None


def resolve_credentials(
    user: Optional[UserCredentials],
    repository_url: Optional[str],
    platforms: Tuple[GitPlatform, ...] = GIT_PLATFORMS
) -> Optional[CredentialDescriptor]:
    """
    Build the credential descriptor for an operation.

    Returns None when the host is unknown or the user has no secret for it;
    git then runs without injected credentials and fails visibly if the
    repository needs them.
    """
    platform = git_platform_from_url(repository_url, platforms)
    if platform is None or user is None:
        return None

    secret = platform.secret_getter(user)
    if not secret:
        logger.debug(f"No {platform.name} credentials configured, skipping credential injection")
        return None

    return CredentialDescriptor(
        platform=platform.name,
        username=platform.username,
        env_var=platform.env_var,
        secret=secret,
    )


def generate_askpass_script(descriptor: CredentialDescriptor) -> str:
    """
    Generate a GIT_ASKPASS script for the descriptor.

    git calls the script with the prompt as $1; "Username..." gets the
    platform username, "Password..." gets the value of the descriptor's
    environment variable at run time.
    """
    if not _ENV_VAR_NAME.match(descriptor.env_var):
        raise ValueError(f"Invalid credential environment variable name: {descriptor.env_var}")
    if "'" in descriptor.username or '"' in descriptor.username or '$' in descriptor.username:
        raise ValueError("Askpass username contains quoting characters")

    return (
        "#!/bin/sh\n"
        'case "$1" in\n'
        f'  Username*) echo "{descriptor.username}" ;;\n'
        f'  Password*) echo "${descriptor.env_var}" ;;\n'
        "esac\n"
    )
