"""
GitContext: the read-only view of host records a git operation needs.

Host applications own Task/Project/Agent/User persistence. Any host record
that can produce a GitContext (via ``git_context()``) can drive an operation;
resolve_git_context() performs that adaptation explicitly.
"""

import posixpath
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Union, runtime_checkable


@dataclass(frozen=True)
class ProjectConfig:
    """Repository settings of the project a task belongs to."""
    repository_url: Optional[str] = None
    repo_path: str = ""
    secrets: Dict[str, str] = field(default_factory=dict, repr=False)


@dataclass(frozen=True)
class AgentConfig:
    """Container settings of the agent running the task."""
    docker_image: str
    user_id: int
    env_strings: List[str] = field(default_factory=list)
    ssh_mount_path: Optional[str] = None


@dataclass(frozen=True)
class UserCredentials:
    """Credentials of the user the task acts for."""
    github_token: Optional[str] = field(default=None, repr=False)
    ssh_key: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class GitContext:
    """Everything one git operation needs to know about its task."""
    task_id: Union[int, str]
    project: ProjectConfig
    agent: AgentConfig
    user: UserCredentials
    workplace_path: str
    volume_binds: List[str] = field(default_factory=list)
    auto_push_enabled: bool = False
    auto_push_branch: Optional[str] = None

    @property
    def repository_url(self) -> Optional[str]:
        return self.project.repository_url or None

    @property
    def relative_repo_path(self) -> str:
        """Repo path with any leading slash stripped ("" when unset)."""
        return (self.project.repo_path or "").lstrip('/')

    @property
    def clone_target(self) -> str:
        """Directory clone is told to create, relative to the workspace root."""
        return self.relative_repo_path or "."

    @property
    def git_working_dir(self) -> str:
        """Working directory for every operation except clone."""
        if not self.relative_repo_path:
            return self.workplace_path
        return posixpath.join(self.workplace_path, self.relative_repo_path)

    def secret_values(self) -> List[str]:
        """Every credential value this context could place in a container."""
        values = [self.user.github_token, self.user.ssh_key]
        values.extend(self.project.secrets.values())
        return [v for v in values if v]


@runtime_checkable
class GitContextProvider(Protocol):
    """Any host record (task, run, ...) that can describe its git context."""

    def git_context(self) -> GitContext:
        ...


@runtime_checkable
class RunRecord(Protocol):
    """A run of a task; repository state captures are recorded against it."""
    run_id: Union[int, str]

    def git_context(self) -> GitContext:
        ...


def resolve_git_context(source: Union[GitContext, GitContextProvider]) -> GitContext:
    """
    Adapt a host record to a GitContext.

    Args:
        source: A GitContext, or any object implementing git_context()

    Raises:
        TypeError: If source cannot supply a GitContext
    """
    if isinstance(source, GitContext):
        return source
    if isinstance(source, GitContextProvider):
        return source.git_context()
    raise TypeError(f"{type(source).__name__} cannot provide a GitContext")
