"""
Shared types for git execution.

These are per-operation values: created fresh for one call, never persisted
and never reused across operations.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, List, Optional, TypeVar

T = TypeVar('T')


@dataclass(frozen=True)
class CredentialDescriptor:
    """
    Askpass credential for one operation.

    The secret only ever travels as ``env_var=secret`` in the container
    environment; the askpass script reads it back through variable expansion.
    """
    platform: str
    username: str
    env_var: str
    secret: str = field(repr=False)

    @property
    def env_entry(self) -> str:
        return f"{self.env_var}={self.secret}"


@dataclass
class ContainerSpec:
    """Everything the engine needs to create one throwaway git container."""
    image: str
    entrypoint: List[str]
    command: List[str]  # ["-c", script]
    working_dir: str
    user: str
    environment: List[str] = field(default_factory=list)
    binds: List[str] = field(default_factory=list)


@dataclass
class SSHInjection:
    """Private key to write into a started container before git runs."""
    private_key: str = field(repr=False)
    mount_path: str


@dataclass
class OperationResult:
    """Outcome of a container run: exit code plus cleaned combined logs."""
    exit_code: int
    logs: str

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class SideStepStatus(Enum):
    """Outcome of a best-effort step whose failure is not escalated."""
    SUCCEEDED = "succeeded"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass
class SideStepResult(Generic[T]):
    """
    Result of a best-effort step.

    Keeps "ran and found nothing" (EMPTY) apart from "could not run" (FAILED)
    so callers and tests can tell them apart.
    """
    status: SideStepStatus
    data: Optional[T] = None
    reason: Optional[str] = None

    @classmethod
    def succeeded(cls, data: Any) -> 'SideStepResult':
        return cls(status=SideStepStatus.SUCCEEDED, data=data)

    @classmethod
    def empty(cls, data: Any = None) -> 'SideStepResult':
        return cls(status=SideStepStatus.EMPTY, data=data)

    @classmethod
    def failed(cls, reason: str, data: Any = None) -> 'SideStepResult':
        return cls(status=SideStepStatus.FAILED, data=data, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status is not SideStepStatus.FAILED
