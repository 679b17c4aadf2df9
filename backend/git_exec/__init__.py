"""
Container-mediated git execution.

This module provides:
- GitOperations: clone, push, branch listing, repository state capture
- GitContext and its parts: the host records an operation reads
- ContainerEngine / DockerContainerEngine: container runtime boundary
- Error taxonomy (GitOperationError and subclasses)
- SideStepResult: best-effort step outcome
"""
from git_exec.context import (
    AgentConfig,
    GitContext,
    GitContextProvider,
    ProjectConfig,
    RunRecord,
    UserCredentials,
    resolve_git_context,
)
from git_exec.engine import ContainerEngine, DockerContainerEngine
from git_exec.errors import (
    ContainerRuntimeError,
    GitCommandError,
    GitInputError,
    GitOperationError,
    GitPreflightError,
    SSHKeyMissingError,
    SSHMountPathMissingError,
)
from git_exec.operations import GitOperations, get_git_operations
from git_exec.types import (
    ContainerSpec,
    CredentialDescriptor,
    OperationResult,
    SideStepResult,
    SideStepStatus,
)

__all__ = [
    # operations
    'GitOperations',
    'get_git_operations',
    # context
    'AgentConfig',
    'GitContext',
    'GitContextProvider',
    'ProjectConfig',
    'RunRecord',
    'UserCredentials',
    'resolve_git_context',
    # engine
    'ContainerEngine',
    'DockerContainerEngine',
    # errors
    'ContainerRuntimeError',
    'GitCommandError',
    'GitInputError',
    'GitOperationError',
    'GitPreflightError',
    'SSHKeyMissingError',
    'SSHMountPathMissingError',
    # types
    'ContainerSpec',
    'CredentialDescriptor',
    'OperationResult',
    'SideStepResult',
    'SideStepStatus',
]
