"""
ContainerEngine abstraction for git execution.

Git operations only need six container primitives. Keeping them behind an
interface decouples the runner from the Docker SDK so tests (and alternative
runtimes such as Podman's Docker-compatible socket) plug in cleanly.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple
import logging

import docker

from git_exec.types import ContainerSpec

logger = logging.getLogger(__name__)


class ContainerEngine(ABC):
    """
    Minimal container runtime interface.

    Handles are opaque to callers; only the engine that produced a handle
    may be given it back.
    """

    @abstractmethod
    def create(self, spec: ContainerSpec) -> Any:
        """
        Create (but do not start) a container.

        Returns:
            Engine-specific container handle
        """
        pass

    @abstractmethod
    def start(self, handle: Any) -> None:
        pass

    @abstractmethod
    def exec(
        self,
        handle: Any,
        argv: List[str],
        environment: Optional[Dict[str, str]] = None
    ) -> Tuple[int, bytes]:
        """
        Run argv inside a running container.

        Values that must not appear in argv (key material) go in environment.

        Returns:
            Tuple of (exit_code, output)
        """
        pass

    @abstractmethod
    def wait(self, handle: Any, timeout: int) -> Dict[str, Any]:
        """
        Block until the container exits.

        Returns:
            Dict with at least 'StatusCode'

        Raises:
            Exception: If the timeout elapses or the daemon call fails
        """
        pass

    @abstractmethod
    def logs(self, handle: Any) -> bytes:
        """Combined stdout/stderr of the container."""
        pass

    @abstractmethod
    def delete(self, handle: Any) -> None:
        """Force-remove the container."""
        pass

    def describe(self, handle: Any) -> str:
        """Short identifier for log lines."""
        return str(getattr(handle, 'short_id', handle))


class DockerContainerEngine(ContainerEngine):
    """
    ContainerEngine backed by the Docker SDK.

    Works against a local socket or any DOCKER_HOST reachable via
    docker.from_env().
    """

    def __init__(self, client: Optional[docker.DockerClient] = None):
        self._client = client

    @property
    def client(self) -> docker.DockerClient:
        # Lazy so importing this module never touches the daemon
        if self._client is None:
            self._client = docker.from_env()
        return self._client

    def create(self, spec: ContainerSpec):
        return self.client.containers.create(
            image=spec.image,
            entrypoint=spec.entrypoint,
            command=spec.command,
            working_dir=spec.working_dir,
            user=spec.user,
            environment=spec.environment,
            volumes=spec.binds,
            labels={"gitexec.ephemeral": "true"},
        )

    def start(self, handle) -> None:
        handle.start()

    def exec(self, handle, argv: List[str], environment: Optional[Dict[str, str]] = None) -> Tuple[int, bytes]:
        result = handle.exec_run(argv, stdout=True, stderr=True, environment=environment)
        return result.exit_code, result.output or b""

    def wait(self, handle, timeout: int) -> Dict[str, Any]:
        return handle.wait(timeout=timeout)

    def logs(self, handle) -> bytes:
        return handle.logs(stdout=True, stderr=True)

    def delete(self, handle) -> None:
        handle.remove(force=True)
