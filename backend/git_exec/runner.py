"""
Ephemeral container runner for git commands.

One container per operation: create -> start -> (inject SSH key) -> wait ->
collect logs -> force delete. Deletion runs on every exit path through the
ephemeral_container() context manager.
"""
import logging
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional, Union

from config.settings import AppConfig
from git_exec.engine import ContainerEngine
from git_exec.errors import ContainerRuntimeError, GitCommandError, GitOperationError
from git_exec.redaction import redact_secrets, secret_registry
from git_exec.ssh import inject_ssh_key
from git_exec.types import ContainerSpec, OperationResult, SSHInjection, SideStepResult

logger = logging.getLogger(__name__)

# Docker multiplexed log frame: [stream, 0, 0, 0, size (uint32 big-endian)]
FRAME_HEADER_SIZE = 8
_STREAM_TYPES = (0, 1, 2)


def _is_frame_header(chunk: bytes) -> bool:
    return (
        len(chunk) == FRAME_HEADER_SIZE
        and chunk[0] in _STREAM_TYPES
        and chunk[1:4] == b'\x00\x00\x00'
    )


def demultiplex_logs(raw: bytes) -> bytes:
    """
    Strip Docker stream frame headers from combined log output.

    Frames are consumed while a valid header is present; anything after the
    last valid frame (or the whole input, when it is not framed at all, as
    returned by the Docker SDK for non-TTY containers) is kept verbatim.
    """
    payload = bytearray()
    pos = 0
    while pos + FRAME_HEADER_SIZE <= len(raw):
        header = raw[pos:pos + FRAME_HEADER_SIZE]
        if not _is_frame_header(header):
            break
        size = int.from_bytes(header[4:8], 'big')
        start = pos + FRAME_HEADER_SIZE
        payload += raw[start:start + size]
        pos = start + size
    payload += raw[pos:]
    return bytes(payload)


def clean_logs(raw: Union[bytes, str, None]) -> str:
    """Demultiplex, decode as UTF-8 (invalid sequences replaced) and trim."""
    if raw is None:
        return ""
    if isinstance(raw, str):
        raw = raw.encode('utf-8', errors='replace')
    return demultiplex_logs(raw).decode('utf-8', errors='replace').strip()


class ContainerRunner:
    """
    Runs one ContainerSpec to completion in a throwaway container.

    Blocking: the calling thread waits until the container exits or the wait
    timeout fires. Callers that need concurrency run operations on separate
    threads; runners share no mutable state.
    """

    def __init__(self, engine: ContainerEngine, wait_timeout: Optional[int] = None):
        self.engine = engine
        self.wait_timeout = wait_timeout or AppConfig.CONTAINER_WAIT_TIMEOUT

    @contextmanager
    def ephemeral_container(self, spec: ContainerSpec) -> Iterator[Any]:
        """Create a container and guarantee its forced deletion."""
        handle = self.engine.create(spec)
        container_name = self.engine.describe(handle)
        logger.debug(f"Created git container {container_name} from {spec.image}")
        try:
            yield handle
        finally:
            try:
                self.engine.delete(handle)
                logger.debug(f"Deleted git container {container_name}")
            except Exception as e:
                logger.error(f"Failed to delete git container {container_name}: {e}")

    def run(
        self,
        spec: ContainerSpec,
        ssh_injection: Optional[SSHInjection] = None,
        secrets: Iterable[Optional[str]] = ()
    ) -> OperationResult:
        """
        Execute the container spec and return its cleaned output.

        Args:
            spec: Container spec for this operation
            ssh_injection: Private key to install after start, if any
            secrets: Values redacted from errors and log records

        Returns:
            OperationResult with exit code 0 and cleaned logs

        Raises:
            ContainerRuntimeError: Engine failure, including wait timeout
            GitCommandError: Non-zero exit status
        """
        secrets = list(secrets)
        if ssh_injection is not None:
            secrets.append(ssh_injection.private_key)

        with secret_registry.track(secrets):
            try:
                with self.ephemeral_container(spec) as handle:
                    self.engine.start(handle)

                    injection_result: Optional[SideStepResult] = None
                    if ssh_injection is not None:
                        injection_result = inject_ssh_key(self.engine, handle, ssh_injection)

                    wait_result = self.engine.wait(handle, self.wait_timeout)
                    logs = clean_logs(self.engine.logs(handle))
            except GitOperationError:
                raise
            except Exception as e:
                raise ContainerRuntimeError(e, message=redact_secrets(str(e), secrets)) from e

        exit_code = wait_result.get('StatusCode') if isinstance(wait_result, dict) else None
        if exit_code is None:
            raise ContainerRuntimeError(
                RuntimeError("container wait returned no status code"),
            )

        if exit_code != 0:
            redacted = redact_secrets(logs, secrets)
            logger.info(f"Git container exited with status {exit_code}")
            raise GitCommandError(
                redacted or f"git exited with status {exit_code}",
                exit_code=exit_code,
                logs=redacted,
                ssh_injection=injection_result,
            )

        return OperationResult(exit_code=exit_code, logs=logs)
