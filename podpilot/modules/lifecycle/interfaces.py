"""Lifecycle client interfaces following Black Box Design principles."""
from typing import AsyncIterator, Protocol

from .models import (
    AttachedProcess,
    AttachParams,
    DeleteParams,
    DeletionResult,
    LogParams,
    WatchEvent,
    WatchParams,
    WorkloadDescriptor,
    WorkloadHandle,
)


class ByteChannel(Protocol):
    """Readable output channel of an attached process (StreamReader API)."""

    async def read(self, n: int = -1) -> bytes:
        """
        Read up to n bytes.

        Returns:
            A chunk, or b"" at end-of-stream

        Raises:
            ChannelReadError: For a single malformed chunk; the channel
                stays readable afterwards
        """
        ...

    def at_eof(self) -> bool:
        """Whether end-of-stream has been reached and consumed."""
        ...


class WatchStream(Protocol):
    """Ordered, server-bounded sequence of watch events."""

    def __aiter__(self) -> AsyncIterator[WatchEvent]:
        ...

    async def aclose(self) -> None:
        ...


class LogStream(Protocol):
    """Append-only byte stream of container logs."""

    def __aiter__(self) -> AsyncIterator[bytes]:
        ...

    async def aclose(self) -> None:
        ...


class LifecycleClient(Protocol):
    """Protocol for namespaced pod clients - allows swappable implementations."""

    async def create(self, descriptor: WorkloadDescriptor) -> WorkloadHandle:
        """
        Submit the pod.

        Raises:
            ApiError: If the server rejects the pod (e.g. it already exists)
        """
        ...

    async def watch(self, params: WatchParams, since_revision: str) -> WatchStream:
        """Open a watch starting at since_revision ("0" replays current state)."""
        ...

    async def attach(self, name: str, params: AttachParams) -> AttachedProcess:
        """Attach to the running container."""
        ...

    async def log_stream(self, name: str, params: LogParams) -> LogStream:
        """Open the container log stream."""
        ...

    async def delete(self, name: str, params: DeleteParams) -> DeletionResult:
        """Delete the pod."""
        ...
