"""
In-memory stand-ins for the cluster side of the lifecycle.

Each fake records how it was used so tests can assert on consumption
order, close calls and status reads without a real cluster.
"""

import asyncio
from typing import Any, List, Optional, Sequence

from podpilot.modules.lifecycle import (
    AttachedProcess,
    Immediate,
    PodPhase,
    ProcessStatus,
    WorkloadHandle,
)


def make_handle(name: str = "test-kane8n", phase: Optional[PodPhase] = PodPhase.PENDING) -> WorkloadHandle:
    return WorkloadHandle(name=name, namespace="default", phase=phase)


class FakeChannel:
    """
    Scripted byte channel with the StreamReader read/at_eof API.

    Items are bytes or exceptions; delays (seconds) are applied before
    each read so tests can force a particular interleaving.
    """

    def __init__(self, items: Sequence[Any] = (), delays: Optional[Sequence[float]] = None):
        self._items = list(items)
        self._delays = list(delays or [])
        self._eof = False
        self.reads = 0

    async def read(self, n: int = -1) -> bytes:
        self.reads += 1
        delay = self._delays.pop(0) if self._delays else 0
        await asyncio.sleep(delay)

        if not self._items:
            self._eof = True
            return b""

        item = self._items.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def at_eof(self) -> bool:
        return self._eof


class StatusProbe:
    """Awaitable terminal status that counts how often it is awaited."""

    def __init__(self, status: Optional[ProcessStatus]):
        self.status = status
        self.reads = 0

    async def _resolve(self) -> Optional[ProcessStatus]:
        await asyncio.sleep(0)
        return self.status

    def __await__(self):
        self.reads += 1
        return self._resolve().__await__()


class ClosableProcess(AttachedProcess):
    """AttachedProcess that counts close() calls."""

    def __init__(self, stdout, stderr, status):
        self.close_calls = 0
        super().__init__(stdout, stderr, status, on_close=self._count_close)

    def _count_close(self) -> None:
        self.close_calls += 1


def make_process(
    stdout: Sequence[Any] = (),
    stderr: Sequence[Any] = (),
    status: Optional[ProcessStatus] = ProcessStatus(status="Success", exit_code=0),
    stdout_delays: Optional[Sequence[float]] = None,
    stderr_delays: Optional[Sequence[float]] = None,
) -> ClosableProcess:
    process = ClosableProcess(
        FakeChannel(stdout, stdout_delays),
        FakeChannel(stderr, stderr_delays),
        StatusProbe(status),
    )
    return process


class FakeWatchStream:
    """
    Replays watch events in order.

    With hang=True the stream never ends on its own once the events are
    used up, like a server that ignores its timeout.
    """

    def __init__(self, events: Sequence[Any] = (), hang: bool = False):
        self._events = list(events)
        self._hang = hang
        self.consumed = 0
        self.closed = False

    @property
    def remaining(self) -> int:
        return len(self._events)

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self.closed:
            raise StopAsyncIteration
        await asyncio.sleep(0)

        if not self._events:
            if self._hang:
                await asyncio.Event().wait()
            raise StopAsyncIteration

        item = self._events.pop(0)
        self.consumed += 1
        if isinstance(item, BaseException):
            raise item
        return item

    async def aclose(self) -> None:
        self.closed = True


class FakeLogStream:
    """
    Log byte stream.

    With follow=True it waits for more data after the scripted chunks
    until close_remote() or aclose() is called.
    """

    def __init__(self, chunks: Sequence[Any] = (), follow: bool = False):
        self._chunks = list(chunks)
        self._follow = follow
        self._remote_closed = asyncio.Event()
        self.closed = False

    def close_remote(self) -> None:
        self._remote_closed.set()

    def __aiter__(self):
        return self

    async def __anext__(self) -> bytes:
        await asyncio.sleep(0)
        if self.closed:
            raise StopAsyncIteration

        if self._chunks:
            item = self._chunks.pop(0)
            if isinstance(item, BaseException):
                raise item
            return item

        if self._follow:
            await self._remote_closed.wait()
        raise StopAsyncIteration

    async def aclose(self) -> None:
        self.closed = True
        self._remote_closed.set()


class FakeLifecycleClient:
    """LifecycleClient fake wired with canned sessions."""

    def __init__(
        self,
        watch_stream: Optional[FakeWatchStream] = None,
        process: Optional[AttachedProcess] = None,
        log_stream: Optional[FakeLogStream] = None,
        deletion=None,
    ):
        self.watch_stream = watch_stream or FakeWatchStream()
        self.process = process or make_process()
        self.logs = log_stream or FakeLogStream()
        self.deletion = deletion
        self.calls: List[tuple] = []
        self.errors: dict = {}

    def fail(self, operation: str, error: BaseException) -> "FakeLifecycleClient":
        """Make the named operation raise error. Returns self for chaining."""
        self.errors[operation] = error
        return self

    def _record(self, operation: str, *args) -> None:
        self.calls.append((operation, *args))
        if operation in self.errors:
            raise self.errors[operation]

    @property
    def operations(self) -> List[str]:
        return [call[0] for call in self.calls]

    async def create(self, descriptor):
        self._record("create", descriptor)
        return make_handle(descriptor.name, PodPhase.PENDING)

    async def watch(self, params, since_revision):
        self._record("watch", params, since_revision)
        return self.watch_stream

    async def attach(self, name, params):
        self._record("attach", name, params)
        return self.process

    async def log_stream(self, name, params):
        self._record("log_stream", name, params)
        return self.logs

    async def delete(self, name, params):
        self._record("delete", name, params)
        if self.deletion is not None:
            return self.deletion
        return Immediate(make_handle(name, PodPhase.RUNNING))
