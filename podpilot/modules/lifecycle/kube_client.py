"""
Kubernetes adapter for the LifecycleClient protocol.

Wraps the blocking ``kubernetes`` CoreV1Api so that the lifecycle
components can await it. Blocking calls run in worker threads; the
attach websocket is pumped by a daemon thread that hands data to the
event loop through bounded queues.
"""

import asyncio
import json
import logging
from concurrent.futures import TimeoutError as FutureTimeoutError
from threading import Event, Thread
from typing import Any, Dict, Optional

import urllib3
from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes import watch as k8s_watch
from kubernetes.client.rest import ApiException
from kubernetes.stream import stream as k8s_stream
from kubernetes.stream.ws_client import ERROR_CHANNEL, STDERR_CHANNEL, STDOUT_CHANNEL

from .errors import ApiError, TransportError
from .models import (
    Added,
    AttachedProcess,
    AttachParams,
    Deleted,
    DeleteParams,
    DeletionResult,
    Error,
    Immediate,
    LogParams,
    Modified,
    Pending,
    PodPhase,
    ProcessStatus,
    WatchEvent,
    WatchParams,
    WorkloadDescriptor,
    WorkloadHandle,
)

logger = logging.getLogger(__name__)

LOG_CHUNK_SIZE = 4096
ATTACH_POLL_SECONDS = 1
ATTACH_BUFFER_CHUNKS = 64
WATCH_REQUEST_GRACE_SECONDS = 5

_EXHAUSTED = object()


def handle_from_pod(pod: Any) -> WorkloadHandle:
    """
    Build a handle from a V1Pod or its JSON dict form.

    Returns:
        Handle whose phase is None only when the object had no status
    """
    if isinstance(pod, dict):
        metadata = pod.get("metadata") or {}
        status = pod.get("status")
        name = metadata.get("name") or metadata.get("generateName") or ""
        namespace = metadata.get("namespace") or "default"
        uid = metadata.get("uid")
        resource_version = metadata.get("resourceVersion")
        phase = None if status is None else PodPhase.parse(status.get("phase"))
    else:
        metadata = pod.metadata
        status = pod.status
        name = metadata.name or metadata.generate_name or ""
        namespace = metadata.namespace or "default"
        uid = metadata.uid
        resource_version = metadata.resource_version
        phase = None if status is None else PodPhase.parse(status.phase)

    return WorkloadHandle(
        name=name,
        namespace=namespace,
        phase=phase,
        uid=uid,
        resource_version=resource_version,
    )


def event_from_raw(event: Dict[str, Any]) -> Optional[WatchEvent]:
    """
    Convert a kubernetes.watch event dict into a WatchEvent.

    Returns:
        The event, or None for types the lifecycle does not model (BOOKMARK)
    """
    event_type = (event.get("type") or "").upper()

    if event_type == "ERROR":
        raw = event.get("raw_object") or event.get("object") or {}
        if not isinstance(raw, dict):
            raw = {}
        reason = raw.get("message") or raw.get("reason") or "watch error"
        return Error(reason=reason, code=raw.get("code"))

    builders = {"ADDED": Added, "MODIFIED": Modified, "DELETED": Deleted}
    builder = builders.get(event_type)
    if builder is None:
        return None
    return builder(handle_from_pod(event["object"]))


def deletion_result_from_body(body: Dict[str, Any]) -> DeletionResult:
    """Status bodies mean deletion is still in progress; anything else is the pod."""
    if body.get("kind") == "Status":
        return Pending(status=body)
    return Immediate(handle_from_pod(body))


def _api_error(exc: ApiException, pod: Optional[str], stage: str) -> ApiError:
    return ApiError(
        f"API server returned {exc.status}: {exc.reason}",
        status=exc.status,
        reason=exc.reason,
        pod=pod,
        stage=stage,
    )


def _as_bytes(data: Any) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


class _ThreadedIterator:
    """Pulls a blocking iterator one item at a time from a worker thread."""

    def __init__(self, iterator, pod: Optional[str], stage: str):
        self._iterator = iterator
        self._pod = pod
        self._stage = stage
        self._closed = False

    def __aiter__(self):
        return self

    async def _next_raw(self):
        if self._closed:
            raise StopAsyncIteration
        try:
            item = await asyncio.to_thread(next, self._iterator, _EXHAUSTED)
        except ApiException as exc:
            if self._closed:
                raise StopAsyncIteration
            raise _api_error(exc, self._pod, self._stage) from exc
        except (urllib3.exceptions.HTTPError, OSError) as exc:
            if self._closed:
                raise StopAsyncIteration
            raise TransportError(f"stream broke: {exc}", pod=self._pod, stage=self._stage) from exc
        if item is _EXHAUSTED:
            raise StopAsyncIteration
        return item


class KubeWatchStream(_ThreadedIterator):
    """Watch session over kubernetes.watch.Watch."""

    def __init__(self, watcher: k8s_watch.Watch, iterator, pod: Optional[str]):
        super().__init__(iterator, pod, "wait")
        self._watcher = watcher

    async def __anext__(self) -> WatchEvent:
        while True:
            event = event_from_raw(await self._next_raw())
            if event is not None:
                return event

    async def aclose(self) -> None:
        self._closed = True
        self._watcher.stop()


class KubeLogStream(_ThreadedIterator):
    """Log session over a non-preloaded urllib3 response."""

    def __init__(self, response, pod: str):
        super().__init__(response.stream(amt=LOG_CHUNK_SIZE, decode_content=True), pod, "logs")
        self._response = response

    async def __anext__(self) -> bytes:
        return await self._next_raw()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._response.close()
        self._response.release_conn()


class AttachChannel:
    """
    ByteChannel fed by the attach pump thread through a bounded queue.

    The pump thread blocks while ``maxsize`` chunks are waiting.
    """

    def __init__(self, maxsize: int = 0):
        self._queue: asyncio.Queue = asyncio.Queue(maxsize)
        self._buffer = b""
        self._eof = False

    async def put(self, chunk: Optional[bytes]) -> None:
        """Queue a chunk; None marks end-of-stream."""
        await self._queue.put(chunk)

    async def read(self, n: int = -1) -> bytes:
        if not self._buffer and not self._eof:
            chunk = await self._queue.get()
            if chunk is None:
                self._eof = True
            else:
                self._buffer = chunk

        if n < 0:
            n = len(self._buffer)
        data, self._buffer = self._buffer[:n], self._buffer[n:]
        return data

    def at_eof(self) -> bool:
        return self._eof and not self._buffer


def _resolve_status(
    future: asyncio.Future, payload: bytes, failure: Optional[TransportError] = None
) -> None:
    if future.done():
        return
    if not payload:
        if failure is not None:
            future.set_exception(failure)
        else:
            future.set_result(None)
        return
    try:
        future.set_result(ProcessStatus.from_status(json.loads(payload)))
    except (ValueError, AttributeError) as e:
        logger.warning(f"Unparseable status on error channel: {e}")
        future.set_result(None)


def _hand_off(loop, channel: AttachChannel, chunk: Optional[bytes], closing: Event) -> bool:
    """
    Block until the event loop has queued the chunk.

    Returns:
        False if the session was closed while waiting for room
    """
    queued = asyncio.run_coroutine_threadsafe(channel.put(chunk), loop)
    while True:
        try:
            queued.result(timeout=ATTACH_POLL_SECONDS)
            return True
        except FutureTimeoutError:
            if closing.is_set():
                queued.cancel()
                return False


def _pump_attach(ws, loop, stdout, stderr, status_future, closing: Event, pod: str) -> None:
    """
    Move websocket frames into the attach channels until the session ends.

    Runs in a daemon thread; always ends both channels and resolves the
    status. A connection lost before close() fails the status with
    TransportError unless the error channel already carried one.
    """
    error_payload = b""
    failure = None
    routes = [(STDOUT_CHANNEL, stdout), (STDERR_CHANNEL, stderr)]

    try:
        while True:
            still_open = ws.is_open()
            if still_open:
                ws.update(timeout=ATTACH_POLL_SECONDS)

            for channel, target in routes:
                data = ws.read_channel(channel)
                if data and target is not None:
                    if not _hand_off(loop, target, _as_bytes(data), closing):
                        return

            data = ws.read_channel(ERROR_CHANNEL)
            if data:
                error_payload += _as_bytes(data)

            if not still_open:
                break

    except Exception as e:
        if closing.is_set():
            logger.debug(f"Attach pump stopped after close: {e}")
        else:
            logger.warning(f"Attach connection to {pod} lost: {e}")
            failure = TransportError(f"attach connection lost: {e}", pod=pod, stage="attach")

    finally:
        for _, target in routes:
            if target is not None:
                _hand_off(loop, target, None, closing)
        loop.call_soon_threadsafe(_resolve_status, status_future, error_payload, failure)


class KubernetesLifecycleClient:
    """Namespaced LifecycleClient backed by kubernetes.client.CoreV1Api."""

    def __init__(self, core_api: k8s_client.CoreV1Api, namespace: str = "default"):
        """
        Initialize adapter.

        Args:
            core_api: Configured CoreV1Api
            namespace: Namespace all calls are scoped to
        """
        self.core_api = core_api
        self.namespace = namespace

    async def _call(self, stage: str, pod: Optional[str], fn, *args, **kwargs):
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except ApiException as exc:
            raise _api_error(exc, pod, stage) from exc
        except (urllib3.exceptions.HTTPError, OSError) as exc:
            raise TransportError(f"request failed: {exc}", pod=pod, stage=stage) from exc

    async def create(self, descriptor: WorkloadDescriptor) -> WorkloadHandle:
        pod = await self._call(
            "create",
            descriptor.name,
            self.core_api.create_namespaced_pod,
            self.namespace,
            descriptor.to_manifest(),
        )
        return handle_from_pod(pod)

    async def watch(self, params: WatchParams, since_revision: str) -> KubeWatchStream:
        watcher = k8s_watch.Watch()
        kwargs: Dict[str, Any] = {"resource_version": since_revision}
        if params.field_selector:
            kwargs["field_selector"] = params.field_selector
        if params.timeout_seconds is not None:
            kwargs["timeout_seconds"] = params.timeout_seconds
            kwargs["_request_timeout"] = params.timeout_seconds + WATCH_REQUEST_GRACE_SECONDS

        iterator = watcher.stream(self.core_api.list_namespaced_pod, self.namespace, **kwargs)
        return KubeWatchStream(watcher, iterator, pod=None)

    async def attach(self, name: str, params: AttachParams) -> AttachedProcess:
        kwargs: Dict[str, Any] = {
            "stdin": params.stdin,
            "stdout": params.stdout,
            "stderr": params.stderr,
            "tty": params.tty,
            "_preload_content": False,
            "binary": True,
        }
        if params.container:
            kwargs["container"] = params.container

        ws = await self._call(
            "attach",
            name,
            k8s_stream,
            self.core_api.connect_get_namespaced_pod_attach,
            name,
            self.namespace,
            **kwargs,
        )

        loop = asyncio.get_running_loop()
        stdout = AttachChannel(ATTACH_BUFFER_CHUNKS) if params.stdout else None
        stderr = AttachChannel(ATTACH_BUFFER_CHUNKS) if params.stderr else None
        status_future = loop.create_future()
        closing = Event()

        pump = Thread(
            target=_pump_attach,
            args=(ws, loop, stdout, stderr, status_future, closing, name),
            name=f"attach-{name}",
            daemon=True,
        )
        pump.start()
        logger.debug(f"Attached to {name}")

        async def _close():
            closing.set()
            await asyncio.to_thread(ws.close)

        return AttachedProcess(stdout, stderr, status_future, on_close=_close)

    async def log_stream(self, name: str, params: LogParams) -> KubeLogStream:
        kwargs: Dict[str, Any] = {
            "follow": params.follow,
            "timestamps": params.timestamps,
            "_preload_content": False,
        }
        if params.container:
            kwargs["container"] = params.container
        if params.tail_lines is not None:
            kwargs["tail_lines"] = params.tail_lines
        if params.since_seconds is not None:
            kwargs["since_seconds"] = params.since_seconds

        response = await self._call(
            "logs", name, self.core_api.read_namespaced_pod_log, name, self.namespace, **kwargs
        )
        return KubeLogStream(response, name)

    async def delete(self, name: str, params: DeleteParams) -> DeletionResult:
        body = k8s_client.V1DeleteOptions(
            grace_period_seconds=params.grace_period_seconds,
            propagation_policy=params.propagation_policy,
        )

        def _delete() -> Dict[str, Any]:
            response = self.core_api.delete_namespaced_pod(
                name, self.namespace, body=body, _preload_content=False
            )
            return json.loads(response.data)

        try:
            payload = await self._call("delete", name, _delete)
        except json.JSONDecodeError as exc:
            raise TransportError(f"undecodable delete response: {exc}", pod=name, stage="delete") from exc

        return deletion_result_from_body(payload)


def load_kube_client(namespace: str = "default") -> KubernetesLifecycleClient:
    """Load in-cluster config, falling back to kubeconfig."""
    try:
        k8s_config.load_incluster_config()
        logger.info("Loaded in-cluster config")
    except k8s_config.ConfigException:
        k8s_config.load_kube_config()
        logger.info("Loaded kubeconfig")
    return KubernetesLifecycleClient(k8s_client.CoreV1Api(), namespace=namespace)
