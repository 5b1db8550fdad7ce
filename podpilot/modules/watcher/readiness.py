import asyncio
import logging

from ..lifecycle.errors import MissingStatus, WatchTimedOut
from ..lifecycle.interfaces import LifecycleClient
from ..lifecycle.models import (
    Added,
    Deleted,
    Error,
    Modified,
    PodPhase,
    WatchParams,
    WorkloadHandle,
)

logger = logging.getLogger(__name__)

DEFAULT_WATCH_TIMEOUT = 10
DEFAULT_CLIENT_GRACE = 5


async def wait_until_running(
    client: LifecycleClient,
    name: str,
    timeout_seconds: int = DEFAULT_WATCH_TIMEOUT,
    client_grace_seconds: float = DEFAULT_CLIENT_GRACE,
) -> WorkloadHandle:
    """
    Block until the pod is Running.

    The server closes the watch after timeout_seconds; the client gives up
    client_grace_seconds later in case the server never does.

    Args:
        client: Namespaced lifecycle client
        name: Pod name
        timeout_seconds: Server-side watch timeout
        client_grace_seconds: Extra client-side allowance

    Returns:
        Handle from the Modified event that reported Running

    Raises:
        WatchTimedOut: Stream ended or deadline passed before Running
        MissingStatus: A Modified event carried no status
        TransportError: The watch connection failed
    """
    params = WatchParams(field_selector=f"metadata.name={name}", timeout_seconds=timeout_seconds)
    stream = None

    try:
        async with asyncio.timeout(timeout_seconds + client_grace_seconds):
            stream = await client.watch(params, "0")

            async for event in stream:
                if isinstance(event, Added):
                    logger.info(f"Added {event.handle.name}")

                elif isinstance(event, Modified):
                    handle = event.handle
                    if handle.phase is None:
                        logger.error(f"Pod {handle.name} was modified without a status")
                        raise MissingStatus("modified pod has no status", pod=name)
                    if handle.phase == PodPhase.RUNNING:
                        logger.info(f"Ready to attach to {handle.name}")
                        return handle
                    logger.debug(f"Pod {handle.name} is {handle.phase.value}")

                elif isinstance(event, Deleted):
                    logger.debug(f"Ignoring deletion of {event.handle.name} during watch")

                elif isinstance(event, Error):
                    logger.warning(f"Watch error event ignored: {event.reason} ({event.code})")

    except TimeoutError:
        raise WatchTimedOut(
            f"pod not Running within {timeout_seconds + client_grace_seconds}s (client deadline)",
            pod=name,
        ) from None

    finally:
        if stream is not None:
            await stream.aclose()

    raise WatchTimedOut(f"watch closed after {timeout_seconds}s before pod was Running", pod=name)
