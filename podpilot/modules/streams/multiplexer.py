"""
Attached output multiplexing.

Drains the stdout and stderr channels of an attached process, either
merged into one sink or kept apart in two, then reads the terminal
status once.
"""

import asyncio
import logging
from typing import Dict, Optional

from ..lifecycle.errors import ChannelReadError, SinkError, TransportError
from ..lifecycle.interfaces import ByteChannel
from ..lifecycle.models import AttachedProcess, ProcessStatus
from .sinks import ByteSink

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8192


async def _read_chunk(channel: ByteChannel, name: str, chunk_size: int) -> Optional[bytes]:
    """Read one chunk; None means the chunk was malformed and dropped."""
    try:
        return await channel.read(chunk_size)
    except ChannelReadError as e:
        logger.debug(f"Dropped malformed chunk on {name}: {e}")
        return None
    except OSError as e:
        raise TransportError(f"{name} channel failed: {e}", stage="attach") from e


def _forward(sink: ByteSink, chunk: bytes) -> None:
    try:
        sink.write(chunk)
    except OSError as e:
        raise SinkError(f"output sink rejected write: {e}", stage="attach") from e


async def _drain_combined(channels: Dict[str, ByteChannel], sink: ByteSink, chunk_size: int) -> None:
    """
    Race the channels and forward whichever chunk arrives first.

    Only one read per channel is ever in flight, so order within a
    channel is kept; order across channels is arrival order.
    """
    pending: Dict[asyncio.Future, str] = {
        asyncio.ensure_future(_read_chunk(channel, name, chunk_size)): name
        for name, channel in channels.items()
    }

    try:
        while pending:
            done, _ = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                name = pending.pop(task)
                chunk = task.result()

                if chunk == b"":
                    logger.debug(f"{name} reached end-of-stream")
                    continue

                if chunk:
                    _forward(sink, chunk)

                read = asyncio.ensure_future(_read_chunk(channels[name], name, chunk_size))
                pending[read] = name

    finally:
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


async def _pump(channel: Optional[ByteChannel], name: str, sink: ByteSink, chunk_size: int) -> None:
    if channel is None:
        return
    while True:
        chunk = await _read_chunk(channel, name, chunk_size)
        if chunk == b"":
            logger.debug(f"{name} reached end-of-stream")
            return
        if chunk:
            _forward(sink, chunk)


async def _drain_separate(
    process: AttachedProcess, sink: ByteSink, err_sink: ByteSink, chunk_size: int
) -> None:
    tasks = [
        asyncio.ensure_future(_pump(process.stdout, "stdout", sink, chunk_size)),
        asyncio.ensure_future(_pump(process.stderr, "stderr", err_sink, chunk_size)),
    ]
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def drain_attached(
    process: AttachedProcess,
    sink: ByteSink,
    err_sink: Optional[ByteSink] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Optional[ProcessStatus]:
    """
    Drain both output channels and return the terminal status.

    Args:
        process: Attached session; closed when this returns or raises
        sink: Destination for stdout, and for stderr in combined mode
        err_sink: When given, stderr goes here instead (separate mode)
        chunk_size: Max bytes per read

    Returns:
        Terminal status, or None if the server reported none

    Raises:
        SinkError: A sink write failed
        TransportError: A channel failed outright
    """
    try:
        if err_sink is None:
            channels = {
                name: channel
                for name, channel in (("stdout", process.stdout), ("stderr", process.stderr))
                if channel is not None
            }
            await _drain_combined(channels, sink, chunk_size)
        else:
            await _drain_separate(process, sink, err_sink, chunk_size)

        status = await process.take_status()
        if status is not None:
            logger.info(f"Process status: {status}")
        else:
            logger.info("Attached process ended without a status")
        return status

    finally:
        await process.close()
