import codecs
import logging

from ..lifecycle.errors import LogFailure, SinkError, TransportError
from ..lifecycle.interfaces import LifecycleClient
from ..lifecycle.models import LogParams
from ..streams.sinks import LineSink

logger = logging.getLogger(__name__)


def _emit(sink: LineSink, line: str, name: str) -> None:
    try:
        sink.write_line(line.removesuffix("\r"))
    except OSError as e:
        raise SinkError(f"log sink rejected line: {e}", pod=name, stage="logs") from e


async def follow_logs(client: LifecycleClient, name: str, options: LogParams, sink: LineSink) -> int:
    """
    Forward each log line of the pod to the sink as it arrives.

    With options.follow the stream only ends when the server closes it;
    cancel the calling task to stop earlier. A trailing fragment without
    a newline is forwarded as a final line.

    Returns:
        Number of lines forwarded

    Raises:
        LogFailure: Stream could not be opened, broke, or was not UTF-8
    """
    try:
        stream = await client.log_stream(name, options)
    except TransportError as e:
        raise LogFailure(f"could not open log stream: {e.message}", pod=name) from e

    decoder = codecs.getincrementaldecoder("utf-8")()
    pending = ""
    count = 0

    try:
        async for chunk in stream:
            pending += decoder.decode(chunk)
            *lines, pending = pending.split("\n")
            for line in lines:
                _emit(sink, line, name)
                count += 1

        pending += decoder.decode(b"", final=True)
        if pending:
            _emit(sink, pending, name)
            count += 1

    except UnicodeDecodeError as e:
        raise LogFailure(f"log stream is not valid UTF-8: {e}", pod=name) from e
    except TransportError as e:
        raise LogFailure(f"log stream broke: {e.message}", pod=name) from e
    except OSError as e:
        raise LogFailure(f"log stream broke: {e}", pod=name) from e

    finally:
        await stream.aclose()

    logger.debug(f"Log stream for {name} ended after {count} lines")
    return count
