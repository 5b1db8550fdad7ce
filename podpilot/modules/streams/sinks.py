"""Output sinks for attached process bytes and log lines."""
from typing import IO, Any, List, Protocol


class ByteSink(Protocol):
    """Accepts raw output chunks. Raises OSError on failure."""

    def write(self, data: bytes) -> Any:
        ...

    def flush(self) -> None:
        ...


class LineSink(Protocol):
    """Accepts decoded log lines without their terminator. Raises OSError on failure."""

    def write_line(self, line: str) -> None:
        ...


class StreamByteSink:
    """Writes chunks to a binary stream such as sys.stdout.buffer."""

    def __init__(self, stream: IO[bytes]):
        self.stream = stream

    def write(self, data: bytes) -> int:
        written = self.stream.write(data)
        self.stream.flush()
        return written

    def flush(self) -> None:
        self.stream.flush()


class StreamLineSink:
    """Writes one line per record to a text stream."""

    def __init__(self, stream: IO[str]):
        self.stream = stream

    def write_line(self, line: str) -> None:
        self.stream.write(line + "\n")
        self.stream.flush()


class BufferSink:
    """In-memory byte sink that keeps chunk boundaries."""

    def __init__(self):
        self.chunks: List[bytes] = []

    def write(self, data: bytes) -> int:
        self.chunks.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        pass

    @property
    def data(self) -> bytes:
        return b"".join(self.chunks)


class LineCollector:
    """In-memory line sink."""

    def __init__(self):
        self.lines: List[str] = []

    def write_line(self, line: str) -> None:
        self.lines.append(line)
