"""
Streams Module - Black Box Interface

Purpose: Forward attached process output to sinks
Interface: drain_attached(), ByteSink, LineSink and stock sinks
Hidden: Channel racing, chunk dropping, status consumption

Can be replaced with a thread-pool merge queue where no event loop exists.
"""

from .multiplexer import drain_attached
from .sinks import (
    BufferSink,
    ByteSink,
    LineCollector,
    LineSink,
    StreamByteSink,
    StreamLineSink,
)

__all__ = [
    "BufferSink",
    "ByteSink",
    "LineCollector",
    "LineSink",
    "StreamByteSink",
    "StreamLineSink",
    "drain_attached",
]
