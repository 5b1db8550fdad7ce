"""
Lifecycle Module - Black Box Interface

Purpose: Define how the rest of podpilot talks to the cluster
Interface: LifecycleClient protocol, shared data models, error taxonomy
Hidden: kubernetes client calls, websocket pumping, response decoding

Can be replaced with any client that satisfies LifecycleClient
(a different Kubernetes library, a fake for tests).
"""

from .errors import (
    ApiError,
    ChannelReadError,
    DeletionMismatch,
    InvalidWorkload,
    LogFailure,
    MissingStatus,
    PodLifecycleError,
    SinkError,
    StatusAlreadyTaken,
    StatusNotReady,
    TransportError,
    WatchTimedOut,
)
from .interfaces import ByteChannel, LifecycleClient, LogStream, WatchStream
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
    StatusSlot,
    WatchEvent,
    WatchParams,
    WorkloadDescriptor,
    WorkloadHandle,
)

__all__ = [
    "Added",
    "ApiError",
    "AttachedProcess",
    "AttachParams",
    "ByteChannel",
    "ChannelReadError",
    "Deleted",
    "DeleteParams",
    "DeletionMismatch",
    "DeletionResult",
    "Error",
    "Immediate",
    "InvalidWorkload",
    "LifecycleClient",
    "LogFailure",
    "LogParams",
    "LogStream",
    "MissingStatus",
    "Modified",
    "Pending",
    "PodLifecycleError",
    "PodPhase",
    "ProcessStatus",
    "SinkError",
    "StatusAlreadyTaken",
    "StatusNotReady",
    "StatusSlot",
    "TransportError",
    "WatchEvent",
    "WatchParams",
    "WatchStream",
    "WatchTimedOut",
    "WorkloadDescriptor",
    "WorkloadHandle",
]
