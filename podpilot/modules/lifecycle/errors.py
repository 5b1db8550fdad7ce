"""Error taxonomy for the pod lifecycle."""

from typing import Optional


class PodLifecycleError(Exception):
    """Base class for failures that abort the workflow.

    Every error knows which pod and which stage it belongs to so that
    "never became ready" can be told apart from "attach broke" or
    "delete returned the wrong pod".
    """

    default_stage: Optional[str] = None

    def __init__(self, message: str, pod: Optional[str] = None, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.pod = pod
        self.stage = stage or self.default_stage

    def __str__(self) -> str:
        context = []
        if self.stage:
            context.append(f"stage={self.stage}")
        if self.pod:
            context.append(f"pod={self.pod}")
        if not context:
            return self.message
        return f"[{' '.join(context)}] {self.message}"


class TransportError(PodLifecycleError):
    """Connectivity or protocol failure talking to the control plane."""


class ApiError(TransportError):
    """The API server answered with an error status."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        reason: Optional[str] = None,
        pod: Optional[str] = None,
        stage: Optional[str] = None,
    ):
        super().__init__(message, pod=pod, stage=stage)
        self.status = status
        self.reason = reason


class WatchTimedOut(PodLifecycleError):
    """The pod did not reach Running before the watch deadline."""

    default_stage = "wait"


class MissingStatus(PodLifecycleError):
    """A Modified event arrived for a pod object without any status."""

    default_stage = "wait"


class LogFailure(PodLifecycleError):
    """Decoding or streaming failed while following logs."""

    default_stage = "logs"


class DeletionMismatch(PodLifecycleError):
    """The API server acknowledged deletion of a different pod."""

    default_stage = "delete"

    def __init__(self, expected: str, actual: str):
        super().__init__(
            f"deleted pod {actual!r} does not match requested pod {expected!r}",
            pod=expected,
        )
        self.expected = expected
        self.actual = actual


class SinkError(PodLifecycleError):
    """An output sink refused a write."""


class InvalidWorkload(PodLifecycleError):
    """The workload descriptor did not validate."""

    default_stage = "build"


class ChannelReadError(Exception):
    """A single chunk on an attach channel could not be read."""


class StatusAlreadyTaken(RuntimeError):
    """The terminal process status was already consumed."""


class StatusNotReady(RuntimeError):
    """The terminal status was requested before both channels ended."""
