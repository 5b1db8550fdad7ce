"""
Podpilot lifecycle data models.

These models define the structure of all data passed between the
cluster client and the lifecycle components.
"""

import inspect
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import StatusAlreadyTaken, StatusNotReady

DNS_LABEL_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")

# Enums


class PodPhase(str, Enum):
    """Phase reported in a pod's status."""

    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "PodPhase":
        """Map a raw phase string, treating anything unrecognised as Unknown."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


# Workload


class WorkloadDescriptor(BaseModel):
    """Declarative definition of the single pod to run."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Pod name", min_length=1, max_length=63)
    namespace: str = Field(default="default", description="Target namespace", max_length=63)
    image: str = Field(..., description="Container image reference", min_length=1)
    command: Tuple[str, ...] = Field(..., description="Entry command", min_length=1)
    container_name: Optional[str] = Field(None, description="Container name, defaults to pod name")

    @field_validator("name", "namespace", "container_name")
    @classmethod
    def validate_dns_label(cls, v):
        """Names must be RFC 1123 labels."""
        if v is not None and not DNS_LABEL_PATTERN.match(v):
            raise ValueError(f"{v!r} is not a valid DNS-1123 label")
        return v

    @field_validator("image")
    @classmethod
    def validate_image(cls, v):
        if not v.strip():
            raise ValueError("image must not be blank")
        return v

    @property
    def container(self) -> str:
        return self.container_name or self.name

    def to_manifest(self) -> Dict[str, Any]:
        """Render as a v1/Pod manifest."""
        return {
            "apiVersion": "v1",
            "kind": "Pod",
            "metadata": {"name": self.name, "namespace": self.namespace},
            "spec": {
                "containers": [
                    {
                        "name": self.container,
                        "image": self.image,
                        "command": list(self.command),
                    }
                ],
            },
        }


@dataclass(frozen=True)
class WorkloadHandle:
    """Server-side view of the pod.

    ``phase`` is None when the object carried no status at all.
    """

    name: str
    namespace: str = "default"
    phase: Optional[PodPhase] = None
    uid: Optional[str] = None
    resource_version: Optional[str] = None


# Watch events


@dataclass(frozen=True)
class WatchEvent:
    """Base of the watch event variants."""


@dataclass(frozen=True)
class Added(WatchEvent):
    handle: WorkloadHandle


@dataclass(frozen=True)
class Modified(WatchEvent):
    handle: WorkloadHandle


@dataclass(frozen=True)
class Deleted(WatchEvent):
    handle: WorkloadHandle


@dataclass(frozen=True)
class Error(WatchEvent):
    reason: str
    code: Optional[int] = None


# Attached process


@dataclass(frozen=True)
class ProcessStatus:
    """Terminal status of an attached process."""

    status: str
    exit_code: Optional[int] = None
    reason: Optional[str] = None
    message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == "Success"

    @classmethod
    def from_status(cls, doc: Dict[str, Any]) -> "ProcessStatus":
        """
        Build from a v1.Status document as sent on the attach error channel.

        Args:
            doc: Decoded Status object

        Returns:
            ProcessStatus with exit code 0 on success, or the code taken
            from the ExitCode cause on NonZeroExitCode
        """
        status = doc.get("status") or "Failure"
        reason = doc.get("reason")
        message = doc.get("message")

        if status == "Success":
            return cls(status=status, exit_code=0, reason=reason, message=message)

        exit_code = None
        causes = (doc.get("details") or {}).get("causes") or []
        for cause in causes:
            if cause.get("reason") == "ExitCode":
                try:
                    exit_code = int(cause.get("message"))
                except (TypeError, ValueError):
                    exit_code = None
                break

        return cls(status=status, exit_code=exit_code, reason=reason, message=message)


class StatusSlot:
    """Hands out the terminal status awaitable exactly once."""

    def __init__(self, awaitable: Awaitable[Optional[ProcessStatus]]):
        self._awaitable = awaitable
        self._taken = False

    @property
    def taken(self) -> bool:
        return self._taken

    def take(self) -> Awaitable[Optional[ProcessStatus]]:
        if self._taken:
            raise StatusAlreadyTaken("process status has already been taken")
        self._taken = True
        awaitable, self._awaitable = self._awaitable, None
        return awaitable


class AttachedProcess:
    """
    Live attach session.

    Holds the stdout/stderr byte channels, the terminal status slot and
    the callback that releases the underlying connection.
    """

    def __init__(
        self,
        stdout: Optional[Any],
        stderr: Optional[Any],
        status: Awaitable[Optional[ProcessStatus]],
        on_close: Optional[Callable[[], Any]] = None,
    ):
        self.stdout = stdout
        self.stderr = stderr
        self._status = StatusSlot(status)
        self._on_close = on_close
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def channels_drained(self) -> bool:
        return all(ch is None or ch.at_eof() for ch in (self.stdout, self.stderr))

    async def take_status(self) -> Optional[ProcessStatus]:
        """
        Await the terminal status.

        Raises:
            StatusAlreadyTaken: On a second call
            StatusNotReady: If an output channel has not ended yet
        """
        if self._status.taken:
            raise StatusAlreadyTaken("process status has already been taken")
        if not self.channels_drained:
            raise StatusNotReady("output channels must reach end-of-stream first")
        return await self._status.take()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            result = self._on_close()
            if inspect.isawaitable(result):
                await result

    async def __aenter__(self) -> "AttachedProcess":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


# Deletion results


@dataclass(frozen=True)
class DeletionResult:
    """Base of the deletion result variants."""


@dataclass(frozen=True)
class Immediate(DeletionResult):
    handle: WorkloadHandle


@dataclass(frozen=True)
class Pending(DeletionResult):
    status: Dict[str, Any] = field(default_factory=dict)


# Client call parameters


@dataclass(frozen=True)
class WatchParams:
    field_selector: Optional[str] = None
    timeout_seconds: Optional[int] = None


@dataclass(frozen=True)
class AttachParams:
    container: Optional[str] = None
    stdin: bool = False
    stdout: bool = True
    stderr: bool = True
    tty: bool = False


@dataclass(frozen=True)
class LogParams:
    follow: bool = False
    container: Optional[str] = None
    tail_lines: Optional[int] = None
    since_seconds: Optional[int] = None
    timestamps: bool = False


@dataclass(frozen=True)
class DeleteParams:
    """Deletion options; None leaves the server default in place."""

    grace_period_seconds: Optional[int] = None
    propagation_policy: Optional[str] = None
