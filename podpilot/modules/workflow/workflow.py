"""
Pod workflow - sequences the lifecycle stages.

create -> wait -> attach -> logs -> delete. Every stage fails fast: an
error aborts the remaining stages, with no best-effort cleanup.
"""

import logging
import shlex
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Optional

from ..deletion import delete_and_confirm
from ..lifecycle.errors import PodLifecycleError
from ..lifecycle.interfaces import LifecycleClient
from ..lifecycle.models import (
    AttachParams,
    DeleteParams,
    DeletionResult,
    LogParams,
    ProcessStatus,
    WorkloadDescriptor,
    WorkloadHandle,
)
from ..logs import follow_logs
from ..streams import ByteSink, LineSink, drain_attached
from ..watcher import wait_until_running
from ..watcher.readiness import DEFAULT_CLIENT_GRACE, DEFAULT_WATCH_TIMEOUT

logger = logging.getLogger(__name__)


@dataclass
class WorkflowSettings:
    """Per-stage options for a run."""

    watch_timeout_seconds: int = DEFAULT_WATCH_TIMEOUT
    client_grace_seconds: float = DEFAULT_CLIENT_GRACE
    attach_params: AttachParams = field(default_factory=AttachParams)
    log_params: LogParams = field(default_factory=lambda: LogParams(follow=True))
    delete_params: DeleteParams = field(default_factory=DeleteParams)
    separate_outputs: bool = False


@dataclass
class WorkflowResult:
    """What each stage produced."""

    handle: WorkloadHandle
    process_status: Optional[ProcessStatus]
    log_lines: int
    deletion: DeletionResult


class PodWorkflow:
    """Runs one pod from creation to confirmed deletion."""

    def __init__(
        self,
        client: LifecycleClient,
        descriptor: WorkloadDescriptor,
        stdout_sink: ByteSink,
        line_sink: LineSink,
        stderr_sink: Optional[ByteSink] = None,
        settings: Optional[WorkflowSettings] = None,
    ):
        """
        Initialize workflow.

        Args:
            client: Lifecycle client scoped to the descriptor's namespace
            descriptor: Pod to run
            stdout_sink: Attached output (both channels in combined mode)
            line_sink: Destination for log lines
            stderr_sink: Attached stderr in separate mode
            settings: Stage options
        """
        self.client = client
        self.descriptor = descriptor
        self.stdout_sink = stdout_sink
        self.stderr_sink = stderr_sink
        self.line_sink = line_sink
        self.settings = settings or WorkflowSettings()

        if self.settings.separate_outputs and stderr_sink is None:
            raise ValueError("separate_outputs requires a stderr sink")

    @asynccontextmanager
    async def _stage(self, stage: str):
        """Tag lifecycle errors raised inside with this pod and stage."""
        logger.debug(f"Entering stage {stage} for {self.descriptor.name}")
        try:
            yield
        except PodLifecycleError as e:
            if e.pod is None:
                e.pod = self.descriptor.name
            if e.stage is None:
                e.stage = stage
            raise

    async def run(self) -> WorkflowResult:
        name = self.descriptor.name
        settings = self.settings

        async with self._stage("create"):
            logger.info(f"Creating pod {name} running {shlex.join(self.descriptor.command)}")
            await self.client.create(self.descriptor)

        async with self._stage("wait"):
            handle = await wait_until_running(
                self.client,
                name,
                timeout_seconds=settings.watch_timeout_seconds,
                client_grace_seconds=settings.client_grace_seconds,
            )

        async with self._stage("attach"):
            process = await self.client.attach(name, settings.attach_params)
            err_sink = self.stderr_sink if settings.separate_outputs else None
            status = await drain_attached(process, self.stdout_sink, err_sink=err_sink)

        async with self._stage("logs"):
            logger.info(f"Fetching logs for {name}")
            log_lines = await follow_logs(self.client, name, settings.log_params, self.line_sink)

        async with self._stage("delete"):
            deletion = await delete_and_confirm(self.client, name, settings.delete_params)

        return WorkflowResult(
            handle=handle,
            process_status=status,
            log_lines=log_lines,
            deletion=deletion,
        )
