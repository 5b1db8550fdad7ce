"""
Unit tests for lifecycle data models and errors.
"""

import pytest

from fixtures.fake_cluster import FakeChannel, StatusProbe
from podpilot.modules.lifecycle import (
    AttachedProcess,
    DeletionMismatch,
    PodPhase,
    ProcessStatus,
    StatusAlreadyTaken,
    StatusSlot,
    TransportError,
)


class TestPodPhase:
    """Test phase parsing."""

    @pytest.mark.parametrize("raw", ["Pending", "Running", "Succeeded", "Failed", "Unknown"])
    def test_known_phases(self, raw):
        assert PodPhase.parse(raw).value == raw

    @pytest.mark.parametrize("raw", [None, "", "running", "Terminating"])
    def test_unrecognised_phases(self, raw):
        assert PodPhase.parse(raw) == PodPhase.UNKNOWN


class TestProcessStatus:
    """Test parsing of the attach error channel status."""

    def test_success(self):
        status = ProcessStatus.from_status({"metadata": {}, "status": "Success"})

        assert status.success
        assert status.exit_code == 0

    def test_non_zero_exit(self):
        status = ProcessStatus.from_status({
            "status": "Failure",
            "message": "command terminated with non-zero exit code",
            "reason": "NonZeroExitCode",
            "details": {"causes": [{"reason": "ExitCode", "message": "137"}]},
        })

        assert not status.success
        assert status.exit_code == 137
        assert status.reason == "NonZeroExitCode"

    def test_failure_without_exit_code(self):
        status = ProcessStatus.from_status({"status": "Failure", "reason": "InternalError"})

        assert status.exit_code is None
        assert status.reason == "InternalError"

    def test_garbled_exit_code(self):
        status = ProcessStatus.from_status({
            "status": "Failure",
            "details": {"causes": [{"reason": "ExitCode", "message": "n/a"}]},
        })
        assert status.exit_code is None


class TestStatusSlot:
    """Test single consumption of the terminal status."""

    @pytest.mark.asyncio
    async def test_take_once(self):
        probe = StatusProbe(ProcessStatus(status="Success", exit_code=0))
        slot = StatusSlot(probe)

        assert (await slot.take()).exit_code == 0
        assert slot.taken
        with pytest.raises(StatusAlreadyTaken):
            slot.take()
        assert probe.reads == 1


class TestAttachedProcess:
    """Test session bookkeeping."""

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        calls = []
        process = AttachedProcess(FakeChannel(), FakeChannel(), StatusProbe(None), on_close=lambda: calls.append(1))

        await process.close()
        await process.close()

        assert process.closed
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_async_close_callback(self):
        calls = []

        async def on_close():
            calls.append("closed")

        async with AttachedProcess(None, None, StatusProbe(None), on_close=on_close) as process:
            assert process.channels_drained

        assert calls == ["closed"]


class TestErrors:
    """Test error context rendering."""

    def test_context_in_message(self):
        error = TransportError("connection reset", pod="test-kane8n", stage="attach")
        assert str(error) == "[stage=attach pod=test-kane8n] connection reset"

    def test_without_context(self):
        assert str(TransportError("connection reset")) == "connection reset"

    def test_mismatch_fields(self):
        error = DeletionMismatch(expected="a", actual="b")

        assert error.pod == "a"
        assert error.stage == "delete"
