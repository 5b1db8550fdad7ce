"""
Shared pytest fixtures for Podpilot tests.

This module provides common fixtures including:
- Fake lifecycle client, watch, attach and log sessions
- In-memory byte and line sinks
- Environment isolation for config tests
"""

import os
import sys

import pytest

# Add parent directory and tests directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from fixtures.fake_cluster import FakeLifecycleClient  # noqa: E402
from podpilot.modules.streams import BufferSink, LineCollector  # noqa: E402

CONFIG_ENV_VARS = [
    "POD_NAME",
    "POD_NAMESPACE",
    "POD_IMAGE",
    "POD_COMMAND",
    "POD_WORKLOAD_FILE",
    "WATCH_TIMEOUT_SECONDS",
    "WATCH_CLIENT_GRACE_SECONDS",
    "LOG_FOLLOW",
    "LOG_CONTAINER",
    "LOG_TAIL_LINES",
    "LOG_SINCE_SECONDS",
    "LOG_TIMESTAMPS",
    "OUTPUT_MODE",
    "LOG_LEVEL",
]


@pytest.fixture
def byte_sink():
    """In-memory sink for attached output."""
    return BufferSink()


@pytest.fixture
def err_sink():
    """Second in-memory sink for separate-output mode."""
    return BufferSink()


@pytest.fixture
def line_sink():
    """In-memory sink for log lines."""
    return LineCollector()


@pytest.fixture
def fake_client():
    """Lifecycle client with default (empty) sessions."""
    return FakeLifecycleClient()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every podpilot config variable from the environment."""
    for key in CONFIG_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch
