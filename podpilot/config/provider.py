"""Configuration provider following Black Box Design principles."""
import os
import shlex
from dataclasses import dataclass
from typing import List, Optional, Protocol

from ..modules.lifecycle.models import LogParams

DEFAULT_POD_COMMAND = "sh -c 'echo \"Hello, kube-rs!\" && sleep 10'"
OUTPUT_MODES = ("combined", "separate")


class ConfigurationError(ValueError):
    """An environment variable holds an unusable value."""


@dataclass
class WorkloadConfig:
    """Pod definition configuration."""
    name: str
    namespace: str
    image: str
    command: List[str]
    workload_file: Optional[str]


@dataclass
class WatchConfig:
    """Readiness watch configuration."""
    timeout_seconds: int
    client_grace_seconds: float


@dataclass
class LogConfig:
    """Log following configuration."""
    follow: bool
    container: Optional[str]
    tail_lines: Optional[int]
    since_seconds: Optional[int]
    timestamps: bool

    def to_params(self) -> LogParams:
        return LogParams(
            follow=self.follow,
            container=self.container,
            tail_lines=self.tail_lines,
            since_seconds=self.since_seconds,
            timestamps=self.timestamps,
        )


@dataclass
class OutputConfig:
    """Attached output configuration."""
    mode: str

    @property
    def separate(self) -> bool:
        """Whether stdout and stderr go to different sinks."""
        return self.mode == "separate"


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_workload_config(self) -> WorkloadConfig:
        """Get pod definition configuration."""
        ...

    def get_watch_config(self) -> WatchConfig:
        """Get readiness watch configuration."""
        ...

    def get_log_config(self) -> LogConfig:
        """Get log following configuration."""
        ...

    def get_output_config(self) -> OutputConfig:
        """Get attached output configuration."""
        ...

    def get_log_level(self) -> str:
        """Get logging level."""
        ...


def _int_env(key: str, default: str) -> int:
    value = os.getenv(key, default)
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {value!r}") from None


def _optional_int_env(key: str) -> Optional[int]:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return None
    return _int_env(key, value)


def _command_env(key: str, default: str) -> List[str]:
    value = os.getenv(key, default)
    try:
        return shlex.split(value)
    except ValueError as e:
        raise ConfigurationError(f"{key} is not a valid command line: {e}") from None


def _float_env(key: str, default: str) -> float:
    value = os.getenv(key, default)
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {value!r}") from None


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_workload_config(self) -> WorkloadConfig:
        """Get pod definition from environment variables."""
        return WorkloadConfig(
            name=os.getenv("POD_NAME", "test-kane8n"),
            namespace=os.getenv("POD_NAMESPACE", "default"),
            image=os.getenv("POD_IMAGE", "alpine"),
            command=_command_env("POD_COMMAND", DEFAULT_POD_COMMAND),
            workload_file=os.getenv("POD_WORKLOAD_FILE") or None,
        )

    def get_watch_config(self) -> WatchConfig:
        """Get readiness watch configuration from environment variables."""
        timeout = _int_env("WATCH_TIMEOUT_SECONDS", "10")
        if timeout <= 0:
            raise ConfigurationError(f"WATCH_TIMEOUT_SECONDS must be positive, got {timeout}")

        return WatchConfig(
            timeout_seconds=timeout,
            client_grace_seconds=_float_env("WATCH_CLIENT_GRACE_SECONDS", "5"),
        )

    def get_log_config(self) -> LogConfig:
        """Get log following configuration from environment variables."""
        return LogConfig(
            follow=os.getenv("LOG_FOLLOW", "true").lower() == "true",
            container=os.getenv("LOG_CONTAINER") or None,
            tail_lines=_optional_int_env("LOG_TAIL_LINES"),
            since_seconds=_optional_int_env("LOG_SINCE_SECONDS"),
            timestamps=os.getenv("LOG_TIMESTAMPS", "false").lower() == "true",
        )

    def get_output_config(self) -> OutputConfig:
        """Get attached output configuration from environment variables."""
        mode = os.getenv("OUTPUT_MODE", "combined").lower()
        if mode not in OUTPUT_MODES:
            raise ConfigurationError(f"OUTPUT_MODE must be one of {', '.join(OUTPUT_MODES)}, got {mode!r}")
        return OutputConfig(mode=mode)

    def get_log_level(self) -> str:
        return os.getenv("LOG_LEVEL", "INFO").upper()
