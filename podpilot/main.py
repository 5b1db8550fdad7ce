#!/usr/bin/env python3
"""
Podpilot - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Builds the workload descriptor and cluster client
3. Runs the pod workflow

All lifecycle logic is in the modules, following black box principles.
"""

import asyncio
import logging
import logging.config as log_config
import sys
from typing import Optional

from podpilot.config.provider import (
    ConfigProvider,
    ConfigurationError,
    EnvConfigProvider,
    WorkloadConfig,
)
from podpilot.logging_config import get_logging_config
from podpilot.modules.lifecycle import LifecycleClient, PodLifecycleError, WorkloadDescriptor
from podpilot.modules.lifecycle.kube_client import load_kube_client
from podpilot.modules.streams import StreamByteSink, StreamLineSink
from podpilot.modules.workflow import PodWorkflow, WorkflowResult, WorkflowSettings
from podpilot.modules.workload import build_descriptor, load_descriptor

logger = logging.getLogger("podpilot")


def descriptor_from_config(workload: WorkloadConfig) -> WorkloadDescriptor:
    """A workload file, when configured, wins over the individual settings."""
    if workload.workload_file:
        return load_descriptor(workload.workload_file)
    return build_descriptor(
        name=workload.name,
        image=workload.image,
        command=workload.command,
        namespace=workload.namespace,
    )


def settings_from_config(config_provider: ConfigProvider) -> WorkflowSettings:
    watch_config = config_provider.get_watch_config()
    return WorkflowSettings(
        watch_timeout_seconds=watch_config.timeout_seconds,
        client_grace_seconds=watch_config.client_grace_seconds,
        log_params=config_provider.get_log_config().to_params(),
        separate_outputs=config_provider.get_output_config().separate,
    )


async def run(
    config_provider: ConfigProvider, client: Optional[LifecycleClient] = None
) -> WorkflowResult:
    """
    Run the configured pod to completion.

    Args:
        config_provider: Configuration source
        client: Lifecycle client; a kubernetes client is loaded when omitted

    Returns:
        WorkflowResult of the run
    """
    descriptor = descriptor_from_config(config_provider.get_workload_config())
    settings = settings_from_config(config_provider)

    if client is None:
        client = load_kube_client(descriptor.namespace)

    workflow = PodWorkflow(
        client,
        descriptor,
        stdout_sink=StreamByteSink(sys.stdout.buffer),
        stderr_sink=StreamByteSink(sys.stderr.buffer),
        line_sink=StreamLineSink(sys.stdout),
        settings=settings,
    )
    return await workflow.run()


def main() -> int:
    """Main entry point."""
    config_provider = EnvConfigProvider()
    log_config.dictConfig(get_logging_config(config_provider.get_log_level()))

    try:
        result = asyncio.run(run(config_provider))
    except PodLifecycleError as e:
        logger.error(f"Pod lifecycle failed: {e}")
        return 1
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2
    except KeyboardInterrupt:
        logger.info("Stopped by user")
        return 130
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1

    status = result.process_status
    logger.info(
        f"Pod {result.handle.name} finished "
        f"(exit code {status.exit_code if status else 'unknown'}, {result.log_lines} log lines)"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
