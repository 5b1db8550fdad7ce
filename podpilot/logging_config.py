"""
Logging configuration that keeps kubernetes client chatter out of the way
"""

import logging
import logging.config
from typing import Any, Dict

NOISY_LOGGERS = ("kubernetes", "urllib3", "websocket")


class KubeClientNoiseFilter(logging.Filter):
    """Filter to suppress debug records from the kubernetes client stack."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Drop DEBUG records from client libraries, keep everything else."""
        if record.levelno <= logging.DEBUG:
            if record.name.split(".")[0] in NOISY_LOGGERS:
                return False
        return True


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration; stdout stays reserved for pod output."""
    filters = [] if level == "DEBUG" else ["kube_client_noise_filter"]

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "kube_client_noise_filter": {
                "()": KubeClientNoiseFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr",
                "filters": filters
            }
        },
        "loggers": {
            "podpilot": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            }
        },
        "root": {
            "level": level,
            "handlers": ["default"]
        }
    }
