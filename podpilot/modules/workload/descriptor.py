"""
Workload descriptor construction.

Builds the immutable definition of the single pod a run manages,
either from arguments or from a YAML file.
"""

import logging
import shlex
from pathlib import Path
from typing import Optional, Sequence, Union

import yaml
from pydantic import ValidationError

from ..lifecycle.errors import InvalidWorkload
from ..lifecycle.models import WorkloadDescriptor

logger = logging.getLogger(__name__)


def build_descriptor(
    name: str,
    image: str,
    command: Union[str, Sequence[str]],
    namespace: str = "default",
    container_name: Optional[str] = None,
) -> WorkloadDescriptor:
    """
    Build a validated workload descriptor.

    Args:
        name: Pod name (DNS-1123 label)
        image: Container image reference
        command: Entry command as argv, or a single string split with shlex
        namespace: Target namespace
        container_name: Container name, defaults to the pod name

    Returns:
        Frozen WorkloadDescriptor

    Raises:
        InvalidWorkload: If any field fails validation
    """
    if isinstance(command, str):
        command = shlex.split(command)

    try:
        return WorkloadDescriptor(
            name=name,
            namespace=namespace,
            image=image,
            command=tuple(command),
            container_name=container_name,
        )
    except ValidationError as e:
        raise InvalidWorkload(f"invalid workload: {e}", pod=name) from e


def load_descriptor(path: Union[str, Path]) -> WorkloadDescriptor:
    """
    Load a descriptor from a YAML file.

    Expected keys: name, image, command, and optionally namespace and
    container.
    """
    path = Path(path)
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise InvalidWorkload(f"{path} must contain a mapping")

    missing = [key for key in ("name", "image", "command") if not data.get(key)]
    if missing:
        raise InvalidWorkload(f"{path} is missing keys: {', '.join(missing)}", pod=data.get("name"))

    logger.debug(f"Loaded workload {data['name']} from {path}")
    return build_descriptor(
        name=data["name"],
        image=data["image"],
        command=data["command"],
        namespace=data.get("namespace", "default"),
        container_name=data.get("container"),
    )
