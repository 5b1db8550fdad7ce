"""
Workload Module - Black Box Interface

Purpose: Build the declarative definition of the pod to run
Interface: build_descriptor(), load_descriptor()
Hidden: Validation rules, command splitting, YAML parsing

Pure data, no cluster access.
"""

from .descriptor import build_descriptor, load_descriptor

__all__ = ["build_descriptor", "load_descriptor"]
