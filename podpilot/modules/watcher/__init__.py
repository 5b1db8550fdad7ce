"""
Watcher Module - Black Box Interface

Purpose: Block until the pod reaches the Running phase
Interface: wait_until_running()
Hidden: Watch filtering, event dispatch, deadline handling

Can be replaced with a polling implementation.
"""

from .readiness import wait_until_running

__all__ = ["wait_until_running"]
