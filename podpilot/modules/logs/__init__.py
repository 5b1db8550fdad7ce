"""
Logs Module - Black Box Interface

Purpose: Follow a pod's log stream line by line
Interface: follow_logs()
Hidden: Incremental decoding, line splitting, trailing fragment policy
"""

from .follower import follow_logs

__all__ = ["follow_logs"]
