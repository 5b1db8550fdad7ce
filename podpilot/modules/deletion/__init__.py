"""
Deletion Module - Black Box Interface

Purpose: Delete the pod and confirm the server deleted the right one
Interface: delete_and_confirm()
Hidden: Result variant handling, identity check
"""

from .confirmer import delete_and_confirm

__all__ = ["delete_and_confirm"]
