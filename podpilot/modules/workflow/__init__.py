"""
Workflow Module - Black Box Interface

Purpose: Run the pod lifecycle stages in order
Interface: PodWorkflow.run(), WorkflowSettings, WorkflowResult
Hidden: Stage sequencing, error tagging

Depends only on the other modules' public interfaces.
"""

from .workflow import PodWorkflow, WorkflowResult, WorkflowSettings

__all__ = ["PodWorkflow", "WorkflowResult", "WorkflowSettings"]
