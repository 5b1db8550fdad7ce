"""
Podpilot - Single Pod Lifecycle Runner

Runs one pod through its whole life against a Kubernetes cluster.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- workload: Pod descriptor construction
- lifecycle: Cluster client interface, data model and kubernetes adapter
- watcher: Readiness watching
- streams: Attached output multiplexing and sinks
- logs: Log following
- deletion: Deletion with identity confirmation
- workflow: Stage sequencing
"""

__version__ = "1.0.0"
