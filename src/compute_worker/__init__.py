"""
Compute Worker

Background executor for CPU-bound computations. Hosts dispatch named commands by
identifier and receive progress updates followed by a single terminal result.
"""

__version__ = "1.0.0"

from compute_worker.tasks.processor import Command, TaskExecutor

__all__ = ["Command", "TaskExecutor", "__version__"]
