"""
Core 核心模块

包含排序算法、任务处理器、进度约定与错误类型
"""

from compute_worker.core.handlers import TaskContext
from compute_worker.core.scheduler import SimulationState, StepScheduler
from compute_worker.core.validators import (
    WorkerError,
    UnknownCommandError,
    InvalidArgumentError,
    TypeInvalidError,
)

__all__ = [
    "TaskContext",
    "SimulationState",
    "StepScheduler",
    "WorkerError",
    "UnknownCommandError",
    "InvalidArgumentError",
    "TypeInvalidError",
]
