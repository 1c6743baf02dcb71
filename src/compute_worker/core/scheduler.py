"""
步进调度器

simulateWork 被建模为一个显式的状态对象，由可重复执行、可取消的 asyncio 任务推进。
每一步执行完毕后都会把控制权交还事件循环，其他请求可以在步与步之间运行。
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class SimulationState:
    """单次 simulateWork 调用的状态"""
    task_id: str
    total_steps: int
    step_interval_ms: float
    duration: float
    steps_done: int = 0

    @property
    def finished(self) -> bool:
        return self.steps_done >= self.total_steps


StepFunction = Callable[[SimulationState], None]


class StepScheduler:
    """
    按固定间隔推进 SimulationState 的重复任务

    start() 返回底层 asyncio.Task，cancel() 即为取消句柄。
    """

    def __init__(self, state: SimulationState, step: StepFunction):
        self.state = state
        self.step = step
        self.task: Optional[asyncio.Task] = None
        self.cancelled = False

    def start(self) -> asyncio.Task:
        if self.task is not None:
            raise RuntimeError(f"Scheduler for task {self.state.task_id} already started")
        self.task = asyncio.get_running_loop().create_task(self._run())
        return self.task

    async def _run(self):
        interval = self.state.step_interval_ms / 1000
        while not self.state.finished:
            await asyncio.sleep(interval)
            self.step(self.state)
        logger.debug("Task %s finished after %d steps", self.state.task_id, self.state.steps_done)

    def cancel(self) -> bool:
        """
        取消尚未完成的调度

        已启动的最后一步视为已完成：此时 success 即将发出，不再允许取消。
        已完成、未启动或已取消时返回 False。
        """
        if self.cancelled or self.state.finished or self.task is None or self.task.done():
            return False
        self.cancelled = self.task.cancel()
        return self.cancelled
