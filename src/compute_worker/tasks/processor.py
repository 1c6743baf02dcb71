"""
后台计算任务执行器
负责命令分发、错误转换、生命周期通知以及 simulateWork 的协作调度
"""

import asyncio
import logging
import traceback
import uuid
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

from compute_worker.config.settings import WorkerSettings, settings
from compute_worker.core import handlers, messages
from compute_worker.core.handlers import TaskContext
from compute_worker.core.scheduler import SimulationState, StepScheduler
from compute_worker.core.validators import TypeInvalidError, error_type_of

logger = logging.getLogger("task_executor")

Emit = Callable[[Dict[str, Any]], None]
Handler = Callable[[Mapping[str, Any], TaskContext], None]


class Command(str, Enum):
    """支持的命令"""
    CALCULATE = "calculate"
    PROCESS_DATA = "processData"
    SIMULATE_WORK = "simulateWork"
    FIBONACCI = "fibonacci"
    PRIME_NUMBERS = "primeNumbers"
    SORT_ARRAY = "sortArray"


COMMAND_HANDLERS: Dict[Command, Handler] = {
    Command.CALCULATE: handlers.handle_calculate,
    Command.PROCESS_DATA: handlers.handle_process_data,
    Command.SIMULATE_WORK: handlers.handle_simulate_work,
    Command.FIBONACCI: handlers.handle_fibonacci,
    Command.PRIME_NUMBERS: handlers.handle_prime_numbers,
    Command.SORT_ARRAY: handlers.handle_sort_array,
}


def build_command_table(table: Optional[Mapping[Command, Handler]] = None) -> Dict[str, Handler]:
    """
    校验并生成命令表

    每个 Command 必须恰好对应一个可调用的处理器，否则在启动时直接失败。

    Raises:
        ValueError: 命令表缺少命令、包含未知命令或处理器不可调用时
    """
    table = COMMAND_HANDLERS if table is None else table
    missing = [command.value for command in Command if command not in table]
    if missing:
        raise ValueError(f"No handler registered for commands: {', '.join(missing)}")

    command_table = {}
    for command, handler in table.items():
        if not isinstance(command, Command):
            raise ValueError(f"Unknown command in handler table: {command!r}")
        if not callable(handler):
            raise ValueError(f"Handler for {command.value} is not callable")
        command_table[command.value] = handler
    return command_table


class TaskExecutor:
    """
    任务执行器

    - 所有响应通过 emit 回调发送给宿主
    - 除 simulateWork 外的处理器在 dispatch 内同步执行完毕
    - simulateWork 由 StepScheduler 在事件循环上逐步推进，步与步之间可处理其他请求
    - start() 发送 ready 消息；传入事件循环时同时注册致命错误通道
    """

    def __init__(
        self,
        emit: Emit,
        worker_settings: Optional[WorkerSettings] = None,
        handler_table: Optional[Mapping[Command, Handler]] = None,
    ):
        self.emit = emit
        self.worker = worker_settings or settings().worker
        self.command_table = build_command_table(handler_table)
        self.active_tasks: List[StepScheduler] = []
        self.is_running = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._previous_exception_handler = None
        self._installed_handler = False

        # 生成唯一的 worker ID 用于日志追踪
        self.worker_id = str(uuid.uuid4())[:8]

        logger.info("TaskExecutor initialized (worker_id=%s, commands=%d)",
                    self.worker_id, len(self.command_table))

    @property
    def supported_commands(self) -> List[str]:
        return list(self.command_table.keys())

    # ============ 生命周期 ============

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        启动执行器

        Args:
            loop: 事件循环（可选）。提供时把致命错误通道注册为该循环的异常处理器，
                仅适用于执行器独占事件循环的场景（如 stdio 模式）
        """
        if self.is_running:
            return
        self.is_running = True

        if loop is not None:
            self._loop = loop
            self._previous_exception_handler = loop.get_exception_handler()
            loop.set_exception_handler(self._handle_loop_exception)
            self._installed_handler = True

        self.emit(messages.ready_message(self.supported_commands))
        logger.info("[Worker %s] Ready", self.worker_id)

    async def shutdown(self):
        """关闭执行器：取消所有进行中的任务并恢复事件循环异常处理器"""
        logger.info("[Worker %s] Shutting down TaskExecutor...", self.worker_id)

        pending = [scheduler.task for scheduler in self.active_tasks if scheduler.task is not None]
        for task_id in {scheduler.state.task_id for scheduler in self.active_tasks}:
            self.cancel_task(task_id)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        if self._installed_handler and self._loop is not None:
            self._loop.set_exception_handler(self._previous_exception_handler)
            self._installed_handler = False

        self.is_running = False
        logger.info("[Worker %s] TaskExecutor shutdown complete", self.worker_id)

    # ============ 命令分发 ============

    def dispatch(self, request: Any):
        """
        处理一条宿主请求

        未知命令直接返回 error；处理器抛出的任何异常都在这里被捕获一次，
        转换为一条 error 响应。
        """
        if not self.is_running:
            self.start()

        if not isinstance(request, Mapping):
            logger.warning("[Worker %s] Rejected malformed request: %r", self.worker_id, request)
            self.emit(messages.error_message(
                messages.UNKNOWN_ID,
                f"Unknown command: {request!r}",
                errorType="UnknownCommand",
            ))
            return

        task_id = request.get("id") or messages.UNKNOWN_ID
        command = request.get("command")
        handler = self.command_table.get(command) if isinstance(command, str) else None

        if handler is None:
            logger.warning("[Worker %s] Unknown command %r for task %s",
                           self.worker_id, command, task_id)
            self.emit(messages.error_message(
                task_id, f"Unknown command: {command}", errorType="UnknownCommand"
            ))
            return

        logger.debug("[Worker %s] Dispatching %s for task %s", self.worker_id, command, task_id)
        ctx = TaskContext(
            task_id=task_id,
            emit=self.emit,
            worker=self.worker,
            schedule=self._schedule,
        )

        try:
            payload = request.get("data", request.get("payload"))
            if payload is None:
                payload = {}
            if not isinstance(payload, Mapping):
                raise TypeInvalidError("data must be an object")
            handler(payload, ctx)
        except Exception as e:
            logger.warning("Task %s (%s) failed: %s", task_id, command, e)
            self.emit(messages.error_message(
                task_id,
                str(e),
                errorType=error_type_of(e),
                stack=traceback.format_exc(),
            ))

    # ============ simulateWork 调度 ============

    def _schedule(self, state: SimulationState, step: Callable[[SimulationState], None]) -> StepScheduler:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()

        scheduler = StepScheduler(state, step)
        task = scheduler.start()
        self.active_tasks.append(scheduler)
        task.add_done_callback(lambda t: self._on_scheduler_done(scheduler, t))
        logger.info("Task %s submitted successfully", state.task_id)
        return scheduler

    def _on_scheduler_done(self, scheduler: StepScheduler, task: asyncio.Task):
        if scheduler in self.active_tasks:
            self.active_tasks.remove(scheduler)

        if task.cancelled():
            return

        exc = task.exception()
        if exc is not None:
            # 步骤中抛出的异常没有调用方可以接收，按未处理的拒绝上报
            self._handle_loop_exception(self._loop, {
                "message": f"Unhandled exception in simulateWork step of task {scheduler.state.task_id}",
                "exception": exc,
                "task": task,
            })

    def cancel_task(self, task_id: str) -> bool:
        """
        取消进行中的 simulateWork 任务

        取消成功时发送一条 error 终止消息，之后该任务不会再发送任何消息。
        该能力不通过消息协议暴露，仅供宿主嵌入与关闭流程使用。
        """
        cancelled = False
        for scheduler in list(self.active_tasks):
            if scheduler.state.task_id == task_id and scheduler.cancel():
                cancelled = True

        if not cancelled:
            logger.warning("Task %s not found in active tasks", task_id)
            return False

        self.emit(messages.error_message(task_id, "Task cancelled", errorType="Cancelled"))
        logger.info("Task %s cancelled successfully", task_id)
        return True

    async def wait_idle(self):
        """等待所有进行中的 simulateWork 任务结束"""
        while self.active_tasks:
            pending = [scheduler.task for scheduler in self.active_tasks]
            await asyncio.gather(*pending, return_exceptions=True)
            # 让完成回调先执行，再检查是否还有新任务
            await asyncio.sleep(0)

    def get_active_tasks(self) -> list:
        """获取活动任务 ID 列表"""
        return [scheduler.state.task_id for scheduler in self.active_tasks]

    def get_task_count(self) -> int:
        """获取活动任务数量"""
        return len(self.active_tasks)

    # ============ 致命错误通道 ============

    def report_fatal_error(self, exc: BaseException):
        """全局错误通道：上报不属于任何请求的异常"""
        logger.error("[Worker %s] Worker internal error: %s", self.worker_id, exc)
        self.emit(messages.error_message(
            messages.SYSTEM_ID,
            "Worker internal error",
            message=str(exc),
            errorType="SystemFault",
        ))

    def report_unhandled_rejection(self, reason: Any):
        """未处理拒绝通道：上报没有被任何调用方接收的异步异常"""
        logger.error("[Worker %s] Unhandled task rejection: %s", self.worker_id, reason)
        self.emit(messages.error_message(
            messages.SYSTEM_ID,
            "Unhandled task rejection",
            reason=str(reason),
            errorType="SystemFault",
        ))

    def _handle_loop_exception(self, loop, context: Dict[str, Any]):
        exc = context.get("exception")
        detail = exc if exc is not None else context.get("message", "")

        if "future" in context or "task" in context:
            self.report_unhandled_rejection(detail)
        elif exc is not None:
            self.report_fatal_error(exc)
        else:
            logger.error("[Worker %s] Event loop error: %s", self.worker_id, detail)
            self.emit(messages.error_message(
                messages.SYSTEM_ID,
                "Worker internal error",
                message=str(detail),
                errorType="SystemFault",
            ))
