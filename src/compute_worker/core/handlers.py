"""
任务处理器

每个处理器负责一个命令：验证参数、计算、发送零到多条进度消息，
最后发送唯一的一条 success 消息。处理器抛出的异常由 TaskExecutor 统一转换为 error 消息。
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping

from compute_worker.config.settings import WorkerSettings
from compute_worker.core import messages
from compute_worker.core.progress import percent, should_report
from compute_worker.core.scheduler import SimulationState
from compute_worker.core.sorting import get_sorter
from compute_worker.core.validators import (
    InvalidArgumentError,
    is_number,
    validate_int_range,
    validate_sequence,
)

logger = logging.getLogger(__name__)

Emit = Callable[[Dict[str, Any]], None]

FIBONACCI_MAX_N = 1000
PRIME_MIN_LIMIT = 2
PRIME_MAX_LIMIT = 100000
SIMULATION_WORKLOAD = 10000


@dataclass
class TaskContext:
    """单次调用的上下文，由 TaskExecutor 为每个请求新建"""
    task_id: str
    emit: Emit
    worker: WorkerSettings
    schedule: Callable[[SimulationState, Callable[[SimulationState], None]], Any]


def _payload_value(payload: Mapping[str, Any], key: str, default: Any) -> Any:
    value = payload.get(key)
    return default if value is None else value


# ============ calculate ============

def _average(numbers) -> float:
    if not numbers:
        # 0 / 0，保持与 IEEE 浮点除法一致的结果而不是抛出异常
        return math.nan
    return sum(numbers, 0) / len(numbers)


def _product(numbers):
    result = 1
    for number in numbers:
        result *= number
    return result


def _extreme(pick, empty):
    """max/min：空数组返回 empty，任一元素为 NaN 时结果为 NaN"""
    def compute(numbers):
        if any(isinstance(n, float) and math.isnan(n) for n in numbers):
            return math.nan
        return pick(numbers, default=empty)
    return compute


CALCULATIONS: Dict[str, Callable[[List[Any]], Any]] = {
    "sum": lambda numbers: sum(numbers, 0),
    "average": _average,
    "max": _extreme(max, -math.inf),
    "min": _extreme(min, math.inf),
    "multiply": _product,
}


def handle_calculate(payload: Mapping[str, Any], ctx: TaskContext):
    operation = payload.get("operation")
    if operation not in CALCULATIONS:
        raise InvalidArgumentError(f"Unsupported operation: {operation}")
    numbers = list(validate_sequence(payload.get("numbers"), "numbers"))

    result = CALCULATIONS[operation](numbers)

    ctx.emit(messages.success_message(ctx.task_id, "calculate", result, operation=operation))


# ============ processData ============

def _transform_for(name: str, dataset) -> Callable[[Any], Any]:
    if name == "double":
        return lambda x: x * 2
    if name == "square":
        return lambda x: x * x
    if name == "sqrt":
        return lambda x: math.sqrt(abs(x))
    if name == "normalize":
        peak = max((abs(x) for x in dataset), default=0)
        return lambda x: x / peak if peak != 0 else 0
    return lambda x: x


def handle_process_data(payload: Mapping[str, Any], ctx: TaskContext):
    dataset = list(validate_sequence(payload.get("dataset"), "dataset"))
    transform = _transform_for(payload.get("transform"), dataset)
    total = len(dataset)
    processed = []

    for i, value in enumerate(dataset):
        processed.append(round(transform(value), 4))

        if should_report(i, total, threshold=10):
            ctx.emit(messages.progress_message(
                ctx.task_id,
                percent(i, total),
                processed=i + 1,
                total=total,
            ))

    ctx.emit(messages.success_message(
        ctx.task_id, "processData", processed, originalLength=total
    ))


# ============ simulateWork ============

def _dummy_workload() -> float:
    result = 0.0
    for i in range(SIMULATION_WORKLOAD):
        result += math.sin(i) * math.cos(i)
    return result


def simulation_step(state: SimulationState, emit: Emit):
    """执行一个协作步骤；到达总步数时发送 success"""
    state.steps_done += 1
    dummy_result = _dummy_workload()

    emit(messages.progress_message(
        state.task_id,
        percent(state.steps_done, state.total_steps),
        currentStep=state.steps_done,
        totalSteps=state.total_steps,
        dummyResult=f"{dummy_result:.6f}",
    ))

    if state.finished:
        emit(messages.success_message(
            state.task_id,
            "simulateWork",
            "Simulated work completed",
            totalDuration=state.duration,
        ))


def handle_simulate_work(payload: Mapping[str, Any], ctx: TaskContext):
    duration = _payload_value(payload, "duration", ctx.worker.simulate_duration)
    steps = _payload_value(payload, "steps", ctx.worker.simulate_steps)

    if not is_number(duration) or duration < 0 or not math.isfinite(duration):
        raise InvalidArgumentError("duration must be a non-negative number")
    if not isinstance(steps, int) or isinstance(steps, bool) or steps < 1:
        raise InvalidArgumentError("steps must be a positive integer")

    state = SimulationState(
        task_id=ctx.task_id,
        total_steps=steps,
        step_interval_ms=duration / steps,
        duration=duration,
    )
    emit = ctx.emit
    ctx.schedule(state, lambda s: simulation_step(s, emit))
    logger.info("Task %s: scheduled %d steps every %.2fms", ctx.task_id, steps, state.step_interval_ms)


# ============ fibonacci ============

def _fib(num: int) -> int:
    if num <= 1:
        return num
    a, b = 0, 1
    for _ in range(2, num + 1):
        a, b = b, a + b
    return b


def handle_fibonacci(payload: Mapping[str, Any], ctx: TaskContext):
    n = validate_int_range(_payload_value(payload, "n", 20), "n", 0, FIBONACCI_MAX_N)
    sequence = []

    for i in range(n + 1):
        sequence.append(_fib(i))

        if should_report(i, n, threshold=10):
            ctx.emit(messages.progress_message(
                ctx.task_id, percent(i, n), current=i, total=n
            ))

    ctx.emit(messages.success_message(
        ctx.task_id,
        "fibonacci",
        sequence,
        length=len(sequence),
        nthValue=sequence[n],
    ))


# ============ primeNumbers ============

def handle_prime_numbers(payload: Mapping[str, Any], ctx: TaskContext):
    limit = validate_int_range(
        _payload_value(payload, "limit", 100), "limit", PRIME_MIN_LIMIT, PRIME_MAX_LIMIT
    )
    is_prime = [True] * (limit + 1)
    is_prime[0] = is_prime[1] = False
    primes = []

    for i in range(2, limit + 1):
        if is_prime[i]:
            primes.append(i)
            for j in range(i * i, limit + 1, i):
                is_prime[j] = False

        if should_report(i, limit, threshold=100):
            ctx.emit(messages.progress_message(
                ctx.task_id,
                percent(i, limit),
                current=i,
                total=limit,
                primesFound=len(primes),
            ))

    ctx.emit(messages.success_message(
        ctx.task_id, "primeNumbers", primes, count=len(primes), limit=limit
    ))


# ============ sortArray ============

def handle_sort_array(payload: Mapping[str, Any], ctx: TaskContext):
    array = validate_sequence(payload.get("array"), "array")
    algorithm = _payload_value(payload, "algorithm", "quick")
    sorter = get_sorter(algorithm)

    start = time.perf_counter()
    sorted_array = sorter(list(array))
    elapsed_ms = (time.perf_counter() - start) * 1000

    ctx.emit(messages.success_message(
        ctx.task_id,
        "sortArray",
        sorted_array,
        algorithm=algorithm,
        originalLength=len(array),
        duration=f"{elapsed_ms:.2f}ms",
    ))
