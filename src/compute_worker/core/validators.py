"""
错误类型与参数验证工具
"""

import numbers
from typing import Any, Sequence


class WorkerError(Exception):
    """执行器错误基类"""
    error_type = "RuntimeFault"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class UnknownCommandError(WorkerError):
    """未知命令"""
    error_type = "UnknownCommand"


class InvalidArgumentError(WorkerError):
    """参数取值非法（范围、枚举值等）"""
    error_type = "InvalidArgument"


class TypeInvalidError(WorkerError):
    """参数结构非法（例如要求数组却传入了其他类型）"""
    error_type = "TypeInvalid"


def error_type_of(exc: BaseException) -> str:
    """返回异常在错误分类中的名称，非 WorkerError 一律视为 RuntimeFault"""
    return getattr(exc, "error_type", WorkerError.error_type)


def is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def validate_sequence(value: Any, name: str) -> Sequence:
    """
    验证参数是数组（list 或 tuple）

    Raises:
        TypeInvalidError: 不是数组时
    """
    if not isinstance(value, (list, tuple)):
        raise TypeInvalidError(f"{name} must be an array")
    return value


def validate_int_range(value: Any, name: str, minimum: int, maximum: int) -> int:
    """
    验证整数参数在 [minimum, maximum] 范围内

    Args:
        value: 待验证的值
        name: 参数名（用于错误信息）
        minimum: 最小值（含）
        maximum: 最大值（含）

    Returns:
        验证通过的整数

    Raises:
        InvalidArgumentError: 不是整数或超出范围时
    """
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidArgumentError(f"{name} must be an integer")
    if value < minimum or value > maximum:
        raise InvalidArgumentError(f"{name} must be between {minimum} and {maximum}")
    return value
