"""
Tasks 任务处理模块

包含任务执行器与消息通道
"""

from compute_worker.tasks.channels import (
    CollectingChannel,
    QueueChannel,
    StreamChannel,
    encode_message,
)
from compute_worker.tasks.processor import Command, TaskExecutor, build_command_table

__all__ = [
    "Command",
    "TaskExecutor",
    "build_command_table",
    "CollectingChannel",
    "QueueChannel",
    "StreamChannel",
    "encode_message",
]
