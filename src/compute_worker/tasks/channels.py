"""
消息通道

TaskExecutor 只依赖一个 emit(message) 回调，这里提供几种常用的实现:
- QueueChannel: 写入 asyncio.Queue，由发送协程转发（WebSocket）
- StreamChannel: 以换行分隔的 JSON 写入文本流（stdio）
- CollectingChannel: 收集到内存列表（HTTP 单次请求、测试）
"""

import asyncio
import json
from typing import Any, Dict, List, TextIO

from compute_worker.core.messages import is_terminal


def encode_message(message: Any) -> str:
    """序列化响应；允许 NaN / Infinity，以保留数值计算的原始结果"""
    return json.dumps(message, ensure_ascii=False, allow_nan=True, default=str)


class QueueChannel:
    """基于 asyncio.Queue 的通道"""

    def __init__(self):
        self.queue: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue()

    def __call__(self, message: Dict[str, Any]):
        self.queue.put_nowait(message)

    async def get(self) -> Dict[str, Any]:
        return await self.queue.get()


class StreamChannel:
    """每条消息一行 JSON"""

    def __init__(self, stream: TextIO):
        self.stream = stream

    def __call__(self, message: Dict[str, Any]):
        self.stream.write(encode_message(message) + "\n")
        self.stream.flush()


class CollectingChannel:
    """把消息收集到列表中"""

    def __init__(self):
        self.messages: List[Dict[str, Any]] = []

    def __call__(self, message: Dict[str, Any]):
        self.messages.append(message)

    def for_id(self, task_id: str) -> List[Dict[str, Any]]:
        return [m for m in self.messages if m.get("id") == task_id]

    def with_status(self, status: str) -> List[Dict[str, Any]]:
        return [m for m in self.messages if m.get("status") == status]

    def terminals_for(self, task_id: str) -> List[Dict[str, Any]]:
        return [m for m in self.for_id(task_id) if is_terminal(m)]
