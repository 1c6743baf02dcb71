"""
任务通道路由

- WebSocket /ws: 每个连接一个执行器，连接建立后先发送 ready 消息
- POST /tasks: 执行单个请求直到结束，返回该请求的全部响应
"""

import asyncio
import json
import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, Request, Response, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field

from compute_worker.config.settings import settings
from compute_worker.tasks.channels import CollectingChannel, QueueChannel, encode_message
from compute_worker.tasks.processor import TaskExecutor

logger = logging.getLogger(__name__)

router = APIRouter()


class TaskRequest(BaseModel):
    """单次任务请求"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    command: str
    data: Optional[Dict[str, Any]] = None


async def _forward(channel: QueueChannel, websocket: WebSocket):
    while True:
        message = await channel.get()
        await websocket.send_text(encode_message(message))


async def _stop_sender(sender: asyncio.Task):
    """停止发送协程；发送失败（如连接已断开）只记录日志，不影响连接清理"""
    sender.cancel()
    try:
        await sender
    except asyncio.CancelledError:
        pass
    except Exception as e:
        logger.warning("WebSocket sender stopped with error: %s", e)


@router.websocket("/ws")
async def worker_channel(websocket: WebSocket):
    """WebSocket 消息通道"""
    await websocket.accept()

    channel = QueueChannel()
    executor = TaskExecutor(channel, worker_settings=settings().worker)
    executors = websocket.app.state.executors
    executors.add(executor)
    sender = asyncio.create_task(_forward(channel, websocket))

    logger.info("[Worker %s] WebSocket connected", executor.worker_id)
    executor.start()

    try:
        while True:
            text = await websocket.receive_text()
            try:
                request = json.loads(text)
            except json.JSONDecodeError as e:
                executor.report_fatal_error(e)
                continue
            executor.dispatch(request)
    except WebSocketDisconnect:
        logger.info("[Worker %s] WebSocket disconnected", executor.worker_id)
    finally:
        executors.discard(executor)
        await executor.shutdown()
        await _stop_sender(sender)


@router.post("/tasks")
async def run_task(task: TaskRequest, request: Request):
    """
    执行单个任务并等待其结束

    Returns:
        该任务 ID 对应的全部响应（进度消息在前，终止消息在最后）
    """
    channel = CollectingChannel()
    executor = TaskExecutor(channel, worker_settings=settings().worker)
    executors = request.app.state.executors
    executors.add(executor)

    try:
        executor.start()
        executor.dispatch(task.model_dump())
        await executor.wait_idle()
    finally:
        executors.discard(executor)
        await executor.shutdown()

    return Response(
        content=encode_message(channel.for_id(task.id)),
        media_type="application/json",
    )
