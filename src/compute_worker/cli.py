#!/usr/bin/env python3
"""
CLI 工具 - 以 stdio 方式运行执行器

宿主以子进程方式启动 worker，每行向 stdin 写入一条 JSON 请求，
从 stdout 逐行读取 JSON 响应。日志输出到 stderr。
"""

import asyncio
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, TextIO

from compute_worker.config.settings import settings
from compute_worker.tasks.channels import StreamChannel
from compute_worker.tasks.processor import TaskExecutor

logger = logging.getLogger(__name__)


async def serve_stdio(stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None):
    """
    在当前事件循环上运行 stdio 通道，直到 stdin 结束

    stdin 结束后等待进行中的 simulateWork 完成再退出。
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    loop = asyncio.get_running_loop()

    executor = TaskExecutor(StreamChannel(stdout), worker_settings=settings().worker)
    executor.start(loop)

    # 阻塞读取放到单独的线程中，事件循环可以继续推进 simulateWork
    reader = ThreadPoolExecutor(max_workers=1)
    try:
        while True:
            line = await loop.run_in_executor(reader, stdin.readline)
            if not line:
                break
            line = line.strip()
            if not line:
                continue

            try:
                request = json.loads(line)
            except json.JSONDecodeError as e:
                executor.report_fatal_error(e)
                continue

            executor.dispatch(request)

        logger.info("stdin closed, waiting for %d active task(s)", executor.get_task_count())
        await executor.wait_idle()
    finally:
        await executor.shutdown()
        reader.shutdown(wait=False)


def run_worker():
    """运行 stdio worker"""
    try:
        asyncio.run(serve_stdio())
    except KeyboardInterrupt:
        logger.info("Worker interrupted")


if __name__ == "__main__":
    run_worker()
