"""
Pytest 配置和 fixtures
"""

import sys
from pathlib import Path

import pytest

# 添加 src 目录到 Python 路径
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from compute_worker.config.settings import WorkerSettings  # noqa: E402
from compute_worker.tasks.channels import CollectingChannel  # noqa: E402
from compute_worker.tasks.processor import TaskExecutor  # noqa: E402


@pytest.fixture
def channel():
    """收集所有响应的通道"""
    return CollectingChannel()


@pytest.fixture
def worker_settings():
    """缩短 simulateWork 默认时长的执行器配置"""
    return WorkerSettings(simulate_duration=30, simulate_steps=3)


@pytest.fixture
def executor(channel, worker_settings):
    """已启动的执行器（未注册事件循环异常处理器）"""
    executor = TaskExecutor(channel, worker_settings=worker_settings)
    executor.start()
    return executor
