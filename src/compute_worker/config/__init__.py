"""
配置模块

集中管理所有配置项
"""

from compute_worker.config.settings import (
    Settings,
    settings,
    get_settings,
    reload_settings,
    ServerSettings,
    LoggingSettings,
    WorkerSettings,
)

__all__ = [
    "Settings",
    "settings",
    "get_settings",
    "reload_settings",
    "ServerSettings",
    "LoggingSettings",
    "WorkerSettings",
]
