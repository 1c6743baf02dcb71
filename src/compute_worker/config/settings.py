"""
配置加载器 - 从 settings.yaml 加载配置
支持环境变量覆盖: WORKER_<SECTION>_<KEY>
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

import yaml
from dotenv import load_dotenv

load_dotenv()


# 配置文件搜索路径
def _find_settings_file() -> Optional[Path]:
    """查找配置文件"""
    search_paths = [
        Path(__file__).resolve().parent / "settings.yaml",  # 包内
        Path(__file__).resolve().parent.parent.parent.parent / "config" / "settings.yaml",  # 项目根目录
        Path.cwd() / "config" / "settings.yaml",  # 当前工作目录
        Path.cwd() / "settings.yaml",
    ]

    for path in search_paths:
        if path.exists():
            return path
    return None


# 缓存配置
_settings_cache: Optional[Dict[str, Any]] = None


def _load_yaml() -> Dict[str, Any]:
    """加载 YAML 配置文件"""
    settings_file = _find_settings_file()
    if settings_file and settings_file.exists():
        with open(settings_file, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    return {}


def _get_env_override(section: str, key: str) -> Optional[str]:
    """获取环境变量覆盖值"""
    env_key = f"WORKER_{section.upper()}_{key.upper()}"
    return os.environ.get(env_key)


def _apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """应用环境变量覆盖"""
    for section, values in config.items():
        if isinstance(values, dict):
            for key, value in values.items():
                env_value = _get_env_override(section, key)
                if env_value is not None:
                    # 尝试转换类型
                    if isinstance(value, bool):
                        config[section][key] = env_value.lower() in ('true', '1', 'yes')
                    elif isinstance(value, int):
                        config[section][key] = int(env_value)
                    elif isinstance(value, float):
                        config[section][key] = float(env_value)
                    else:
                        config[section][key] = env_value
    return config


def get_settings() -> Dict[str, Any]:
    """获取完整配置（带缓存）"""
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = _apply_env_overrides(_load_yaml())
    return _settings_cache


def reload_settings() -> Dict[str, Any]:
    """重新加载配置"""
    global _settings_cache, _settings
    _settings_cache = None
    _settings = None
    return get_settings()


def get(section: str, key: str = None, default: Any = None) -> Any:
    """
    获取配置值

    Args:
        section: 配置节名称 (如 'server', 'worker')
        key: 配置键名 (可选，不提供则返回整个节)
        default: 默认值
    """
    settings = get_settings()
    section_data = settings.get(section) or {}

    if key is None:
        return section_data if section_data else default

    value = section_data.get(key)
    return default if value is None else value


# ============ 类型安全的配置类 ============

@dataclass
class ServerSettings:
    """HTTP / WebSocket 服务配置"""
    host: str = "0.0.0.0"
    port: int = 8022
    title: str = "Compute Worker API"
    description: str = "Background executor for CPU-bound computations with progress reporting"
    version: str = "1.0.0"

    @classmethod
    def from_config(cls) -> "ServerSettings":
        return cls(
            host=os.getenv('WORKER_HOST', get('server', 'host', cls.host)),
            port=int(os.getenv('WORKER_PORT', get('server', 'port', cls.port))),
            title=get('server', 'title', cls.title),
            description=get('server', 'description', cls.description),
            version=get('server', 'version', cls.version),
        )


@dataclass
class LoggingSettings:
    """日志配置"""
    level: str = "INFO"
    log_file: Optional[str] = None
    format: Optional[str] = None

    @classmethod
    def from_config(cls) -> "LoggingSettings":
        return cls(
            level=os.getenv('LOG_LEVEL', get('logging', 'level', cls.level)),
            log_file=os.getenv('LOG_FILE', get('logging', 'log_file', cls.log_file)),
            format=get('logging', 'format', cls.format),
        )


@dataclass
class WorkerSettings:
    """执行器配置 (simulateWork 未指定参数时的默认值)"""
    simulate_duration: float = 3000
    simulate_steps: int = 100

    @classmethod
    def from_config(cls) -> "WorkerSettings":
        return cls(
            simulate_duration=get('worker', 'simulate_duration', cls.simulate_duration),
            simulate_steps=int(get('worker', 'simulate_steps', cls.simulate_steps)),
        )


@dataclass
class Settings:
    """全局配置"""
    server: ServerSettings = field(default_factory=ServerSettings.from_config)
    logging: LoggingSettings = field(default_factory=LoggingSettings.from_config)
    worker: WorkerSettings = field(default_factory=WorkerSettings.from_config)

    @classmethod
    def load(cls) -> "Settings":
        """加载所有配置"""
        return cls(
            server=ServerSettings.from_config(),
            logging=LoggingSettings.from_config(),
            worker=WorkerSettings.from_config(),
        )


# 单例配置实例 (延迟加载)
_settings: Optional[Settings] = None


def settings() -> Settings:
    """获取配置单例"""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
