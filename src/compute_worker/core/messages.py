"""
响应消息构造

所有发往宿主的响应都是普通 dict，按 status 区分:
ready / progress / success / error
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable

READY = "ready"
PROGRESS = "progress"
SUCCESS = "success"
ERROR = "error"

READY_ID = "ready-token"
SYSTEM_ID = "system"
UNKNOWN_ID = "unknown"

TERMINAL_STATUSES = (SUCCESS, ERROR)


def timestamp() -> str:
    """当前 UTC 时间，ISO-8601 毫秒精度，例如 2024-01-01T08:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def ready_message(supported_commands: Iterable[str]) -> Dict[str, Any]:
    return {
        "id": READY_ID,
        "status": READY,
        "message": "Worker initialized, waiting for tasks",
        "supportedCommands": list(supported_commands),
        "timestamp": timestamp(),
    }


def progress_message(task_id: str, progress: int, **fields: Any) -> Dict[str, Any]:
    message = {"id": task_id, "status": PROGRESS, "progress": progress}
    message.update(fields)
    message["timestamp"] = timestamp()
    return message


def success_message(task_id: str, command: str, result: Any, **metadata: Any) -> Dict[str, Any]:
    message = {"id": task_id, "status": SUCCESS, "command": command, "result": result}
    message.update(metadata)
    message["timestamp"] = timestamp()
    return message


def error_message(task_id: str, error: str, **diagnostics: Any) -> Dict[str, Any]:
    message = {"id": task_id, "status": ERROR, "error": error}
    message.update(diagnostics)
    message["timestamp"] = timestamp()
    return message


def is_terminal(message: Dict[str, Any]) -> bool:
    return message.get("status") in TERMINAL_STATUSES
