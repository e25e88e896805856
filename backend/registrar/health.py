"""Liveness and detailed health reports."""

from __future__ import annotations

import platform
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict

import psutil

_MB = 1024 * 1024


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def process_uptime() -> float:
    """Seconds since the current process started."""

    started = psutil.Process().create_time()
    return max(0.0, time.time() - started)


def format_uptime(seconds: float) -> str:
    seconds = int(seconds)
    days, seconds = divmod(seconds, 24 * 3600)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)

    parts = []
    for value, unit in ((days, "days"), (hours, "hours"), (minutes, "minutes"), (seconds, "seconds")):
        if value > 0:
            parts.append(f"{value} {unit}")
    return " ".join(parts)


def liveness(environment: str) -> Dict[str, Any]:
    return {
        "status": "UP",
        "timestamp": _timestamp(),
        "uptime": process_uptime(),
        "environment": environment,
    }


def detailed(environment: str, database_status: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
    """Liveness plus store connectivity and process statistics.

    Exceptions from the probe or from reading process stats propagate so the
    caller can report the service as down.
    """

    uptime = process_uptime()
    memory = psutil.Process().memory_info()
    return {
        "status": "UP",
        "timestamp": _timestamp(),
        "database": database_status(),
        "system": {
            "memory": {
                "used": round(memory.rss / _MB),
                "total": round(psutil.virtual_memory().total / _MB),
                "unit": "MB",
            },
            "uptime": {
                "seconds": round(uptime),
                "formatted": format_uptime(uptime),
            },
            "pythonVersion": platform.python_version(),
            "platform": platform.system().lower(),
        },
        "environment": environment,
    }


def down(error: Exception) -> Dict[str, Any]:
    return {"status": "DOWN", "timestamp": _timestamp(), "error": str(error)}


__all__ = ["detailed", "down", "format_uptime", "liveness", "process_uptime"]
