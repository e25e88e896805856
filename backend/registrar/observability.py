"""Structured logging setup and request logging hooks.

``LogManager`` owns the handlers it installs on the root logger: ``start()``
attaches a console handler plus JSON-line ``combined.log`` and ``error.log``
files, ``close()`` flushes and detaches them again.
"""

from __future__ import annotations

import json
import logging
import os
import time
from datetime import datetime, timezone
from typing import Any, Dict, List

from flask import Flask, g, request

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_ATTRS = set(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Format logs as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log[key] = value
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


class LogManager:
    def __init__(self, level: str = "INFO", log_dir: str | None = None, console: bool = True):
        self.level = getattr(logging, level.upper(), logging.INFO)
        self.log_dir = log_dir
        self.console = console
        self.handlers: List[logging.Handler] = []

    @property
    def started(self) -> bool:
        return bool(self.handlers)

    def start(self) -> None:
        if self.started:
            return

        if self.console:
            console = logging.StreamHandler()
            console.setFormatter(logging.Formatter(
                "%(asctime)s %(levelname)s %(name)s - %(message)s",
            ))
            self.handlers.append(console)

        if self.log_dir:
            os.makedirs(self.log_dir, exist_ok=True)
            errors = logging.FileHandler(
                os.path.join(self.log_dir, "error.log"), encoding="utf-8"
            )
            errors.setLevel(logging.ERROR)
            combined = logging.FileHandler(
                os.path.join(self.log_dir, "combined.log"), encoding="utf-8"
            )
            for handler in (errors, combined):
                handler.setFormatter(JSONFormatter())
                self.handlers.append(handler)

        root = logging.getLogger()
        for handler in self.handlers:
            root.addHandler(handler)
        root.setLevel(self.level)
        # Werkzeug's own access log duplicates the request log below.
        logging.getLogger("werkzeug").setLevel(logging.WARNING)

    def close(self) -> None:
        root = logging.getLogger()
        for handler in self.handlers:
            handler.flush()
            root.removeHandler(handler)
            handler.close()
        self.handlers = []


def _request_body() -> Any:
    if request.method == "GET":
        return None
    return request.get_json(silent=True)


def request_context() -> Dict[str, Any]:
    """Structured fields describing the current request."""

    return {
        "method": request.method,
        "path": request.path,
        "params": dict(request.view_args or {}),
        "query": request.args.to_dict(),
        "body": _request_body(),
    }


def init_request_logging(app: Flask) -> None:
    """Log method, path, status and duration for every request."""

    access_logger = logging.getLogger("registrar.requests")

    @app.before_request
    def _start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def _log_request(response):
        started = g.pop("request_started", None)
        duration_ms = (
            round((time.perf_counter() - started) * 1000, 2) if started is not None else None
        )
        fields = request_context()
        fields["status"] = response.status_code
        fields["duration"] = f"{duration_ms}ms"
        access_logger.info(
            "%s %s %s", request.method, request.path, response.status_code, extra=fields
        )
        return response


__all__ = ["JSONFormatter", "LogManager", "init_request_logging", "request_context"]
