"""Logging manager for centralized structured logging.

Provides:
- Structured JSON logging to logs/app.jsonl
- Development and production logging configurations
- Reading back recent entries for diagnostics
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from mentor.config.config_models import AppSettings

_RESERVED_ATTRS = {
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename", "module", "lineno",
    "funcName", "created", "msecs", "relativeCreated", "thread", "threadName", "processName",
    "process", "exc_info", "exc_text", "stack_info", "getMessage", "taskName", "message",
}


class JSONFormatter(logging.Formatter):
    """Format log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process_id": os.getpid(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Fields passed through ``extra=`` (session_id, error_kind, ...)
        for k, v in record.__dict__.items():
            if k not in _RESERVED_ATTRS:
                entry[f"extra_{k}"] = v
        return json.dumps(entry, default=str)


class LoggingManager:
    """Manages centralized structured logging for the application."""

    NOISY_LOGGERS = ("LiteLLM", "litellm", "httpx", "httpcore", "urllib3.connectionpool")

    def __init__(
        self,
        settings: AppSettings,
        service_name: str = "mentor-backend",
        logs_dir: Optional[Path] = None,
    ) -> None:
        self.service_name = service_name
        self.is_development = settings.debug_mode or settings.environment.lower() in {"dev", "development"}
        self.log_level = self._resolve_level(settings.log_level)
        self.logs_dir = logs_dir or self._get_logs_dir(settings)
        self.log_file = self.logs_dir / "app.jsonl"
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        self._setup_logging()

    @staticmethod
    def _resolve_level(level_name: str) -> int:
        level = getattr(logging, (level_name or "INFO").upper(), None)
        return level if isinstance(level, int) else logging.INFO

    @staticmethod
    def _get_logs_dir(settings: AppSettings) -> Path:
        if settings.app_log_dir:
            return Path(settings.app_log_dir)
        # backend/mentor/logging/logging_manager.py -> project root is 3 levels up
        return Path(__file__).resolve().parents[3] / "logs"

    def _setup_logging(self) -> None:
        """Configure structured logging to JSON file."""
        root = logging.getLogger()
        for h in root.handlers[:]:
            root.removeHandler(h)

        file_handler = logging.FileHandler(self.log_file, encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())
        file_handler.setLevel(self.log_level)
        root.addHandler(file_handler)
        root.setLevel(self.log_level)

        self._suppress_noisy_loggers()

        # Development also gets warnings and above on the console
        if self.is_development:
            console = logging.StreamHandler()
            console.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
            console.setLevel(logging.WARNING)
            root.addHandler(console)

    def _suppress_noisy_loggers(self) -> None:
        for name in self.NOISY_LOGGERS:
            lg = logging.getLogger(name)
            lg.setLevel(logging.ERROR)
            lg.propagate = False
            for h in list(lg.handlers):
                lg.removeHandler(h)
            lg.addHandler(logging.NullHandler())

    def get_log_file_path(self) -> Path:
        return self.log_file

    def read_logs(self, lines: int = 100) -> list[Dict[str, Any]]:
        """Read the most recent log entries."""
        if not self.log_file.exists():
            return []

        entries: list[Dict[str, Any]] = []
        with self.log_file.open("r", encoding="utf-8") as f:
            data = f.readlines()[-lines:]
        for ln in data:
            ln = ln.strip()
            if not ln:
                continue
            try:
                entries.append(json.loads(ln))
            except json.JSONDecodeError:
                continue
        return entries
