"""Sandboxed execution engine exports."""

from .sandbox_manager import (
    DENYLIST_PATTERN,
    EXECUTION_TIMEOUT_SECONDS,
    SandboxExecutor,
    check_denylist,
)

__all__ = [
    "DENYLIST_PATTERN",
    "EXECUTION_TIMEOUT_SECONDS",
    "SandboxExecutor",
    "check_denylist",
]
