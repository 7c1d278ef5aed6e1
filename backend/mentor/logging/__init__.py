"""Structured logging setup."""

from .logging_manager import JSONFormatter, LoggingManager

__all__ = ["JSONFormatter", "LoggingManager"]
