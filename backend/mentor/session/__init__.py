"""Session management exports."""

from .session_manager import SessionManager
from .session_models import Sender, Session

__all__ = ["Sender", "Session", "SessionManager"]
