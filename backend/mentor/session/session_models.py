"""Domain model for a live client connection."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Coroutine, Dict, Optional, Set
from uuid import UUID, uuid4

logger = logging.getLogger(__name__)

Sender = Callable[[Dict[str, Any]], Awaitable[None]]


@dataclass
class Session:
    """One per websocket connection.

    Holds no conversation state: only an id for log correlation, the
    callable that writes to the connection and the request tasks still in
    flight, so they can be cancelled on disconnect.
    """

    sender: Optional[Sender] = None
    id: UUID = field(default_factory=uuid4)
    client: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    active: bool = True
    _tasks: Set["asyncio.Task[Any]"] = field(default_factory=set, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "client": self.client,
            "created_at": self.created_at.isoformat(),
            "active": self.active,
            "pending_requests": len(self._tasks),
        }

    @property
    def pending_count(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> "asyncio.Task[Any]":
        """Run a request handler as an independent task owned by this session."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def emit(self, message: Dict[str, Any]) -> bool:
        """Send ``message`` unless the connection is gone. Returns True if sent."""
        if not self.active or self.sender is None:
            logger.debug(
                f"Dropping {message.get('type', 'unknown')} for closed session {self.id}"
            )
            return False
        try:
            await self.sender(message)
            return True
        except Exception as e:
            # The peer went away between the check and the write
            logger.warning(f"Send failed for session {self.id}, marking closed: {e}")
            self.active = False
            return False

    async def close(self) -> None:
        """Mark the session closed and abandon its in-flight requests."""
        self.active = False
        pending = [t for t in self._tasks if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._tasks.clear()
