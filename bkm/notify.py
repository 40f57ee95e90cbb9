"""
Change notifications for bkm.

A small in-process publish/subscribe hub. Each connected client session gets
its own queue; the outer transport (a websocket handler, a CLI watcher)
drains it. Publishing never blocks: a full queue drops the notification for
that session.
"""
import logging
import queue
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

BOOKMARK_ADDED = "bookmark_added"
BOOKMARK_RENAMED = "bookmark_renamed"
BOOKMARK_STARRED = "bookmark_starred"
BOOKMARK_UNSTARRED = "bookmark_unstarred"
BOOKMARK_MOVED = "bookmark_moved"
BOOKMARK_DELETED = "bookmark_deleted"
FOLDER_ADDED = "folder_added"
FOLDER_RENAMED = "folder_renamed"
FOLDER_MOVED = "folder_moved"
FOLDER_DELETED = "folder_deleted"
FAVICON_UPDATED = "favicon_updated"
IMPORT_COMPLETED = "import_completed"

EVENT_TYPES = frozenset({
    BOOKMARK_ADDED, BOOKMARK_RENAMED, BOOKMARK_STARRED, BOOKMARK_UNSTARRED,
    BOOKMARK_MOVED, BOOKMARK_DELETED,
    FOLDER_ADDED, FOLDER_RENAMED, FOLDER_MOVED, FOLDER_DELETED,
    FAVICON_UPDATED, IMPORT_COMPLETED,
})

DEFAULT_QUEUE_SIZE = 1000


@dataclass(frozen=True)
class Notification:
    """One change to the tree, as sent to clients."""
    event_type: str
    entity_type: str  # bookmark, folder, import
    entity_id: Optional[int] = None
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        if self.event_type not in EVENT_TYPES:
            raise ValueError(f"unknown event type: {self.event_type}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "data": dict(self.data),
            "timestamp": self.timestamp.isoformat(),
        }


class NotificationHub:
    """Per-session notification queues."""

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE):
        self.queue_size = queue_size
        self._queues: Dict[str, queue.Queue] = {}
        self._lock = threading.Lock()

    def subscribe(self, session_id: str) -> queue.Queue:
        """
        Register a client session.

        Subscribing an already known session returns its existing queue.
        """
        with self._lock:
            q = self._queues.get(session_id)
            if q is None:
                q = queue.Queue(maxsize=self.queue_size)
                self._queues[session_id] = q
                logger.debug("Session %s subscribed", session_id)
            return q

    def unsubscribe(self, session_id: str) -> bool:
        """
        Forget a client session.

        Returns:
            True if the session was subscribed
        """
        with self._lock:
            removed = self._queues.pop(session_id, None) is not None
        if removed:
            logger.debug("Session %s unsubscribed", session_id)
        return removed

    @property
    def sessions(self) -> List[str]:
        with self._lock:
            return list(self._queues)

    def _put(self, session_id: str, q: queue.Queue, note: Notification) -> bool:
        try:
            q.put_nowait(note)
            return True
        except queue.Full:
            logger.warning("Dropping %s notification for session %s: queue full", note.event_type, session_id)
            return False

    def publish(self, session_id: str, note: Notification) -> bool:
        """
        Send a notification to one session.

        Returns:
            True if it was queued, False for unknown sessions or full queues
        """
        with self._lock:
            q = self._queues.get(session_id)
        if q is None:
            logger.debug("No subscriber %s for %s", session_id, note.event_type)
            return False
        return self._put(session_id, q, note)

    def broadcast(self, note: Notification) -> int:
        """
        Send a notification to every session.

        Returns:
            Number of sessions it was queued for
        """
        with self._lock:
            targets = list(self._queues.items())
        delivered = sum(1 for session_id, q in targets if self._put(session_id, q, note))
        logger.debug("Broadcast %s to %d sessions", note.event_type, delivered)
        return delivered
