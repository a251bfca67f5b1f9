"""In-memory storage of view sessions.

Each browser gets a session ID (carried in a cookie) that maps to its own
:class:`ViewController`. Sessions expire after a period of inactivity and a
background thread removes expired ones.

Key features:
- Thread-safe session storage
- Sliding TTL: every access pushes expiry forward
- Automatic cleanup of idle sessions
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from spreadsheet_viewer.config import settings
from spreadsheet_viewer.services.view_state import ViewController
from spreadsheet_viewer.utils.exceptions import (
    SessionExpiredError,
    SessionNotFoundError,
)
from spreadsheet_viewer.workbook_document import SheetLayout

logger = logging.getLogger(__name__)


@dataclass
class ViewSession:
    """A stored session and its bookkeeping timestamps."""

    session_id: str
    controller: ViewController
    created_at: datetime
    last_accessed: datetime
    expires_at: datetime


@dataclass
class SessionStoreConfig:
    """Configuration for the session store."""

    ttl_seconds: int = field(default_factory=lambda: settings.session_ttl_seconds)
    cleanup_interval_seconds: int = 300
    enable_auto_cleanup: bool = True
    layout: SheetLayout = field(default_factory=lambda: settings.sheet_layout)


class SessionStore:
    """Thread-safe in-memory session store with TTL support."""

    def __init__(self, config: SessionStoreConfig | None = None) -> None:
        """Initialize the session store.

        Args:
            config: Optional configuration. Uses defaults if not provided.
        """
        self.config = config or SessionStoreConfig()
        self._sessions: dict[str, ViewSession] = {}
        self._lock = threading.RLock()
        self._cleanup_thread: threading.Thread | None = None
        self._stop_cleanup = threading.Event()

        if self.config.enable_auto_cleanup:
            self._start_cleanup_thread()

    def _start_cleanup_thread(self) -> None:
        """Start the background cleanup thread."""
        self._stop_cleanup.clear()
        self._cleanup_thread = threading.Thread(
            target=self._cleanup_loop,
            daemon=True,
            name="SessionStoreCleanup",
        )
        self._cleanup_thread.start()
        logger.info("Session store cleanup thread started")

    def _cleanup_loop(self) -> None:
        """Background loop for removing expired sessions."""
        while not self._stop_cleanup.wait(self.config.cleanup_interval_seconds):
            try:
                self.cleanup_expired_sessions()
            except Exception as e:
                logger.error(f"Error in session cleanup: {e}")

    def stop_cleanup(self) -> None:
        """Stop the background cleanup thread."""
        self._stop_cleanup.set()
        if self._cleanup_thread and self._cleanup_thread.is_alive():
            self._cleanup_thread.join(timeout=5.0)
            logger.info("Session store cleanup thread stopped")

    def _expiry_from(self, now: datetime) -> datetime:
        return now + timedelta(seconds=self.config.ttl_seconds)

    def create(self) -> ViewSession:
        """Create a new session with a fresh view.

        Returns:
            The created ViewSession.
        """
        now = datetime.now(UTC)
        session = ViewSession(
            session_id=str(uuid.uuid4()),
            controller=ViewController(layout=self.config.layout),
            created_at=now,
            last_accessed=now,
            expires_at=self._expiry_from(now),
        )
        with self._lock:
            self._sessions[session.session_id] = session

        logger.info(f"Session created: {session.session_id}")
        return session

    def get(self, session_id: str) -> ViewSession:
        """Get a session by ID and refresh its expiry.

        Raises:
            SessionNotFoundError: If the session doesn't exist.
            SessionExpiredError: If the session has expired.
        """
        now = datetime.now(UTC)
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)

            if now > session.expires_at:
                del self._sessions[session_id]
                raise SessionExpiredError(
                    session_id, ttl_seconds=self.config.ttl_seconds
                )

            session.last_accessed = now
            session.expires_at = self._expiry_from(now)
            return session

    def get_or_create(self, session_id: str | None) -> ViewSession:
        """Return the caller's session, starting a new one when needed."""
        if session_id:
            try:
                return self.get(session_id)
            except SessionNotFoundError:
                logger.info(f"Unknown session {session_id}, starting a new one")
            except SessionExpiredError:
                logger.info(f"Session {session_id} expired, starting a new one")
        return self.create()

    def delete(self, session_id: str) -> bool:
        """Remove a session. Returns whether it existed."""
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def cleanup_expired_sessions(self) -> int:
        """Remove expired sessions from storage.

        Returns:
            Number of sessions removed.
        """
        now = datetime.now(UTC)
        with self._lock:
            expired_ids = [
                session_id
                for session_id, session in self._sessions.items()
                if now > session.expires_at
            ]
            for session_id in expired_ids:
                del self._sessions[session_id]

        if expired_ids:
            logger.info(f"Cleaned up {len(expired_ids)} expired sessions")

        return len(expired_ids)

    def get_session_count(self) -> int:
        """Get the current number of stored sessions."""
        with self._lock:
            return len(self._sessions)

    def clear_all(self) -> None:
        """Clear all sessions. Used primarily for testing."""
        with self._lock:
            self._sessions.clear()
        logger.info("All sessions cleared")


_session_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    """Get the global session store, creating it on first use."""
    global _session_store
    if _session_store is None:
        _session_store = SessionStore()
    return _session_store


def reset_session_store() -> None:
    """Reset the global session store. Used primarily for testing."""
    global _session_store
    if _session_store is not None:
        _session_store.stop_cleanup()
        _session_store = None
