"""ChatSessionManager handles per-user session lifecycle."""

import asyncio
import logging
import os
from datetime import datetime, timedelta
from typing import Any

from constitution_chat.llm.chat.models import ChatSessionInfo
from constitution_chat.llm.chat.rate_limiter import RateLimiter, get_rate_limiter
from constitution_chat.llm.chat.session import ChatSession, ReplyGenerator

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TIMEOUT_MINUTES = 30

# Singleton manager instance
_manager: "ChatSessionManager | None" = None


class ChatSessionManager:
    """Manages chat session lifecycle.

    Responsibilities:
    - Create one session per user on first use
    - Store active sessions (in-memory)
    - Share a single rate limiter across all sessions
    - Cleanup expired sessions
    """

    def __init__(
        self,
        session_timeout_minutes: int = DEFAULT_SESSION_TIMEOUT_MINUTES,
        client: ReplyGenerator | None = None,
        rate_limiter: RateLimiter | None = None,
    ):
        """Initialize the session manager.

        Args:
            session_timeout_minutes: How long idle sessions live before cleanup.
            client: Reply generator handed to every session. Sessions build
                their own Gemini client from the environment when omitted.
            rate_limiter: Limiter shared by every session. Defaults to the
                process-wide limiter.
        """
        self._sessions: dict[str, ChatSession] = {}
        self._session_timeout = timedelta(minutes=session_timeout_minutes)
        self._client = client
        self._rate_limiter = rate_limiter or get_rate_limiter()
        self._cleanup_task: asyncio.Task | None = None

    @property
    def active_session_count(self) -> int:
        """Number of active sessions."""
        return len(self._sessions)

    def get_or_create_session(self, user_id: str) -> ChatSession:
        """Get the user's session, creating it on first use.

        Args:
            user_id: The user the conversation belongs to.

        Returns:
            The user's ChatSession.
        """
        session = self._sessions.get(user_id)
        if session:
            session.last_activity = datetime.now()
            return session

        session = ChatSession(client=self._client, rate_limiter=self._rate_limiter)
        self._sessions[user_id] = session
        logger.info(
            f"Created chat session {session.session_id} for user {user_id} "
            f"(total sessions: {len(self._sessions)})"
        )
        return session

    def get_session(self, user_id: str) -> ChatSession | None:
        """Get a user's session if one exists."""
        session = self._sessions.get(user_id)
        if session:
            # Update last activity for keepalive
            session.last_activity = datetime.now()
        return session

    def list_sessions(self) -> list[ChatSessionInfo]:
        """List all active sessions."""
        return [s.get_info(user_id) for user_id, s in self._sessions.items()]

    def close_session(self, user_id: str) -> bool:
        """Forget a user's session.

        Returns:
            True if a session was found and removed, False otherwise.
        """
        session = self._sessions.pop(user_id, None)
        if session:
            logger.info(f"Closed chat session {session.session_id} for user {user_id}")
            return True
        return False

    def cleanup_expired(self) -> int:
        """Remove sessions that have been idle too long.

        Sessions waiting on a reply are never removed.

        Returns:
            Number of sessions cleaned up.
        """
        now = datetime.now()
        expired_ids = [
            user_id for user_id, s in self._sessions.items()
            if now - s.last_activity > self._session_timeout and not s.is_processing
        ]

        for user_id in expired_ids:
            self.close_session(user_id)

        if expired_ids:
            logger.info(f"Cleaned up {len(expired_ids)} expired chat session(s)")

        return len(expired_ids)

    async def start_cleanup_task(self) -> None:
        """Start the background cleanup task."""
        if self._cleanup_task is None:
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())
            logger.info("Started chat session cleanup background task")

    async def stop_cleanup_task(self) -> None:
        """Stop the background cleanup task."""
        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None
            logger.info("Stopped chat session cleanup background task")

    async def _cleanup_loop(self) -> None:
        """Background loop that cleans up expired sessions."""
        while True:
            try:
                await asyncio.sleep(60)  # Check every minute
                self.cleanup_expired()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.exception(f"Error in chat cleanup task: {e}")

    async def shutdown(self) -> None:
        """Stop background work and drop all sessions."""
        await self.stop_cleanup_task()
        self._sessions.clear()
        logger.info("Chat session manager shutdown complete")

    def get_stats(self) -> dict[str, Any]:
        """Get manager statistics."""
        now = datetime.now()
        return {
            "active_sessions": len(self._sessions),
            "processing_sessions": sum(1 for s in self._sessions.values() if s.is_processing),
            "oldest_session_age_seconds": self._oldest_session_age(now),
            "requests_in_window": self._rate_limiter.requests_in_window,
            "cleanup_task_running": self._cleanup_task is not None,
        }

    def _oldest_session_age(self, now: datetime) -> float | None:
        """Get age of oldest session in seconds."""
        if not self._sessions:
            return None
        oldest = min(s.created_at for s in self._sessions.values())
        return (now - oldest).total_seconds()


def get_session_manager() -> ChatSessionManager:
    """Get the singleton session manager instance."""
    global _manager
    if _manager is None:
        timeout = int(
            os.getenv("CHAT_SESSION_TIMEOUT_MINUTES", str(DEFAULT_SESSION_TIMEOUT_MINUTES))
        )
        _manager = ChatSessionManager(session_timeout_minutes=timeout)
    return _manager


async def init_session_manager() -> ChatSessionManager:
    """Initialize the session manager and start background tasks."""
    manager = get_session_manager()
    await manager.start_cleanup_task()
    return manager


async def shutdown_session_manager() -> None:
    """Shutdown the session manager."""
    global _manager
    if _manager:
        await _manager.shutdown()
        _manager = None
