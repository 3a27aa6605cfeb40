"""Chat session infrastructure for constitutional law conversations.

This module provides the core abstractions for session-based chat:
- ChatSession: Bounded, rate-limited conversation with Gemini
- ChatSessionManager: Per-user session lifecycle
- RateLimiter: Fixed-window request ceiling, shared across sessions by default
- categorize_question / format_legal_response: Pure text helpers
"""

from constitution_chat.llm.chat.legal_text import categorize_question, format_legal_response
from constitution_chat.llm.chat.manager import ChatSessionManager, get_session_manager
from constitution_chat.llm.chat.models import (
    ChatErrorKind,
    ChatResult,
    ChatSessionInfo,
    ConversationTurn,
    TranscriptMessage,
    TurnRole,
)
from constitution_chat.llm.chat.rate_limiter import RateLimiter, get_rate_limiter
from constitution_chat.llm.chat.session import ChatSession

__all__ = [
    "ChatErrorKind",
    "ChatResult",
    "ChatSession",
    "ChatSessionInfo",
    "ChatSessionManager",
    "ConversationTurn",
    "RateLimiter",
    "TranscriptMessage",
    "TurnRole",
    "categorize_question",
    "format_legal_response",
    "get_rate_limiter",
    "get_session_manager",
]
