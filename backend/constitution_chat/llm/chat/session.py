"""ChatSession mediates a bounded, rate-limited conversation with Gemini."""

import asyncio
import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Protocol

import httpx

from constitution_chat.llm.chat.models import (
    ChatErrorKind,
    ChatResult,
    ChatSessionInfo,
    ConversationTurn,
    TurnRole,
)
from constitution_chat.llm.chat.rate_limiter import RateLimiter, get_rate_limiter
from constitution_chat.llm.gemini_client import GeminiClient, get_api_key

logger = logging.getLogger(__name__)

# User/model turns kept after the system turn (5 exchanges)
MAX_HISTORY_TURNS = 10

REQUEST_TIMEOUT_SECONDS = 15.0

SYSTEM_PROMPT = """You are a specialized AI assistant focused exclusively on Indian Constitutional law. Your purpose is to provide accurate, helpful information about the Indian Constitution, legal principles, and related topics.

Guidelines:
1. Only answer questions related to Indian Constitutional law, the judiciary system, legal principles, and related topics.
2. If a question is outside your scope, politely redirect the conversation to constitutional topics.
3. Provide citations to specific Articles, Sections, Amendments, or landmark cases when relevant.
4. Explain legal terminology in simple, accessible language.
5. Structure complex answers with bullet points or numbered lists for clarity.
6. Keep responses concise (under 300 words) but comprehensive.
7. When uncertain, acknowledge limitations rather than providing potentially incorrect information.
8. Maintain a formal, professional tone appropriate for legal discussions.

Your responses should be accurate, educational, and helpful for users seeking to understand Indian Constitutional law.
"""

ERROR_MESSAGES: dict[ChatErrorKind, str] = {
    ChatErrorKind.MISSING_CREDENTIAL: (
        "API key is missing. Please check your environment configuration."
    ),
    ChatErrorKind.RATE_LIMIT_EXCEEDED: "Rate limit exceeded. Please try again in a moment.",
    ChatErrorKind.TIMEOUT: "Request timed out. Please try again.",
    ChatErrorKind.QUOTA_EXCEEDED: (
        "The API rate limit has been exceeded. Please try again later. Please try again."
    ),
    ChatErrorKind.AUTH_FAILED: (
        "API key authentication failed. Please check your API key. Please try again."
    ),
    ChatErrorKind.INVALID_REQUEST: (
        "The request was invalid. Please try a different question. Please try again."
    ),
    ChatErrorKind.NETWORK_ERROR: (
        "Network error. Please check your internet connection. Please try again."
    ),
    ChatErrorKind.UNKNOWN: "An error occurred while processing your request. Please try again.",
}


class ReplyGenerator(Protocol):
    """Anything that can produce the next model turn."""

    async def generate_reply(
        self,
        system_instruction: str,
        turns: list[ConversationTurn],
    ) -> str:
        ...


def classify_error(error: Exception) -> ChatErrorKind:
    """Map a provider failure to an error kind.

    Status codes are matched as substrings of the error text, the same way
    for every client implementation.
    """
    message = str(error)

    if "429" in message:
        return ChatErrorKind.QUOTA_EXCEEDED
    if "403" in message:
        return ChatErrorKind.AUTH_FAILED
    if "400" in message:
        return ChatErrorKind.INVALID_REQUEST
    if isinstance(error, (ConnectionError, httpx.TransportError)):
        return ChatErrorKind.NETWORK_ERROR
    if "network" in message.lower():
        return ChatErrorKind.NETWORK_ERROR
    return ChatErrorKind.UNKNOWN


def error_result(kind: ChatErrorKind) -> ChatResult:
    """Build a failed ChatResult carrying the user-facing message."""
    return ChatResult(text="", error=ERROR_MESSAGES[kind], error_kind=kind)


class SessionBusyError(RuntimeError):
    """Raised when a session already has an exchange in progress."""


class ChatSession:
    """A single constitutional law conversation.

    The session maintains:
    - The system turn followed by at most MAX_HISTORY_TURNS user/model turns
    - A reference to the (usually shared) rate limiter
    - A generation counter, bumped by reset(), so replies that arrive after a
      reset never touch the fresh history

    Only one exchange runs at a time. Callers that do their own async work
    around a send reserve the session first with claim(); a second
    concurrent send_message raises SessionBusyError.
    """

    def __init__(
        self,
        session_id: str | None = None,
        client: ReplyGenerator | None = None,
        rate_limiter: RateLimiter | None = None,
    ):
        """Initialize the session.

        Args:
            session_id: Identifier for logging. Generated if not given.
            client: Reply generator. If not given, a GeminiClient is built
                from the environment; without a key every send fails.
            rate_limiter: Limiter to count requests against. Defaults to the
                process-wide shared limiter.
        """
        self.session_id = session_id or str(uuid.uuid4())[:12]
        self.created_at = datetime.now()
        self.last_activity = datetime.now()
        self._rate_limiter = rate_limiter or get_rate_limiter()
        self._turns: list[ConversationTurn] = [
            ConversationTurn(role=TurnRole.SYSTEM, content=SYSTEM_PROMPT)
        ]
        self._generation = 0
        self._claimed = False
        self._in_flight = False
        self._client = client if client is not None else self._build_default_client()

    def _build_default_client(self) -> ReplyGenerator | None:
        api_key = get_api_key()
        if not api_key:
            logger.warning(
                "Gemini API key is missing. Please check your environment variables."
            )
            return None

        try:
            return GeminiClient(api_key=api_key)
        except Exception as e:
            logger.error(f"Error initializing Gemini API: {e}")
            return None

    @property
    def has_credential(self) -> bool:
        """Whether the session can reach the generation backend."""
        return self._client is not None

    @property
    def is_processing(self) -> bool:
        """Whether the session is reserved or waiting on a reply."""
        return self._claimed or self._in_flight

    @property
    def turns(self) -> list[ConversationTurn]:
        """All retained turns, system turn included."""
        return [turn.model_copy() for turn in self._turns]

    @contextmanager
    def claim(self) -> Iterator["ChatSession"]:
        """Reserve the session for one exchange.

        The check and the reservation happen without yielding to the event
        loop, so two requests for the same session cannot both get through.

        Raises:
            SessionBusyError: If the session is already reserved or waiting.
        """
        if self.is_processing:
            raise SessionBusyError("Session is busy processing another message.")

        self._claimed = True
        try:
            yield self
        finally:
            self._claimed = False

    async def send_message(self, message: str) -> ChatResult:
        """Send a user message and wait for the model's reply.

        Args:
            message: The user's text. Emptiness is the caller's concern.

        Returns:
            ChatResult with the raw reply text, or with an error message
            and kind. Never raises for provider or timeout failures.

        Raises:
            SessionBusyError: If another send is still waiting on a reply.
        """
        if self._in_flight:
            raise SessionBusyError("Session is already processing a message.")

        if self._client is None:
            return error_result(ChatErrorKind.MISSING_CREDENTIAL)

        if not self._rate_limiter.try_acquire():
            logger.warning(f"Rate limit reached for session {self.session_id}")
            return error_result(ChatErrorKind.RATE_LIMIT_EXCEEDED)

        self.last_activity = datetime.now()
        self._append(ConversationTurn(role=TurnRole.USER, content=message))
        generation = self._generation
        self._in_flight = True

        try:
            text = await asyncio.wait_for(
                self._client.generate_reply(SYSTEM_PROMPT, self.get_history()),
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Gemini request timed out after {REQUEST_TIMEOUT_SECONDS}s "
                f"for session {self.session_id}"
            )
            return error_result(ChatErrorKind.TIMEOUT)
        except Exception as e:
            logger.error(f"Error in Gemini API for session {self.session_id}: {e}")
            return error_result(classify_error(e))
        finally:
            self._in_flight = False

        if generation != self._generation:
            logger.info(
                f"Session {self.session_id} was reset while waiting; reply not recorded"
            )
            return ChatResult(text=text)

        self._append(ConversationTurn(role=TurnRole.MODEL, content=text))
        return ChatResult(text=text)

    def _append(self, turn: ConversationTurn) -> None:
        """Append a turn, keeping the system turn and the newest turns."""
        self._turns.append(turn)
        if len(self._turns) > MAX_HISTORY_TURNS + 1:
            self._turns = [self._turns[0], *self._turns[-MAX_HISTORY_TURNS:]]

    def get_history(self) -> list[ConversationTurn]:
        """Return every turn except the system instruction, oldest first."""
        return [turn.model_copy() for turn in self._turns[1:]]

    def reset(self) -> None:
        """Drop all turns but the system instruction."""
        self._turns = [self._turns[0]]
        self._generation += 1
        logger.info(f"Chat session {self.session_id} reset")

    def get_info(self, user_id: str) -> ChatSessionInfo:
        """Get session information."""
        return ChatSessionInfo(
            user_id=user_id,
            created_at=self.created_at,
            last_activity=self.last_activity,
            turn_count=len(self._turns) - 1,
            is_processing=self.is_processing,
        )
