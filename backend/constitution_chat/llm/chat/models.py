"""Pydantic models for constitutional law chat sessions."""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class TurnRole(str, Enum):
    """Originator of a conversation turn."""

    SYSTEM = "system"
    USER = "user"
    MODEL = "model"


class ConversationTurn(BaseModel):
    """A single turn in a chat session's in-memory history."""

    role: TurnRole
    content: str

    class Config:
        use_enum_values = True


class ChatErrorKind(str, Enum):
    """Why a send did not produce a reply."""

    MISSING_CREDENTIAL = "missing_credential"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    TIMEOUT = "timeout"
    QUOTA_EXCEEDED = "quota_exceeded"
    AUTH_FAILED = "auth_failed"
    INVALID_REQUEST = "invalid_request"
    NETWORK_ERROR = "network_error"
    UNKNOWN = "unknown"


class ChatResult(BaseModel):
    """Outcome of ChatSession.send_message.

    Exactly one of ``text`` (non-empty) or ``error`` is meaningful.
    """

    text: str = ""
    error: str | None = None
    error_kind: ChatErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class MessageSender(str, Enum):
    """Author of a persisted transcript message."""

    USER = "user"
    ASSISTANT = "assistant"


def _new_message_id() -> str:
    return str(uuid.uuid4())[:12]


class TranscriptMessage(BaseModel):
    """A message as stored in a user's chat transcript."""

    id: str = Field(default_factory=_new_message_id)
    text: str
    sender: MessageSender
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    category: str | None = None
    bookmarked: bool = False


class ChatTranscript(BaseModel):
    """A persisted conversation for one user."""

    id: str
    user_id: str
    messages: list[TranscriptMessage] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ChatSessionInfo(BaseModel):
    """Information about an active chat session."""

    user_id: str
    created_at: datetime
    last_activity: datetime
    turn_count: int
    is_processing: bool = False


class SendMessageRequest(BaseModel):
    """Request to send a user message to the assistant."""

    text: str = Field(description="The user's question")


class SendMessageResponse(BaseModel):
    """Response after sending a message.

    On failure ``assistant_message`` is None and ``error`` holds a message
    suitable for showing to the user.
    """

    user_message: TranscriptMessage
    assistant_message: TranscriptMessage | None = None
    error: str | None = None
    error_kind: ChatErrorKind | None = None


class TextRequest(BaseModel):
    """Request carrying a piece of text for a pure helper."""

    text: str


class CategorizeResponse(BaseModel):
    category: str


class FormatResponse(BaseModel):
    text: str
