"""Chat API endpoints for the constitutional law assistant."""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from constitution_chat.db import chat_history_store
from constitution_chat.llm.chat.legal_text import categorize_question, format_legal_response
from constitution_chat.llm.chat.manager import get_session_manager
from constitution_chat.llm.chat.models import (
    CategorizeResponse,
    ChatTranscript,
    ConversationTurn,
    FormatResponse,
    MessageSender,
    SendMessageRequest,
    SendMessageResponse,
    TextRequest,
    TranscriptMessage,
)
from constitution_chat.llm.chat.session import ChatSession, SessionBusyError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/chat/users/{user_id}/messages")
async def send_chat_message(user_id: str, request: SendMessageRequest) -> SendMessageResponse:
    """Send a question to the assistant and record both sides of the exchange.

    Provider failures are not HTTP errors: the response carries ``error`` and
    ``error_kind`` and no assistant message.
    """
    text = request.text.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Message is required")

    manager = get_session_manager()
    session = manager.get_or_create_session(user_id)

    try:
        with session.claim():
            return await _run_exchange(user_id, session, text)
    except SessionBusyError:
        raise HTTPException(
            status_code=409,
            detail="Session is busy processing another message",
        )


async def _run_exchange(user_id: str, session: ChatSession, text: str) -> SendMessageResponse:
    """Persist the question, ask the session, persist the answer."""
    transcript = await chat_history_store.get_or_create_latest_history(user_id)
    user_message = TranscriptMessage(text=text, sender=MessageSender.USER)
    messages = [*transcript.messages, user_message]
    await chat_history_store.update_messages(transcript.id, messages)

    result = await session.send_message(text)

    if not result.ok:
        logger.info(f"Chat send for user {user_id} failed: {result.error_kind}")
        return SendMessageResponse(
            user_message=user_message,
            error=result.error,
            error_kind=result.error_kind,
        )

    assistant_message = TranscriptMessage(
        text=format_legal_response(result.text),
        sender=MessageSender.ASSISTANT,
        category=categorize_question(text),
    )
    messages.append(assistant_message)
    await chat_history_store.update_messages(transcript.id, messages)

    return SendMessageResponse(
        user_message=user_message,
        assistant_message=assistant_message,
    )


@router.get("/chat/users/{user_id}/history")
async def get_session_history(user_id: str) -> list[ConversationTurn]:
    """Turns retained in the user's live session (system turn excluded)."""
    manager = get_session_manager()
    session = manager.get_session(user_id)
    if not session:
        return []
    return session.get_history()


@router.get("/chat/users/{user_id}/transcript")
async def get_transcript(user_id: str) -> ChatTranscript:
    """The user's latest persisted transcript, created if absent."""
    return await chat_history_store.get_or_create_latest_history(user_id)


@router.post("/chat/users/{user_id}/reset")
async def reset_conversation(user_id: str) -> ChatTranscript:
    """Clear the live session and start a new empty transcript."""
    manager = get_session_manager()
    session = manager.get_session(user_id)
    if session:
        session.reset()

    transcript = await chat_history_store.create_history(user_id)
    logger.info(f"Reset conversation for user {user_id}")
    return transcript


@router.post("/chat/users/{user_id}/messages/{message_id}/bookmark")
async def toggle_message_bookmark(user_id: str, message_id: str) -> TranscriptMessage:
    """Toggle the bookmark flag on a message in the latest transcript."""
    transcript = await chat_history_store.get_latest_history(user_id)
    if not transcript:
        raise HTTPException(status_code=404, detail="Transcript not found")

    message = await chat_history_store.toggle_bookmark(transcript.id, message_id)
    if not message:
        raise HTTPException(status_code=404, detail="Message not found")
    return message


@router.post("/chat/categorize")
async def categorize(request: TextRequest) -> CategorizeResponse:
    """Categorize a question by constitutional topic."""
    return CategorizeResponse(category=categorize_question(request.text))


@router.post("/chat/format")
async def format_response(request: TextRequest) -> FormatResponse:
    """Apply legal emphasis formatting to a piece of text."""
    return FormatResponse(text=format_legal_response(request.text))


# Admin endpoint for monitoring
@router.get("/chat/stats")
async def get_chat_stats() -> dict[str, Any]:
    """Get chat session statistics (admin endpoint)."""
    manager = get_session_manager()
    return manager.get_stats()
