"""Database operations for persisted chat transcripts."""

import json
import uuid
from datetime import datetime

import aiosqlite

from constitution_chat.db.database import get_db
from constitution_chat.llm.chat.models import ChatTranscript, TranscriptMessage


def _row_to_transcript(row: aiosqlite.Row) -> ChatTranscript:
    """Convert a database row to a ChatTranscript model."""
    messages = json.loads(row["messages_json"] or "[]")

    return ChatTranscript(
        id=row["id"],
        user_id=row["user_id"],
        messages=[TranscriptMessage(**m) for m in messages],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def _dump_messages(messages: list[TranscriptMessage]) -> str:
    return json.dumps([m.model_dump(mode="json") for m in messages])


async def get_history(history_id: str) -> ChatTranscript | None:
    """Get a transcript by ID."""
    db = await get_db()

    cursor = await db.execute(
        "SELECT * FROM chat_history WHERE id = ?",
        [history_id],
    )
    row = await cursor.fetchone()

    if not row:
        return None

    return _row_to_transcript(row)


async def get_latest_history(user_id: str) -> ChatTranscript | None:
    """Get the user's most recently updated transcript."""
    db = await get_db()

    cursor = await db.execute(
        """
        SELECT * FROM chat_history
        WHERE user_id = ?
        ORDER BY updated_at DESC, rowid DESC
        LIMIT 1
        """,
        [user_id],
    )
    row = await cursor.fetchone()

    if not row:
        return None

    return _row_to_transcript(row)


async def create_history(user_id: str) -> ChatTranscript:
    """Create an empty transcript for a user."""
    db = await get_db()

    history_id = str(uuid.uuid4())
    now = datetime.utcnow().isoformat()

    await db.execute(
        """
        INSERT INTO chat_history (id, user_id, messages_json, created_at, updated_at)
        VALUES (?, ?, '[]', ?, ?)
        """,
        [history_id, user_id, now, now],
    )
    await db.commit()

    return await get_history(history_id)  # type: ignore


async def get_or_create_latest_history(user_id: str) -> ChatTranscript:
    """Get the user's latest transcript, creating one if they have none."""
    transcript = await get_latest_history(user_id)
    if transcript:
        return transcript
    return await create_history(user_id)


async def update_messages(
    history_id: str,
    messages: list[TranscriptMessage],
) -> bool:
    """Replace a transcript's messages.

    Returns:
        True if the transcript exists and was updated.
    """
    db = await get_db()

    cursor = await db.execute(
        "UPDATE chat_history SET messages_json = ?, updated_at = ? WHERE id = ?",
        [_dump_messages(messages), datetime.utcnow().isoformat(), history_id],
    )
    await db.commit()

    return cursor.rowcount > 0


async def toggle_bookmark(history_id: str, message_id: str) -> TranscriptMessage | None:
    """Flip the bookmark flag on one message.

    Returns:
        The updated message, or None if the transcript or message is missing.
    """
    transcript = await get_history(history_id)
    if not transcript:
        return None

    updated: TranscriptMessage | None = None
    for message in transcript.messages:
        if message.id == message_id:
            message.bookmarked = not message.bookmarked
            updated = message
            break

    if updated is None:
        return None

    await update_messages(history_id, transcript.messages)
    return updated
