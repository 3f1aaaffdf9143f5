"""
Conversation persistence.

Agent chat turns are stored in ai_conversations / ai_messages so the
frontend can list and reopen past conversations.
"""

import json
import logging
from typing import Any

from kensenich.agent.chat import ChatTurn
from kensenich.db.client import Database
from kensenich.db.records import generate_id, next_timestamp, now_iso
from kensenich.errors import NotFoundError

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 50


def conversation_title(first_message: str) -> str:
    title = " ".join(first_message.split())[:TITLE_MAX_LENGTH].rstrip()
    return title or "New conversation"


async def ensure_conversation(db: Database, conversation_id: str | None, first_message: str) -> str:
    """Return an existing conversation id, or create one titled after the first message."""
    if conversation_id:
        existing = await db.fetch_one("SELECT id FROM ai_conversations WHERE id = ?", (conversation_id,))
        if existing is not None:
            return conversation_id

    new_id = conversation_id or generate_id()
    timestamp = now_iso()
    await db.execute(
        "INSERT INTO ai_conversations (id, title, created_at, updated_at) VALUES (?, ?, ?, ?)",
        (new_id, conversation_title(first_message), timestamp, timestamp),
    )
    logger.info(f"Created conversation {new_id}")
    return new_id


async def add_message(
    db: Database,
    conversation_id: str,
    role: str,
    content: str,
    tool_name: str | None = None,
    tool_result: str | None = None,
) -> str:
    message_id = generate_id()
    await db.execute(
        """
        INSERT INTO ai_messages (id, conversation_id, role, content, tool_name, tool_result, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (message_id, conversation_id, role, content, tool_name, tool_result, now_iso()),
    )
    return message_id


async def record_turn(db: Database, conversation_id: str, user_message: str, turn: ChatTurn) -> None:
    """Store the user message and the assistant answer of one turn."""
    await add_message(db, conversation_id, "user", user_message)

    tool_name = ",".join(turn.tools_used) or None
    tool_result = None
    if turn.tool_results:
        tool_result = json.dumps(
            [{"tool": r.call.name, "args": r.call.args, "result": r.result} for r in turn.tool_results],
            ensure_ascii=False,
            default=str,
        )
    await add_message(db, conversation_id, "assistant", turn.message, tool_name, tool_result)

    updated = await db.fetch_value("SELECT updated_at FROM ai_conversations WHERE id = ?", (conversation_id,))
    await db.execute(
        "UPDATE ai_conversations SET updated_at = ? WHERE id = ?",
        (next_timestamp(updated), conversation_id),
    )


async def list_conversations(db: Database, limit: int = 50) -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT c.*, COUNT(m.id) AS message_count
        FROM ai_conversations c
        LEFT JOIN ai_messages m ON m.conversation_id = c.id
        GROUP BY c.id
        ORDER BY c.updated_at DESC
        LIMIT ?
        """,
        (limit,),
    )


async def get_conversation(db: Database, conversation_id: str) -> dict[str, Any]:
    conversation = await db.fetch_one("SELECT * FROM ai_conversations WHERE id = ?", (conversation_id,))
    if conversation is None:
        raise NotFoundError("Conversation not found")

    conversation["messages"] = await db.fetch_all(
        "SELECT * FROM ai_messages WHERE conversation_id = ? ORDER BY created_at, rowid",
        (conversation_id,),
    )
    return conversation
