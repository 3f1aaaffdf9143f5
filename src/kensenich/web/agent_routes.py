"""
Assistant API endpoints.

    POST /ai/agent/chat           one agent turn (tool calling + persistence)
    GET  /ai/conversations        stored conversations, newest first
    GET  /ai/conversations/{id}   one conversation with its messages
    GET  /ai/tools                registered tool definitions
"""

import logging
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field

from kensenich.agent.chat import CompletionFn, run_agent_turn
from kensenich.agent.conversations import (
    ensure_conversation,
    get_conversation,
    list_conversations,
    record_turn,
)
from kensenich.agent.registry import ToolRegistry
from kensenich.db.client import Database
from kensenich.errors import ValidationError
from kensenich.web.deps import get_db, get_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])


# =============================================================================
# Models
# =============================================================================


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class AgentChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(..., min_length=1)
    conversationId: str | None = None


class AgentChatResponse(BaseModel):
    message: str
    toolsUsed: list[str]
    conversationId: str


def get_completion(request: Request) -> CompletionFn:
    return request.app.state.complete


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/agent/chat")
async def agent_chat(
    req: AgentChatRequest,
    db: Database = Depends(get_db),
    registry: ToolRegistry = Depends(get_registry),
    complete: CompletionFn = Depends(get_completion),
) -> AgentChatResponse:
    """Run one assistant turn and store it in the conversation."""
    user_messages = [m for m in req.messages if m.role == "user"]
    if not user_messages:
        raise ValidationError("At least one user message is required")
    last_user = user_messages[-1].content

    turn = await run_agent_turn(
        db,
        registry,
        [m.model_dump() for m in req.messages],
        complete,
    )

    conversation_id = await ensure_conversation(db, req.conversationId, user_messages[0].content)
    await record_turn(db, conversation_id, last_user, turn)

    return AgentChatResponse(
        message=turn.message,
        toolsUsed=turn.tools_used,
        conversationId=conversation_id,
    )


@router.get("/conversations")
async def conversations(
    limit: int = Query(50, ge=1, le=500),
    db: Database = Depends(get_db),
) -> list[dict[str, Any]]:
    return await list_conversations(db, limit)


@router.get("/conversations/{conversation_id}")
async def conversation_detail(conversation_id: str, db: Database = Depends(get_db)) -> dict[str, Any]:
    return await get_conversation(db, conversation_id)


@router.get("/tools")
async def tools(registry: ToolRegistry = Depends(get_registry)) -> list[dict[str, Any]]:
    return [definition.describe() for definition in registry]
