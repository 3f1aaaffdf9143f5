"""
Agent chat turn.

One turn: build the context prompt, ask the model, run any tool calls
in its reply, feed the results back and ask again so the final answer
can use them. Follow-up rounds repeat while the model keeps requesting
tools, up to `agent_max_tool_rounds`.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from kensenich.agent.calls import clean_response, extract_tool_calls
from kensenich.agent.context import build_agent_context
from kensenich.agent.dispatcher import ToolResult, dispatch_all
from kensenich.agent.registry import ToolRegistry
from kensenich.config import settings as app_settings
from kensenich.db.client import Database

logger = logging.getLogger(__name__)

# complete(system_prompt=..., messages=[...]) -> assistant text
CompletionFn = Callable[..., Awaitable[str]]


@dataclass
class ChatTurn:
    message: str
    tools_used: list[str] = field(default_factory=list)
    tool_results: list[ToolResult] = field(default_factory=list)


def format_tool_results(results: list[ToolResult]) -> str:
    """Render results as the follow-up user message."""
    lines = ["Tool results:"]
    for item in results:
        lines.append(f"[TOOL_RESULT: {item.call.name}] {json.dumps(item.result, ensure_ascii=False, default=str)}")
    lines.append("")
    lines.append("Use these results to answer the user's last message.")
    return "\n".join(lines)


async def run_agent_turn(
    db: Database,
    registry: ToolRegistry,
    messages: list[dict[str, Any]],
    complete: CompletionFn,
    settings: Any = None,
) -> ChatTurn:
    """
    Run one assistant turn over the conversation so far.

    Args:
        db: Database handed to tool handlers
        registry: Tools the model may call
        messages: Conversation as {"role", "content"} dicts, user message last
        complete: Chat completion function (kensenich.llm.complete_chat in production)
        settings: Settings override, defaults to the application settings
    """
    settings = settings or app_settings

    context = await build_agent_context(db, registry, settings)
    system_prompt = context.format()
    history = [{"role": m["role"], "content": m["content"]} for m in messages]

    reply = await complete(system_prompt=system_prompt, messages=history)
    turn = ChatTurn(message="")

    rounds = 0
    calls = extract_tool_calls(reply)
    while calls and rounds < settings.agent_max_tool_rounds:
        rounds += 1
        logger.info(f"Tool round {rounds}: {', '.join(c.name for c in calls)}")

        results = await dispatch_all(registry, db, calls)
        turn.tools_used.extend(r.call.name for r in results)
        turn.tool_results.extend(results)

        history.append({"role": "assistant", "content": reply})
        history.append({"role": "user", "content": format_tool_results(results)})

        reply = await complete(system_prompt=system_prompt, messages=history)
        calls = extract_tool_calls(reply)

    if calls:
        logger.warning(f"Dropping {len(calls)} tool call(s) after {rounds} round(s)")

    turn.message = clean_response(reply)
    return turn
