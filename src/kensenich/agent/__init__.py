"""
KensenichManager - Assistant.

Tool registry, text-marker tool calling, context assembly and the
agent chat turn.
"""

from kensenich.agent.calls import ToolCall, clean_response, extract_tool_calls, iter_tool_calls
from kensenich.agent.chat import ChatTurn, run_agent_turn
from kensenich.agent.context import AgentContext, build_agent_context
from kensenich.agent.dispatcher import ToolResult, dispatch, dispatch_all, render_tool_prompt
from kensenich.agent.registry import (
    RegistryFrozenError,
    ToolDefinition,
    ToolParameter,
    ToolRegistry,
)
from kensenich.agent.tools import build_default_registry

__all__ = [
    # Registry
    "ToolRegistry",
    "ToolDefinition",
    "ToolParameter",
    "RegistryFrozenError",
    "build_default_registry",
    # Calls
    "ToolCall",
    "iter_tool_calls",
    "extract_tool_calls",
    "clean_response",
    # Dispatch
    "ToolResult",
    "dispatch",
    "dispatch_all",
    "render_tool_prompt",
    # Context and chat
    "AgentContext",
    "build_agent_context",
    "ChatTurn",
    "run_agent_turn",
]
