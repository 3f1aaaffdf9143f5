"""
Tool dispatch.

Runs parsed ToolCalls against the registry. One failing call never
affects the others: every outcome, including unknown tools and handler
exceptions, comes back as a result object for the model to read.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from kensenich.agent.calls import ToolCall
from kensenich.agent.registry import ToolDefinition, ToolRegistry
from kensenich.db.client import Database

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolResult:
    call: ToolCall
    result: Any

    @property
    def ok(self) -> bool:
        return not (isinstance(self.result, dict) and "error" in self.result)


def _signature(definition: ToolDefinition) -> str:
    params = [
        name if param.required else f"{name}?"
        for name, param in definition.parameters.items()
    ]
    return f"{definition.name}({', '.join(params)})"


def render_tool_prompt(registry: ToolRegistry) -> str:
    """
    One line per tool, in registration order:

        - createTask(title, priority?, category?, description?) - Create a new task
    """
    return "\n".join(
        f"- {_signature(definition)} - {definition.description}"
        for definition in registry
    )


async def dispatch(registry: ToolRegistry, db: Database, call: ToolCall) -> Any:
    """Execute one tool call and return its result or an {"error": ...} object."""
    definition = registry.get(call.name)
    if definition is None:
        logger.warning(f"Unknown tool requested: {call.name}")
        return {"error": f'Tool "{call.name}" not found'}

    missing = [name for name in definition.required_parameters if call.args.get(name) is None]
    if missing:
        logger.warning(f"Tool {call.name} called without {', '.join(missing)}")
        return {"error": f"Missing required parameter(s): {', '.join(missing)}"}

    logger.info(f"Executing tool {call.name} args={call.args}")
    try:
        return await definition.handler(db, dict(call.args))
    except Exception as e:
        logger.exception(f"Tool {call.name} failed")
        return {"error": str(e) or type(e).__name__}


async def dispatch_all(
    registry: ToolRegistry,
    db: Database,
    calls: Iterable[ToolCall],
) -> list[ToolResult]:
    """Dispatch calls sequentially, in the order given."""
    results = []
    for call in calls:
        results.append(ToolResult(call=call, result=await dispatch(registry, db, call)))
    return results
