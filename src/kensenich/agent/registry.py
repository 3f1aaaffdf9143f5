"""
Tool registry for the assistant.

Maps tool names to ToolDefinitions. The registry is filled once at
startup (see kensenich.agent.tools.build_default_registry) and then
frozen; after that it is read-only and shared by all requests.

Usage:

    registry = ToolRegistry()

    @registry.tool(
        "getTasks",
        "Fetch tasks, optionally filtered by status",
        status=ToolParameter("string", "Status filter"),
    )
    async def get_tasks(db, params):
        ...

    registry.freeze()
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterator

from kensenich.db.client import Database

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Database, dict[str, Any]], Awaitable[dict[str, Any] | list[Any]]]


class RegistryFrozenError(RuntimeError):
    """Raised when registering on a registry that has been frozen."""


@dataclass(frozen=True)
class ToolParameter:
    """One named tool argument."""

    type: str  # "string", "number", "object", ...
    description: str
    required: bool = False


@dataclass(frozen=True)
class ToolDefinition:
    """A named capability the assistant can invoke."""

    name: str
    description: str
    handler: ToolHandler
    parameters: dict[str, ToolParameter] = field(default_factory=dict)

    @property
    def required_parameters(self) -> list[str]:
        return [name for name, param in self.parameters.items() if param.required]

    def describe(self) -> dict[str, Any]:
        """JSON-friendly description (handler omitted)."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {
                name: {
                    "type": param.type,
                    "description": param.description,
                    "required": param.required,
                }
                for name, param in self.parameters.items()
            },
        }


class ToolRegistry:
    """Name → ToolDefinition, iterated in registration order."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        self._frozen = False

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, definition: ToolDefinition) -> None:
        """Register (or replace) a tool by name."""
        if self._frozen:
            raise RegistryFrozenError(f"Cannot register '{definition.name}': registry is frozen")
        if definition.name in self._tools:
            logger.debug(f"Replacing tool definition: {definition.name}")
        self._tools[definition.name] = definition

    def tool(self, name: str, description: str, **parameters: ToolParameter):
        """Decorator form of register()."""

        def decorator(handler: ToolHandler) -> ToolHandler:
            self.register(ToolDefinition(name, description, handler, dict(parameters)))
            return handler

        return decorator

    def freeze(self) -> "ToolRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)
