"""
Text-marker tool calls.

The model requests a tool by writing a marker into its reply:

    [TOOL_CALL: getTasks({"status": "todo"})]
    [TOOL_CALL: getDailyHabits()]

The argument is empty or a JSON object literal. Extraction and cleaning
share one compiled pattern, so anything extraction sees as a marker is
also removed from the text shown to the user.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterator

logger = logging.getLogger(__name__)

# Non-greedy up to the first ")]"; arguments may span lines but never run
# into the next marker, so an unclosed marker cannot swallow a later one
TOOL_CALL_RE = re.compile(r"\[TOOL_CALL:\s*(\w+)\(((?:(?!\[TOOL_CALL:).)*?)\)\]", re.DOTALL)

# Leftover of a marker that was never closed, up to the end of its line
_UNCLOSED_RE = re.compile(r"\[TOOL_CALL:[^\n]*")

_BLANK_LINES_RE = re.compile(r"\n\s*\n\s*\n+")


@dataclass(frozen=True)
class ToolCall:
    """A parsed tool request from one model response."""

    name: str
    args: dict[str, Any] = field(default_factory=dict)
    raw: str = ""
    span: tuple[int, int] = (0, 0)


def iter_tool_calls(text: str) -> Iterator[ToolCall]:
    """
    Yield well-formed tool calls left to right.

    Markers whose argument is not a JSON object are logged and skipped.
    Each call to this function starts a fresh scan.
    """
    for match in TOOL_CALL_RE.finditer(text or ""):
        name, raw_args = match.group(1), match.group(2).strip()

        if not raw_args:
            args: Any = {}
        else:
            try:
                args = json.loads(raw_args)
            except json.JSONDecodeError as e:
                logger.warning(f"Skipping {name} call with invalid arguments: {e}")
                continue

        if not isinstance(args, dict):
            logger.warning(f"Skipping {name} call: arguments must be a JSON object, got {type(args).__name__}")
            continue

        yield ToolCall(name=name, args=args, raw=match.group(0), span=match.span())


def extract_tool_calls(text: str) -> list[ToolCall]:
    return list(iter_tool_calls(text))


def clean_response(text: str) -> str:
    """Remove every marker (well-formed or not) and tidy the whitespace left behind."""
    cleaned = TOOL_CALL_RE.sub("", text or "")
    cleaned = _UNCLOSED_RE.sub("", cleaned)
    cleaned = _BLANK_LINES_RE.sub("\n\n", cleaned)
    return cleaned.strip()
