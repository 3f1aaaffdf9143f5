"""
Assistant context assembly.

Collects a snapshot of the user's current state (habits, open tasks,
goals, overdue follow-ups, remembered facts, today's sessions) and
renders it into the system prompt.

Each source is queried independently. A store failure in one source
(a missing table on a fresh database, for example) leaves that section
at its default; it never fails the whole prompt.
"""

import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Any, Awaitable, TypeVar

from kensenich.agent.dispatcher import render_tool_prompt
from kensenich.agent.registry import ToolRegistry
from kensenich.agent.tools import overdue_followups, reset_daily_habits, session_totals
from kensenich.config import settings as app_settings
from kensenich.db.client import Database
from kensenich.db.records import today_iso

logger = logging.getLogger(__name__)

T = TypeVar("T")

PENDING_TASK_LIMIT = 5
ACTIVE_GOAL_LIMIT = 5
USER_FACT_LIMIT = 20


@dataclass
class AgentContext:
    """Everything the system prompt is rendered from."""

    assistant_name: str
    language: str
    tool_listing: str
    habits: list[dict[str, Any]] = field(default_factory=list)
    pending_tasks: list[dict[str, Any]] = field(default_factory=list)
    active_goals: list[dict[str, Any]] = field(default_factory=list)
    overdue_followups: list[dict[str, Any]] = field(default_factory=list)
    user_facts: list[dict[str, Any]] = field(default_factory=list)
    today_sessions: dict[str, int] = field(default_factory=lambda: {"sessions": 0, "minutes": 0})

    def format(self) -> str:
        """Render the system prompt."""
        return SYSTEM_PROMPT_TEMPLATE.format(
            name=self.assistant_name,
            language=self.language,
            facts=self._facts_section(),
            habits=self._habits_section(),
            task_count=len(self.pending_tasks),
            tasks=self._tasks_section(),
            goal_count=len(self.active_goals),
            goals=self._goals_section(),
            followup_count=len(self.overdue_followups),
            session_count=self.today_sessions.get("sessions", 0),
            session_minutes=self.today_sessions.get("minutes", 0),
            tools=self.tool_listing,
        )

    def _facts_section(self) -> str:
        if not self.user_facts:
            return "Nothing is known about the user yet."
        return "\n".join(f"- {f['key']}: {f['value']}" for f in self.user_facts)

    def _habits_section(self) -> str:
        if not self.habits:
            return "  No habits defined"
        lines = []
        for h in self.habits:
            done = " (done)" if h.get("completed") else ""
            lines.append(f"  • {h['title']}: {h.get('checked_count') or 0}/{h.get('target_count') or 0}{done}")
        return "\n".join(lines)

    def _tasks_section(self) -> str:
        if not self.pending_tasks:
            return "  No open tasks"
        return "\n".join(f"  • {t['title']} [{_stars(t.get('priority'))}]" for t in self.pending_tasks)

    def _goals_section(self) -> str:
        if not self.active_goals:
            return "  No active goals"
        return "\n".join(f"  • {g['title']}: {g.get('progress') or 0}%" for g in self.active_goals)


SYSTEM_PROMPT_TEMPLATE = """You are {name}, the personal AI assistant in KensenichManager.
You help the user with productivity, task management, goals and business.

=== ABOUT THE USER ===
{facts}

=== CURRENT STATUS ===

Daily habits:
{habits}

Open tasks ({task_count}):
{tasks}

Active goals ({goal_count}):
{goals}

Overdue follow-ups: {followup_count}

Today: {session_count} sessions ({session_minutes} min)

=== AVAILABLE TOOLS ===
You can perform the following actions. When the user asks for data or wants something done, use the matching tool:

{tools}

=== TOOL CALLING ===
To run a tool, answer with this format:
[TOOL_CALL: toolName({{"param": "value"}})]

Examples:
- User asks "How many applications today?" -> [TOOL_CALL: getDailyHabits({{}})]
- User says "Create a task to update my portfolio" -> [TOOL_CALL: createTask({{"title": "Update portfolio", "priority": 3}})]
- User says "I like to work in the morning" -> [TOOL_CALL: saveUserFact({{"key": "Preferred working time", "value": "morning", "category": "preference"}})]

=== RULES ===
- Answer in {language}
- Be proactive and helpful
- Use tools to look things up instead of guessing
- Remember important information about the user with saveUserFact
- For complex actions (email, calendar) use triggerN8nWorkflow
- Keep answers short and to the point"""


def _stars(priority: Any) -> str:
    try:
        count = int(priority or 0)
    except (TypeError, ValueError):
        count = 0
    return "★" * count if count > 0 else "○"


async def _guarded(source: str, query: Awaitable[T], default: T) -> T:
    try:
        return await query
    except sqlite3.Error as e:
        logger.debug(f"Context source '{source}' unavailable: {e}")
        return default


async def _habits(db: Database) -> list[dict[str, Any]]:
    await reset_daily_habits(db)
    return await db.fetch_all("SELECT * FROM daily_habits ORDER BY created_at, id")


async def build_agent_context(
    db: Database,
    registry: ToolRegistry,
    settings: Any = None,
) -> AgentContext:
    """Query every context source and return the assembled AgentContext."""
    settings = settings or app_settings

    habits = await _guarded("habits", _habits(db), [])
    pending_tasks = await _guarded(
        "tasks",
        db.fetch_all(
            "SELECT * FROM tasks WHERE status IN ('todo', 'in_progress') "
            "ORDER BY priority DESC, created_at ASC LIMIT ?",
            (PENDING_TASK_LIMIT,),
        ),
        [],
    )
    active_goals = await _guarded(
        "goals",
        db.fetch_all(
            "SELECT * FROM goals WHERE status = 'active' ORDER BY created_at DESC LIMIT ?",
            (ACTIVE_GOAL_LIMIT,),
        ),
        [],
    )
    followups = await _guarded("followups", overdue_followups(db), [])
    user_facts = await _guarded(
        "facts",
        db.fetch_all(
            "SELECT * FROM ai_user_facts ORDER BY updated_at DESC LIMIT ?",
            (USER_FACT_LIMIT,),
        ),
        [],
    )
    today_sessions = await _guarded(
        "sessions",
        session_totals(db, day=today_iso()),
        {"sessions": 0, "minutes": 0},
    )

    return AgentContext(
        assistant_name=settings.assistant_name,
        language=settings.assistant_language,
        tool_listing=render_tool_prompt(registry),
        habits=habits,
        pending_tasks=pending_tasks,
        active_goals=active_goals,
        overdue_followups=followups,
        user_facts=user_facts,
        today_sessions=today_sessions,
    )
