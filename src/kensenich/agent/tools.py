"""
Built-in assistant tools.

Each handler receives the database and the parsed argument object and
returns a JSON-serializable result. Expected failures (unknown id, a
session already running) are reported as {"success": False, "error": ...}
so the model can explain them; unexpected exceptions propagate to
dispatch(), which turns them into {"error": ...}.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

from kensenich.agent.registry import ToolDefinition, ToolParameter, ToolRegistry
from kensenich.config import settings
from kensenich.db.client import Database
from kensenich.db.records import generate_id, next_timestamp, now_iso, today_iso

logger = logging.getLogger(__name__)

N8N_TIMEOUT_SECONDS = 30.0
DEFAULT_SESSION_MINUTES = 30


# =============================================================================
# Habits
# =============================================================================


async def reset_daily_habits(db: Database) -> int:
    """Zero the counters of habits last reset before today."""
    today = today_iso()
    reset = await db.execute(
        """
        UPDATE daily_habits
        SET checked_count = 0, completed = 0, last_reset = ?
        WHERE last_reset < ? OR last_reset IS NULL
        """,
        (today, today),
    )
    if reset:
        logger.info(f"Reset {reset} daily habit(s) for {today}")
    return reset


async def get_daily_habits(db: Database, params: dict[str, Any]) -> list[dict[str, Any]]:
    await reset_daily_habits(db)
    habits = await db.fetch_all("SELECT * FROM daily_habits ORDER BY created_at, id")
    return [
        {
            "id": h["id"],
            "title": h["title"],
            "targetCount": h["target_count"],
            "checkedCount": h["checked_count"],
            "completed": bool(h["completed"]),
        }
        for h in habits
    ]


async def update_habit_progress(db: Database, params: dict[str, Any]) -> dict[str, Any]:
    habit = await db.fetch_one("SELECT * FROM daily_habits WHERE id = ?", (params["habitId"],))
    if habit is None:
        return {"success": False, "error": "Habit not found"}

    count = max(0, int(params["count"]))
    completed = count >= habit["target_count"]
    await db.execute(
        "UPDATE daily_habits SET checked_count = ?, completed = ?, updated_at = ? WHERE id = ?",
        (count, int(completed), next_timestamp(habit["updated_at"]), habit["id"]),
    )

    return {
        "success": True,
        "habit": habit["title"],
        "newCount": count,
        "targetCount": habit["target_count"],
        "completed": completed,
    }


# =============================================================================
# Tasks
# =============================================================================


async def get_tasks(db: Database, params: dict[str, Any]) -> list[dict[str, Any]]:
    sql = "SELECT * FROM tasks"
    args: list[Any] = []
    if params.get("status"):
        sql += " WHERE status = ?"
        args.append(params["status"])
    sql += " ORDER BY priority DESC, created_at DESC LIMIT 20"

    tasks = await db.fetch_all(sql, args)
    return [
        {
            "id": t["id"],
            "title": t["title"],
            "status": t["status"],
            "priority": t["priority"],
            "category": t["category"],
            "dueDate": t["due_date"],
        }
        for t in tasks
    ]


async def create_task(db: Database, params: dict[str, Any]) -> dict[str, Any]:
    task_id = generate_id()
    timestamp = now_iso()
    await db.execute(
        """
        INSERT INTO tasks (id, title, description, priority, category, status, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, 'todo', ?, ?)
        """,
        (
            task_id,
            params["title"],
            params.get("description", ""),
            params.get("priority", 0),
            params.get("category", "general"),
            timestamp,
            timestamp,
        ),
    )
    logger.info(f"Created tasks record {task_id}")

    return {"success": True, "taskId": task_id, "message": f'Task "{params["title"]}" created'}


async def update_task_status(db: Database, params: dict[str, Any]) -> dict[str, Any]:
    task = await db.fetch_one("SELECT * FROM tasks WHERE id = ?", (params["taskId"],))
    if task is None:
        return {"success": False, "error": "Task not found"}

    status = params["status"]
    updated_at = next_timestamp(task["updated_at"])
    completed_at = task["completed_at"]
    if status == "completed" and task["status"] != "completed":
        completed_at = updated_at
    elif status != "completed":
        completed_at = None

    await db.execute(
        "UPDATE tasks SET status = ?, completed_at = ?, updated_at = ? WHERE id = ?",
        (status, completed_at, updated_at, task["id"]),
    )
    return {"success": True, "message": f'Task status changed to "{status}"'}


# =============================================================================
# Sessions
# =============================================================================


async def session_totals(db: Database, since: str | None = None, day: str | None = None) -> dict[str, int]:
    """Completed session count and minutes, optionally limited by start date."""
    sql = (
        "SELECT COUNT(*) AS count, COALESCE(SUM(duration_minutes), 0) AS minutes "
        "FROM work_sessions WHERE status = 'completed'"
    )
    args: list[Any] = []
    if day is not None:
        sql += " AND substr(started_at, 1, 10) = ?"
        args.append(day)
    if since is not None:
        sql += " AND substr(started_at, 1, 10) >= ?"
        args.append(since)

    row = await db.fetch_one(sql, args) or {}
    return {"sessions": row.get("count", 0), "minutes": row.get("minutes", 0)}


async def get_session_stats(db: Database, params: dict[str, Any]) -> dict[str, Any]:
    today = datetime.now(timezone.utc).date()
    week_start = today - timedelta(days=today.weekday())

    return {
        "today": await session_totals(db, day=today.isoformat()),
        "thisWeek": await session_totals(db, since=week_start.isoformat()),
        "total": await session_totals(db),
    }


async def start_session(db: Database, params: dict[str, Any]) -> dict[str, Any]:
    running = await db.fetch_one("SELECT id FROM work_sessions WHERE status = 'running'")
    if running is not None:
        return {"success": False, "error": "A session is already running"}

    task = await db.fetch_one("SELECT * FROM tasks WHERE id = ?", (params["taskId"],))
    if task is None:
        return {"success": False, "error": "Task not found"}

    session_id = generate_id()
    timestamp = now_iso()
    await db.execute(
        """
        INSERT INTO work_sessions (id, task_id, started_at, status, duration_minutes, created_at, updated_at)
        VALUES (?, ?, ?, 'running', ?, ?, ?)
        """,
        (session_id, task["id"], timestamp, DEFAULT_SESSION_MINUTES, timestamp, timestamp),
    )
    await db.execute(
        "UPDATE tasks SET status = 'in_progress', updated_at = ? WHERE id = ?",
        (next_timestamp(task["updated_at"]), task["id"]),
    )
    logger.info(f"Started session {session_id} for task {task['id']}")

    return {
        "success": True,
        "sessionId": session_id,
        "taskTitle": task["title"],
        "message": f'Session for "{task["title"]}" started ({DEFAULT_SESSION_MINUTES} min)',
    }


# =============================================================================
# CRM
# =============================================================================


async def get_contacts(db: Database, params: dict[str, Any]) -> list[dict[str, Any]]:
    sql = "SELECT * FROM crm_contacts"
    args: list[Any] = []
    if params.get("type"):
        sql += " WHERE type = ?"
        args.append(params["type"])
    sql += " ORDER BY last_contact DESC LIMIT 20"

    contacts = await db.fetch_all(sql, args)
    return [
        {
            "id": c["id"],
            "name": c["name"],
            "type": c["type"],
            "email": c["email"],
            "company": c["company"],
            "lastContact": c["last_contact"],
            "nextFollowup": c["next_followup"],
        }
        for c in contacts
    ]


async def overdue_followups(db: Database, limit: int | None = None) -> list[dict[str, Any]]:
    sql = """
        SELECT * FROM crm_contacts
        WHERE next_followup IS NOT NULL AND next_followup < ?
        ORDER BY next_followup ASC
    """
    args: list[Any] = [now_iso()]
    if limit is not None:
        sql += " LIMIT ?"
        args.append(limit)
    return await db.fetch_all(sql, args)


async def get_overdue_followups(db: Database, params: dict[str, Any]) -> list[dict[str, Any]]:
    return [
        {
            "id": c["id"],
            "name": c["name"],
            "company": c["company"],
            "email": c["email"],
            "overdueBy": c["next_followup"],
        }
        for c in await overdue_followups(db)
    ]


# =============================================================================
# Goals
# =============================================================================


def clamp_progress(value: Any) -> int:
    return max(0, min(100, int(float(value))))


async def get_goals(db: Database, params: dict[str, Any]) -> list[dict[str, Any]]:
    sql = "SELECT * FROM goals"
    args: list[Any] = []
    if params.get("status"):
        sql += " WHERE status = ?"
        args.append(params["status"])
    sql += " ORDER BY created_at DESC"

    goals = await db.fetch_all(sql, args)
    return [
        {
            "id": g["id"],
            "title": g["title"],
            "category": g["category"],
            "status": g["status"],
            "progress": g["progress"],
            "targetDate": g["target_date"],
        }
        for g in goals
    ]


async def update_goal_progress(db: Database, params: dict[str, Any]) -> dict[str, Any]:
    goal = await db.fetch_one("SELECT * FROM goals WHERE id = ?", (params["goalId"],))
    if goal is None:
        return {"success": False, "error": "Goal not found"}

    progress = clamp_progress(params["progress"])
    status = "completed" if progress == 100 else "active"
    await db.execute(
        "UPDATE goals SET progress = ?, status = ?, updated_at = ? WHERE id = ?",
        (progress, status, next_timestamp(goal["updated_at"]), goal["id"]),
    )

    return {"success": True, "newProgress": progress, "status": status}


# =============================================================================
# Memory
# =============================================================================


async def save_user_fact(db: Database, params: dict[str, Any]) -> dict[str, Any]:
    timestamp = now_iso()
    await db.execute(
        """
        INSERT INTO ai_user_facts (id, key, value, category, source, created_at, updated_at)
        VALUES (?, ?, ?, ?, 'explicit', ?, ?)
        ON CONFLICT(key) DO UPDATE SET
            value = excluded.value,
            category = excluded.category,
            updated_at = excluded.updated_at
        """,
        (
            generate_id(),
            params["key"],
            str(params["value"]),
            params.get("category", "info"),
            timestamp,
            timestamp,
        ),
    )
    logger.info(f"Saved user fact '{params['key']}'")
    return {"success": True, "message": f'"{params["key"]}" saved'}


async def get_user_facts(db: Database, params: dict[str, Any]) -> list[dict[str, Any]]:
    sql = "SELECT * FROM ai_user_facts"
    args: list[Any] = []
    if params.get("category"):
        sql += " WHERE category = ?"
        args.append(params["category"])
    sql += " ORDER BY updated_at DESC"

    facts = await db.fetch_all(sql, args)
    return [{"key": f["key"], "value": f["value"], "category": f["category"]} for f in facts]


# =============================================================================
# n8n
# =============================================================================


async def trigger_n8n_workflow(db: Database, params: dict[str, Any]) -> dict[str, Any]:
    workflow_id = params["workflowId"]
    url = f"{settings.n8n_webhook_url.rstrip('/')}/webhook/{workflow_id}"

    try:
        async with httpx.AsyncClient(timeout=N8N_TIMEOUT_SECONDS) as client:
            response = await client.post(url, json=params.get("data") or {})
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(f"n8n workflow {workflow_id} failed: {e}")
        return {"success": False, "error": f'Workflow "{workflow_id}" failed: {e}'}

    try:
        body: Any = response.json()
    except ValueError:
        body = response.text

    return {
        "success": True,
        "message": f'Workflow "{workflow_id}" triggered',
        "response": body,
    }


# =============================================================================
# Registry
# =============================================================================


def _param(type_: str, description: str, required: bool = False) -> ToolParameter:
    return ToolParameter(type=type_, description=description, required=required)


BUILTIN_TOOLS = [
    ToolDefinition(
        "getDailyHabits",
        "Fetch the daily habits and their progress for today",
        get_daily_habits,
    ),
    ToolDefinition(
        "updateHabitProgress",
        "Set the completed count of a daily habit",
        update_habit_progress,
        {
            "habitId": _param("string", "Habit ID", required=True),
            "count": _param("number", "New number of completed units", required=True),
        },
    ),
    ToolDefinition(
        "getTasks",
        "Fetch tasks, optionally filtered by status (todo, in_progress, completed)",
        get_tasks,
        {"status": _param("string", "Status filter")},
    ),
    ToolDefinition(
        "createTask",
        "Create a new task",
        create_task,
        {
            "title": _param("string", "Task title", required=True),
            "priority": _param("number", "Priority (0-5)"),
            "category": _param("string", "Category"),
            "description": _param("string", "Description"),
        },
    ),
    ToolDefinition(
        "updateTaskStatus",
        "Change the status of a task",
        update_task_status,
        {
            "taskId": _param("string", "Task ID", required=True),
            "status": _param("string", "New status (todo, in_progress, completed)", required=True),
        },
    ),
    ToolDefinition(
        "getSessionStats",
        "Work session statistics (today, this week, total)",
        get_session_stats,
    ),
    ToolDefinition(
        "startSession",
        "Start a new 30 minute work session for a task",
        start_session,
        {"taskId": _param("string", "Task ID", required=True)},
    ),
    ToolDefinition(
        "getContacts",
        "Fetch CRM contacts, optionally filtered by type (client, partner, lead)",
        get_contacts,
        {"type": _param("string", "Contact type filter")},
    ),
    ToolDefinition(
        "getOverdueFollowups",
        "Fetch contacts whose follow-up date has passed",
        get_overdue_followups,
    ),
    ToolDefinition(
        "getGoals",
        "Fetch goals, optionally filtered by status (active, completed, paused)",
        get_goals,
        {"status": _param("string", "Status filter")},
    ),
    ToolDefinition(
        "updateGoalProgress",
        "Set the progress of a goal (0-100%)",
        update_goal_progress,
        {
            "goalId": _param("string", "Goal ID", required=True),
            "progress": _param("number", "New progress (0-100)", required=True),
        },
    ),
    ToolDefinition(
        "saveUserFact",
        "Remember a fact about the user (preference, info, routine)",
        save_user_fact,
        {
            "key": _param("string", "Name of the fact", required=True),
            "value": _param("string", "Value of the fact", required=True),
            "category": _param("string", "Category (preference, info, routine, goal)"),
        },
    ),
    ToolDefinition(
        "getUserFacts",
        "Fetch the stored facts about the user",
        get_user_facts,
        {"category": _param("string", "Category filter")},
    ),
    ToolDefinition(
        "triggerN8nWorkflow",
        "Trigger an n8n workflow for complex actions (email, calendar, social media)",
        trigger_n8n_workflow,
        {
            "workflowId": _param("string", "Workflow ID or webhook name", required=True),
            "data": _param("object", "Payload for the workflow"),
        },
    ),
]


def build_default_registry() -> ToolRegistry:
    """Registry with every built-in tool, frozen."""
    registry = ToolRegistry()
    for definition in BUILTIN_TOOLS:
        registry.register(definition)
    logger.debug(f"Registered {len(registry)} built-in tools")
    return registry.freeze()
