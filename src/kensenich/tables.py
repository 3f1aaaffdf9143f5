"""
KensenichManager - Table configuration.

One TableSchema per REST resource. Table-specific rules live in hooks;
endpoints that do not fit list/get/create/update/delete are custom routes
on the same router.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import Body, Depends, Request

from kensenich.agent.tools import clamp_progress, reset_daily_habits
from kensenich.crud import CRUDHooks, CRUDService, CustomRoute, RequiredFieldsHooks, TableSchema
from kensenich.db.client import Database
from kensenich.db.records import generate_id, next_timestamp, now_iso, today_iso
from kensenich.errors import NotFoundError, ValidationError
from kensenich.web.deps import get_db

logger = logging.getLogger(__name__)


def _default(data: dict[str, Any], field: str, value: Any) -> None:
    """Fill a field that is missing or explicitly null."""
    if data.get(field) is None:
        data[field] = value


def _parse_datetime(value: Any, field: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"{field} must be an ISO 8601 date/time")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# =============================================================================
# Hooks
# =============================================================================


class TaskHooks(RequiredFieldsHooks):
    """Default status, and keep completed_at in step with status."""

    required = ("title",)

    async def before_create(self, data: dict[str, Any], request: Request | None) -> None:
        await super().before_create(data, request)
        _default(data, "status", "todo")
        if data["status"] == "completed":
            data["completed_at"] = data["created_at"]

    async def before_update(self, data: dict[str, Any], existing: dict[str, Any], request: Request | None) -> None:
        await super().before_update(data, existing, request)
        if "status" in data:
            _default(data, "status", "todo")
        status = data.get("status")
        if status is None or status == existing.get("status"):
            return
        data["completed_at"] = data["updated_at"] if status == "completed" else None


class GoalHooks(RequiredFieldsHooks):
    """Progress is clamped to 0..100; reaching 100 completes the goal."""

    required = ("title",)

    def _apply_progress(self, data: dict[str, Any]) -> None:
        if data.get("progress") is None:
            return
        try:
            data["progress"] = clamp_progress(data["progress"])
        except (TypeError, ValueError):
            raise ValidationError("progress must be a number")
        if data["progress"] == 100:
            data["status"] = "completed"

    async def before_create(self, data: dict[str, Any], request: Request | None) -> None:
        await super().before_create(data, request)
        _default(data, "status", "active")
        self._apply_progress(data)

    async def before_update(self, data: dict[str, Any], existing: dict[str, Any], request: Request | None) -> None:
        await super().before_update(data, existing, request)
        self._apply_progress(data)


class CalendarEventHooks(RequiredFieldsHooks):
    """An event may not end before it starts."""

    required = ("title", "start_time")

    def _check_range(self, start: Any, end: Any) -> None:
        if start is None or end is None:
            return
        if _parse_datetime(end, "end_time") < _parse_datetime(start, "start_time"):
            raise ValidationError("end_time must not be before start_time")

    async def before_create(self, data: dict[str, Any], request: Request | None) -> None:
        await super().before_create(data, request)
        _default(data, "status", "scheduled")
        self._check_range(data.get("start_time"), data.get("end_time"))

    async def before_update(self, data: dict[str, Any], existing: dict[str, Any], request: Request | None) -> None:
        await super().before_update(data, existing, request)
        self._check_range(
            data.get("start_time", existing.get("start_time")),
            data.get("end_time", existing.get("end_time")),
        )


class SessionHooks(RequiredFieldsHooks):
    required = ("task_id",)

    async def before_create(self, data: dict[str, Any], request: Request | None) -> None:
        await super().before_create(data, request)
        _default(data, "started_at", data["created_at"])
        _default(data, "status", "running")


class HabitHooks(RequiredFieldsHooks):
    required = ("title",)

    async def before_create(self, data: dict[str, Any], request: Request | None) -> None:
        await super().before_create(data, request)
        _default(data, "last_reset", today_iso())


class StageHooks(RequiredFieldsHooks):
    """New stages go to the end of the board; stages in use cannot be deleted."""

    required = ("name",)

    async def before_create(self, data: dict[str, Any], request: Request | None) -> None:
        await super().before_create(data, request)
        _default(data, "position", 999)
        _default(data, "color", "#00ff88")

    async def before_delete(self, existing: dict[str, Any], request: Request | None) -> None:
        if request is None:
            return
        db = get_db(request)
        in_use = await db.fetch_value(
            "SELECT (SELECT COUNT(*) FROM crm_deals WHERE stage_id = ?) "
            "+ (SELECT COUNT(*) FROM sales_pipeline_contacts WHERE stage_id = ?)",
            (existing["id"], existing["id"]),
        )
        if in_use:
            raise ValidationError(f"Stage is still used by {in_use} record(s)")


class PipelineReferenceHooks(RequiredFieldsHooks):
    """Rejects writes that point at a contact or stage that does not exist."""

    async def _check_references(self, data: dict[str, Any], request: Request | None) -> None:
        if request is None:
            return
        db = get_db(request)
        if data.get("contact_id") is not None:
            contact = await db.fetch_one("SELECT id FROM crm_contacts WHERE id = ?", (data["contact_id"],))
            if contact is None:
                raise ValidationError("Unknown contact_id")
        if data.get("stage_id") is not None and await find_stage(db, data["stage_id"]) is None:
            raise ValidationError("Unknown stage_id")

    async def before_update(self, data: dict[str, Any], existing: dict[str, Any], request: Request | None) -> None:
        await super().before_update(data, existing, request)
        await self._check_references(data, request)


class DealHooks(PipelineReferenceHooks):
    """Deals start open in the lead stage."""

    required = ("contact_id", "title")

    async def before_create(self, data: dict[str, Any], request: Request | None) -> None:
        await super().before_create(data, request)
        _default(data, "stage_id", "stage-lead")
        _default(data, "status", "open")
        await self._check_references(data, request)


class PipelineContactHooks(PipelineReferenceHooks):
    """Every write counts as an interaction with the contact."""

    required = ("contact_id", "stage_id")

    async def before_create(self, data: dict[str, Any], request: Request | None) -> None:
        await super().before_create(data, request)
        data["last_interaction"] = data["created_at"]
        await self._check_references(data, request)

    async def before_update(self, data: dict[str, Any], existing: dict[str, Any], request: Request | None) -> None:
        await super().before_update(data, existing, request)
        data["last_interaction"] = data["updated_at"]


# =============================================================================
# Custom routes
# =============================================================================


async def pending_tasks(db: Database = Depends(get_db)) -> list[dict[str, Any]]:
    """Tasks that are not completed, highest priority first."""
    return await db.fetch_all(
        "SELECT * FROM tasks WHERE status != 'completed' ORDER BY priority DESC, created_at ASC"
    )


async def start_session(body: dict[str, Any] = Body(...), db: Database = Depends(get_db)) -> dict[str, Any]:
    task_id = body.get("task_id")
    if not task_id:
        raise ValidationError("task_id is required")

    task = await db.fetch_one("SELECT * FROM tasks WHERE id = ?", (task_id,))
    if task is None:
        raise NotFoundError("Task not found")

    session_id = generate_id()
    timestamp = now_iso()
    await db.execute(
        """
        INSERT INTO work_sessions (id, task_id, started_at, status, created_at, updated_at)
        VALUES (?, ?, ?, 'running', ?, ?)
        """,
        (session_id, task_id, timestamp, timestamp, timestamp),
    )
    await db.execute(
        "UPDATE tasks SET status = 'in_progress', updated_at = ? WHERE id = ?",
        (next_timestamp(task["updated_at"]), task_id),
    )
    logger.info(f"Started session {session_id} for task {task_id}")

    return await db.fetch_one(
        "SELECT s.*, t.title AS task_title FROM work_sessions s "
        "JOIN tasks t ON s.task_id = t.id WHERE s.id = ?",
        (session_id,),
    )


async def session_stats(db: Database = Depends(get_db)) -> dict[str, Any]:
    stats = await db.fetch_one(
        """
        SELECT
            COUNT(*) AS total_sessions,
            COALESCE(SUM(duration_minutes), 0) AS total_minutes,
            AVG(duration_minutes) AS avg_duration,
            COALESCE(SUM(CASE WHEN status = 'completed' THEN 1 ELSE 0 END), 0) AS completed_sessions
        FROM work_sessions
        """
    )
    stats["sessions_today"] = await db.fetch_value(
        "SELECT COUNT(*) FROM work_sessions WHERE substr(started_at, 1, 10) = ?",
        (today_iso(),),
    )
    return stats


async def complete_session(
    id: str,
    body: dict[str, Any] | None = Body(None),
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    """Close a session, recording its duration and optional documentation."""
    session = await CRUDService(SESSIONS, db).get(id)

    ended = datetime.now(timezone.utc)
    started = _parse_datetime(session["started_at"], "started_at")
    duration = max(0, round((ended - started).total_seconds() / 60))
    documentation = (body or {}).get("documentation")

    await db.execute(
        """
        UPDATE work_sessions
        SET ended_at = ?, duration_minutes = ?, status = 'completed', documentation = ?, updated_at = ?
        WHERE id = ?
        """,
        (ended.isoformat(), duration, documentation, next_timestamp(session["updated_at"]), id),
    )
    logger.info(f"Completed session {id} ({duration} min)")
    return await CRUDService(SESSIONS, db).get(id)


async def goal_stats(db: Database = Depends(get_db)) -> dict[str, Any]:
    return await db.fetch_one(
        """
        SELECT
            COUNT(*) AS total_goals,
            COALESCE(SUM(CASE WHEN status = 'active' THEN 1 ELSE 0 END), 0) AS active_goals,
            COALESCE(SUM(CASE WHEN status = 'completed' THEN 1 ELSE 0 END), 0) AS completed_goals,
            AVG(progress) AS avg_progress
        FROM goals
        """
    )


async def complete_crm_task(id: str, db: Database = Depends(get_db)) -> dict[str, Any]:
    task = await CRUDService(CRM_TASKS, db).get(id)
    updated_at = next_timestamp(task["updated_at"])
    await db.execute(
        "UPDATE crm_tasks SET status = 'completed', completed_at = ?, updated_at = ? WHERE id = ?",
        (updated_at, updated_at, id),
    )
    return await CRUDService(CRM_TASKS, db).get(id)


async def job_stats(db: Database = Depends(get_db)) -> dict[str, Any]:
    return await db.fetch_one(
        """
        SELECT
            COUNT(*) AS total,
            COALESCE(SUM(CASE WHEN status = 'applied' THEN 1 ELSE 0 END), 0) AS applied,
            COALESCE(SUM(CASE WHEN status = 'interview' THEN 1 ELSE 0 END), 0) AS interview,
            COALESCE(SUM(CASE WHEN status = 'offer' THEN 1 ELSE 0 END), 0) AS offer,
            COALESCE(SUM(CASE WHEN status = 'rejected' THEN 1 ELSE 0 END), 0) AS rejected
        FROM job_applications
        """
    )


async def use_archive_element(id: str, db: Database = Depends(get_db)) -> dict[str, Any]:
    """Count one more reuse of an archived content element."""
    element = await CRUDService(CONTENT_ARCHIVE, db).get(id)
    updated_at = next_timestamp(element["updated_at"])
    await db.execute(
        "UPDATE content_archive SET usage_count = usage_count + 1, last_used = ?, updated_at = ? WHERE id = ?",
        (updated_at, updated_at, id),
    )
    return await CRUDService(CONTENT_ARCHIVE, db).get(id)


async def check_habit(id: str, db: Database = Depends(get_db)) -> dict[str, Any]:
    """Tick a habit once for today."""
    await reset_daily_habits(db)
    habit = await CRUDService(HABITS, db).get(id)

    checked = (habit["checked_count"] or 0) + 1
    completed = checked >= (habit["target_count"] or 0)
    await db.execute(
        "UPDATE daily_habits SET checked_count = ?, completed = ?, updated_at = ? WHERE id = ?",
        (checked, int(completed), next_timestamp(habit["updated_at"]), id),
    )
    return await CRUDService(HABITS, db).get(id)


async def find_stage(db: Database, stage_id: Any) -> dict[str, Any] | None:
    return await db.fetch_one("SELECT * FROM sales_pipeline_stages WHERE id = ?", (stage_id,))


async def _target_stage(db: Database, body: dict[str, Any] | None) -> str:
    stage_id = (body or {}).get("stage_id")
    if not stage_id:
        raise ValidationError("stage_id is required")
    if await find_stage(db, stage_id) is None:
        raise NotFoundError("Stage not found")
    return stage_id


async def deals_by_stage(db: Database = Depends(get_db)) -> list[dict[str, Any]]:
    """Open deals grouped by the board stages (won and lost excluded)."""
    stages = await db.fetch_all(
        "SELECT * FROM sales_pipeline_stages WHERE id NOT IN ('stage-won', 'stage-lost') ORDER BY position, id"
    )
    for stage in stages:
        deals = await db.fetch_all(
            """
            SELECT d.*, c.name AS contact_name, c.company AS contact_company
            FROM crm_deals d
            JOIN crm_contacts c ON d.contact_id = c.id
            WHERE d.stage_id = ? AND d.status = 'open'
            ORDER BY d.deal_value DESC, d.id
            """,
            (stage["id"],),
        )
        stage["deals"] = deals
        stage["count"] = len(deals)
        stage["total_value"] = sum(d["deal_value"] or 0 for d in deals)
    return stages


async def move_deal(
    id: str,
    body: dict[str, Any] | None = Body(None),
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    deal = await CRUDService(DEALS, db).get(id)
    stage_id = await _target_stage(db, body)

    await db.execute(
        "UPDATE crm_deals SET stage_id = ?, updated_at = ? WHERE id = ?",
        (stage_id, next_timestamp(deal["updated_at"]), id),
    )
    logger.info(f"Moved deal {id} from {deal['stage_id']} to {stage_id}")
    return await CRUDService(DEALS, db).get(id)


async def win_deal(id: str, db: Database = Depends(get_db)) -> dict[str, Any]:
    deal = await CRUDService(DEALS, db).get(id)
    updated_at = next_timestamp(deal["updated_at"])
    await db.execute(
        """
        UPDATE crm_deals
        SET status = 'won', stage_id = 'stage-won', actual_close_date = ?, updated_at = ?
        WHERE id = ?
        """,
        (updated_at, updated_at, id),
    )
    logger.info(f"Deal {id} won")
    return await CRUDService(DEALS, db).get(id)


async def lose_deal(
    id: str,
    body: dict[str, Any] | None = Body(None),
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    """Close a deal as lost, with an optional reason."""
    deal = await CRUDService(DEALS, db).get(id)
    body = body or {}
    updated_at = next_timestamp(deal["updated_at"])
    await db.execute(
        """
        UPDATE crm_deals
        SET status = 'lost', stage_id = 'stage-lost', lost_reason = ?, lost_reason_details = ?,
            actual_close_date = ?, updated_at = ?
        WHERE id = ?
        """,
        (body.get("lost_reason"), body.get("lost_reason_details"), updated_at, updated_at, id),
    )
    logger.info(f"Deal {id} lost")
    return await CRUDService(DEALS, db).get(id)


async def deal_stats(db: Database = Depends(get_db)) -> dict[str, Any]:
    overview = await db.fetch_one(
        """
        SELECT
            COUNT(*) AS total_deals,
            COALESCE(SUM(CASE WHEN status = 'open' THEN 1 ELSE 0 END), 0) AS open_deals,
            COALESCE(SUM(CASE WHEN status = 'won' THEN 1 ELSE 0 END), 0) AS won_deals,
            COALESCE(SUM(CASE WHEN status = 'lost' THEN 1 ELSE 0 END), 0) AS lost_deals,
            COALESCE(SUM(CASE WHEN status = 'open' THEN deal_value ELSE 0 END), 0) AS pipeline_value,
            COALESCE(SUM(CASE WHEN status = 'won' THEN deal_value ELSE 0 END), 0) AS won_value,
            AVG(CASE WHEN status = 'won' THEN deal_value END) AS avg_deal_value
        FROM crm_deals
        """
    )
    closed = overview["won_deals"] + overview["lost_deals"]
    overview["win_rate"] = overview["won_deals"] * 100 / closed if closed else 0
    overview["by_stage"] = await db.fetch_all(
        """
        SELECT s.id, s.name, s.color, s.position,
            COUNT(d.id) AS deal_count,
            COALESCE(SUM(d.deal_value), 0) AS total_value,
            COALESCE(AVG(d.probability), 0) AS avg_probability
        FROM sales_pipeline_stages s
        LEFT JOIN crm_deals d ON s.id = d.stage_id AND d.status = 'open'
        GROUP BY s.id
        ORDER BY s.position, s.id
        """
    )
    return overview


async def move_pipeline_contact(
    id: str,
    body: dict[str, Any] | None = Body(None),
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    """Move a contact along the pipeline; reaching won or lost stamps the date."""
    entry = await CRUDService(PIPELINE_CONTACTS, db).get(id)
    stage_id = await _target_stage(db, body)

    updated_at = next_timestamp(entry["updated_at"])
    won_date = updated_at if stage_id == "stage-won" else entry["won_date"]
    lost_date = updated_at if stage_id == "stage-lost" else entry["lost_date"]
    await db.execute(
        """
        UPDATE sales_pipeline_contacts
        SET stage_id = ?, won_date = ?, lost_date = ?, last_interaction = ?, updated_at = ?
        WHERE id = ?
        """,
        (stage_id, won_date, lost_date, updated_at, updated_at, id),
    )
    logger.info(f"Moved pipeline contact {id} from {entry['stage_id']} to {stage_id}")

    return await db.fetch_one(
        """
        SELECT pc.*, c.name, c.email, c.company, s.name AS stage_name, s.color AS stage_color
        FROM sales_pipeline_contacts pc
        JOIN crm_contacts c ON pc.contact_id = c.id
        JOIN sales_pipeline_stages s ON pc.stage_id = s.id
        WHERE pc.id = ?
        """,
        (id,),
    )


async def pipeline_stats(db: Database = Depends(get_db)) -> dict[str, Any]:
    totals = await db.fetch_one(
        """
        SELECT
            COUNT(*) AS total_contacts,
            COALESCE(SUM(potential_value), 0) AS total_value,
            COALESCE(SUM(potential_value * probability / 100.0), 0) AS weighted_value,
            COALESCE(SUM(CASE WHEN stage_id = 'stage-won' THEN 1 ELSE 0 END), 0) AS won
        FROM sales_pipeline_contacts
        """
    )
    won = totals.pop("won")
    totals["conversion_rate"] = won * 100 / totals["total_contacts"] if totals["total_contacts"] else 0
    totals["by_stage"] = await db.fetch_all(
        """
        SELECT s.id, s.name, s.color, s.position,
            COUNT(pc.id) AS count,
            COALESCE(SUM(pc.potential_value), 0) AS total_value
        FROM sales_pipeline_stages s
        LEFT JOIN sales_pipeline_contacts pc ON s.id = pc.stage_id
        GROUP BY s.id
        ORDER BY s.position, s.id
        """
    )
    return totals


# =============================================================================
# Tables
# =============================================================================


TASK_FIELDS = [
    "title", "description", "status", "priority", "difficulty", "estimated_sessions",
    "category", "tags", "due_date", "goal_id", "parent_task_id", "order_index",
]

TASKS = TableSchema(
    table="tasks",
    path="/tasks",
    create_fields=TASK_FIELDS,
    update_fields=TASK_FIELDS,
    search_fields=["title", "description"],
    hooks=TaskHooks(),
    custom_routes=[CustomRoute("GET", "/pending", pending_tasks)],
    label="Task",
)

SESSIONS = TableSchema(
    table="work_sessions",
    path="/sessions",
    create_fields=["task_id", "started_at", "duration_minutes", "status", "documentation"],
    update_fields=["ended_at", "duration_minutes", "status", "documentation", "ai_summary"],
    order_by="started_at DESC, id",
    allow_delete=False,
    hooks=SessionHooks(),
    custom_routes=[
        CustomRoute("POST", "/start", start_session, status_code=201),
        CustomRoute("GET", "/stats", session_stats),
        CustomRoute("POST", "/{id}/complete", complete_session),
    ],
    label="Session",
)

GOAL_FIELDS = ["title", "description", "category", "target_date", "status", "progress", "metrics"]

GOALS = TableSchema(
    table="goals",
    path="/goals",
    create_fields=GOAL_FIELDS,
    update_fields=GOAL_FIELDS,
    search_fields=["title", "description"],
    hooks=GoalHooks(),
    custom_routes=[CustomRoute("GET", "/stats/overview", goal_stats)],
    label="Goal",
)

CONTACT_FIELDS = [
    "name", "type", "email", "phone", "company", "notes", "last_contact", "next_followup", "tags",
]

CRM_CONTACTS = TableSchema(
    table="crm_contacts",
    path="/crm/contacts",
    create_fields=CONTACT_FIELDS,
    update_fields=CONTACT_FIELDS,
    order_by="name ASC, id",
    search_fields=["name", "email", "company"],
    hooks=RequiredFieldsHooks(["name"]),
    label="Contact",
)

CRM_TASK_FIELDS = [
    "title", "description", "task_type", "priority", "status", "due_date", "contact_id", "reminder_at",
]

CRM_TASKS = TableSchema(
    table="crm_tasks",
    path="/crm/tasks",
    create_fields=CRM_TASK_FIELDS,
    update_fields=CRM_TASK_FIELDS,
    order_by="due_date IS NULL, due_date ASC, created_at DESC, id",
    search_fields=["title", "description"],
    hooks=RequiredFieldsHooks(["title"]),
    custom_routes=[CustomRoute("POST", "/{id}/complete", complete_crm_task)],
    label="CRM task",
)

PIPELINE_STAGES = TableSchema(
    table="sales_pipeline_stages",
    path="/sales-pipeline/stages",
    create_fields=["name", "position", "color"],
    update_fields=["name", "position", "color"],
    order_by="position ASC, id",
    hooks=StageHooks(),
    label="Stage",
)

PIPELINE_CONTACT_FIELDS = [
    "contact_id", "stage_id", "potential_value", "probability", "notes", "next_action", "next_action_date",
]

PIPELINE_CONTACTS = TableSchema(
    table="sales_pipeline_contacts",
    path="/sales-pipeline/contacts",
    create_fields=PIPELINE_CONTACT_FIELDS,
    update_fields=PIPELINE_CONTACT_FIELDS[1:] + ["won_date", "lost_date", "lost_reason"],
    search_fields=["notes", "next_action"],
    hooks=PipelineContactHooks(),
    custom_routes=[
        CustomRoute("GET", "/stats/overview", pipeline_stats),
        CustomRoute("POST", "/{id}/move", move_pipeline_contact),
    ],
    label="Pipeline contact",
)

DEAL_FIELDS = [
    "contact_id", "title", "description", "stage_id", "deal_value", "currency", "probability",
    "expected_close_date", "deal_source", "deal_type", "priority", "tags",
]

DEALS = TableSchema(
    table="crm_deals",
    path="/deals",
    create_fields=DEAL_FIELDS,
    update_fields=DEAL_FIELDS,
    search_fields=["title", "description"],
    filter_fields=DEAL_FIELDS + ["id", "status"],
    hooks=DealHooks(),
    custom_routes=[
        CustomRoute("GET", "/by-stage", deals_by_stage),
        CustomRoute("GET", "/stats/overview", deal_stats),
        CustomRoute("POST", "/{id}/move", move_deal),
        CustomRoute("POST", "/{id}/win", win_deal),
        CustomRoute("POST", "/{id}/lose", lose_deal),
    ],
    label="Deal",
)

JOB_FIELDS = [
    "company", "position", "status", "applied_date", "interview_date", "notes",
    "salary_range", "job_url", "contact_person",
]

JOB_APPLICATIONS = TableSchema(
    table="job_applications",
    path="/jobs",
    create_fields=JOB_FIELDS,
    update_fields=JOB_FIELDS,
    search_fields=["company", "position"],
    hooks=RequiredFieldsHooks(["company", "position"]),
    custom_routes=[CustomRoute("GET", "/stats/overview", job_stats)],
    label="Application",
)

IDEA_FIELDS = [
    "title", "description", "platform", "category", "status", "priority",
    "thumbnail_url", "notes", "target_date", "published_date",
]

CONTENT_IDEAS = TableSchema(
    table="content_ideas",
    path="/content/ideas",
    create_fields=IDEA_FIELDS,
    update_fields=IDEA_FIELDS,
    search_fields=["title", "description"],
    hooks=RequiredFieldsHooks(["title"]),
    label="Content idea",
)

ARCHIVE_FIELDS = [
    "title", "element_type", "content", "file_url", "tags", "platform", "category", "notes",
]

CONTENT_ARCHIVE = TableSchema(
    table="content_archive",
    path="/content/archive",
    create_fields=ARCHIVE_FIELDS,
    update_fields=ARCHIVE_FIELDS,
    search_fields=["title", "content", "tags"],
    hooks=RequiredFieldsHooks(["title", "element_type"]),
    custom_routes=[CustomRoute("POST", "/{id}/use", use_archive_element)],
    label="Archive element",
)

EVENT_FIELDS = [
    "title", "description", "event_type", "start_time", "end_time", "location",
    "attendees", "reminder_minutes", "status", "related_contact_id",
]

CALENDAR_EVENTS = TableSchema(
    table="calendar_events",
    path="/calendar/events",
    create_fields=EVENT_FIELDS,
    update_fields=EVENT_FIELDS,
    order_by="start_time ASC, id",
    search_fields=["title", "description", "location"],
    hooks=CalendarEventHooks(),
    label="Event",
)

PROJECT_FIELDS = ["name", "description", "status", "color", "website_url"]

PROJECTS = TableSchema(
    table="projects",
    path="/projects",
    create_fields=PROJECT_FIELDS,
    update_fields=PROJECT_FIELDS,
    search_fields=["name", "description"],
    hooks=RequiredFieldsHooks(["name"]),
    label="Project",
)

ASSET_FIELDS = [
    "project_id", "asset_type", "title", "description", "file_url", "file_type",
    "asset_version", "tags", "is_primary",
]

BRANDING_ASSETS = TableSchema(
    table="branding_assets",
    path="/branding-assets",
    create_fields=ASSET_FIELDS,
    update_fields=ASSET_FIELDS,
    search_fields=["title", "description", "tags"],
    hooks=RequiredFieldsHooks(["project_id", "asset_type", "title"]),
    label="Branding asset",
)

SOP_FIELDS = ["title", "process_type", "steps", "created_from_sessions", "ai_generated"]

SOPS = TableSchema(
    table="sops",
    path="/sops",
    create_fields=SOP_FIELDS,
    update_fields=SOP_FIELDS,
    search_fields=["title", "process_type"],
    hooks=RequiredFieldsHooks(["title"]),
    versioned=True,
    label="SOP",
)

HABITS = TableSchema(
    table="daily_habits",
    path="/habits",
    create_fields=["title", "target_count"],
    update_fields=["title", "target_count", "checked_count", "completed"],
    order_by="created_at ASC, id",
    hooks=HabitHooks(),
    custom_routes=[CustomRoute("POST", "/{id}/check", check_habit)],
    label="Habit",
)

USER_FACTS = TableSchema(
    table="ai_user_facts",
    path="/ai/facts",
    create_fields=["category", "key", "value", "source"],
    update_fields=["category", "value"],
    order_by="updated_at DESC, id",
    search_fields=["key", "value"],
    hooks=RequiredFieldsHooks(["key", "value"]),
    label="Fact",
)

TABLES: list[TableSchema] = [
    TASKS,
    SESSIONS,
    GOALS,
    CRM_CONTACTS,
    CRM_TASKS,
    PIPELINE_STAGES,
    PIPELINE_CONTACTS,
    DEALS,
    JOB_APPLICATIONS,
    CONTENT_IDEAS,
    CONTENT_ARCHIVE,
    CALENDAR_EVENTS,
    PROJECTS,
    BRANDING_ASSETS,
    SOPS,
    HABITS,
    USER_FACTS,
]
