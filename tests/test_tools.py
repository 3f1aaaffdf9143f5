"""
Tests for the built-in assistant tools.

Handlers are called through dispatch() against an in-memory database,
the same way the chat turn calls them.
"""

import asyncio

import httpx
import pytest

from kensenich.agent.calls import ToolCall
from kensenich.agent.dispatcher import dispatch


def run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


def call(registry, db, name, **args):
    return run(dispatch(registry, db, ToolCall(name, args)))


class TestHabitTools:
    def test_get_daily_habits(self, registry, db):
        habits = call(registry, db, "getDailyHabits")

        assert [h["title"] for h in habits] == ["Write job applications", "Outreach messages", "Dumbbell sets"]
        assert habits[0] == {
            "id": "habit-1",
            "title": "Write job applications",
            "targetCount": 5,
            "checkedCount": 0,
            "completed": False,
        }

    def test_stale_habits_reset_on_read(self, registry, db):
        run(db.execute(
            "UPDATE daily_habits SET checked_count = 4, completed = 1, last_reset = '2000-01-01' WHERE id = 'habit-1'"
        ))

        habit = call(registry, db, "getDailyHabits")[0]

        assert habit["checkedCount"] == 0
        assert habit["completed"] is False

    def test_update_habit_progress(self, registry, db):
        result = call(registry, db, "updateHabitProgress", habitId="habit-2", count=5)

        assert result == {
            "success": True,
            "habit": "Outreach messages",
            "newCount": 5,
            "targetCount": 5,
            "completed": True,
        }

    def test_update_unknown_habit(self, registry, db):
        result = call(registry, db, "updateHabitProgress", habitId="nope", count=1)
        assert result == {"success": False, "error": "Habit not found"}


class TestTaskTools:
    def test_create_then_list(self, registry, db):
        created = call(registry, db, "createTask", title="Portfolio", priority=3)
        assert created["success"] is True

        tasks = call(registry, db, "getTasks", status="todo")

        assert [(t["id"], t["title"], t["priority"]) for t in tasks] == [(created["taskId"], "Portfolio", 3)]

    def test_tasks_ordered_by_priority(self, registry, db):
        call(registry, db, "createTask", title="low", priority=1)
        call(registry, db, "createTask", title="high", priority=4)

        assert [t["title"] for t in call(registry, db, "getTasks")] == ["high", "low"]

    def test_update_status_stamps_completion(self, registry, db):
        task_id = call(registry, db, "createTask", title="x")["taskId"]

        result = call(registry, db, "updateTaskStatus", taskId=task_id, status="completed")

        assert result["success"] is True
        row = run(db.fetch_one("SELECT status, completed_at FROM tasks WHERE id = ?", (task_id,)))
        assert row["status"] == "completed"
        assert row["completed_at"]

    def test_update_unknown_task(self, registry, db):
        result = call(registry, db, "updateTaskStatus", taskId="nope", status="completed")
        assert result["success"] is False


class TestSessionTools:
    def test_start_session(self, registry, db):
        task_id = call(registry, db, "createTask", title="Focus")["taskId"]

        result = call(registry, db, "startSession", taskId=task_id)

        assert result["success"] is True
        assert result["taskTitle"] == "Focus"
        status = run(db.fetch_value("SELECT status FROM tasks WHERE id = ?", (task_id,)))
        assert status == "in_progress"

    def test_only_one_running_session(self, registry, db):
        task_id = call(registry, db, "createTask", title="Focus")["taskId"]
        call(registry, db, "startSession", taskId=task_id)

        result = call(registry, db, "startSession", taskId=task_id)

        assert result == {"success": False, "error": "A session is already running"}

    def test_session_stats_count_completed_only(self, registry, db):
        task_id = call(registry, db, "createTask", title="Focus")["taskId"]
        session_id = call(registry, db, "startSession", taskId=task_id)["sessionId"]

        assert call(registry, db, "getSessionStats")["today"] == {"sessions": 0, "minutes": 0}

        run(db.execute(
            "UPDATE work_sessions SET status = 'completed', duration_minutes = 25 WHERE id = ?",
            (session_id,),
        ))
        stats = call(registry, db, "getSessionStats")

        assert stats["today"] == {"sessions": 1, "minutes": 25}
        assert stats["thisWeek"] == {"sessions": 1, "minutes": 25}
        assert stats["total"] == {"sessions": 1, "minutes": 25}


class TestCrmAndGoalTools:
    def test_overdue_followups(self, registry, db):
        run(db.execute(
            "INSERT INTO crm_contacts (id, name, next_followup) VALUES ('c1', 'Late', '2000-01-01T00:00:00')"
        ))
        run(db.execute(
            "INSERT INTO crm_contacts (id, name, next_followup) VALUES ('c2', 'Future', '2999-01-01T00:00:00')"
        ))
        run(db.execute("INSERT INTO crm_contacts (id, name) VALUES ('c3', 'Never')"))

        overdue = call(registry, db, "getOverdueFollowups")

        assert [c["name"] for c in overdue] == ["Late"]
        assert len(call(registry, db, "getContacts")) == 3

    def test_update_goal_progress_clamps(self, registry, db):
        run(db.execute("INSERT INTO goals (id, title) VALUES ('g1', 'Launch')"))

        assert call(registry, db, "updateGoalProgress", goalId="g1", progress=140) == {
            "success": True,
            "newProgress": 100,
            "status": "completed",
        }
        assert call(registry, db, "getGoals", status="completed")[0]["title"] == "Launch"


class TestMemoryTools:
    def test_save_user_fact_upserts(self, registry, db):
        call(registry, db, "saveUserFact", key="city", value="Berlin")
        call(registry, db, "saveUserFact", key="city", value="Hamburg", category="info")

        facts = call(registry, db, "getUserFacts")

        assert facts == [{"key": "city", "value": "Hamburg", "category": "info"}]

    def test_missing_value_is_reported(self, registry, db):
        result = call(registry, db, "saveUserFact", key="city")
        assert result == {"error": "Missing required parameter(s): value"}


class TestN8nTool:
    """The webhook call is made through httpx; the transport is mocked."""

    @pytest.fixture
    def mock_transport(self, monkeypatch):
        requests = []
        real_client = httpx.AsyncClient

        def install(handler):
            def recording(request):
                requests.append(request)
                return handler(request)

            monkeypatch.setattr(
                httpx,
                "AsyncClient",
                lambda **kwargs: real_client(transport=httpx.MockTransport(recording), **kwargs),
            )
            return requests

        return install

    def test_triggers_webhook(self, registry, db, mock_transport):
        requests = mock_transport(lambda request: httpx.Response(200, json={"queued": True}))

        result = call(registry, db, "triggerN8nWorkflow", workflowId="send-email", data={"to": "a@b.c"})

        assert result["success"] is True
        assert result["response"] == {"queued": True}
        assert requests[0].method == "POST"
        assert requests[0].url.path == "/webhook/send-email"

    def test_transport_failure_is_reported(self, registry, db, mock_transport):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        mock_transport(refuse)

        result = call(registry, db, "triggerN8nWorkflow", workflowId="send-email")

        assert result["success"] is False
        assert "send-email" in result["error"]

    def test_http_error_status_is_reported(self, registry, db, mock_transport):
        mock_transport(lambda request: httpx.Response(404, json={"message": "no such webhook"}))

        result = call(registry, db, "triggerN8nWorkflow", workflowId="missing")

        assert result["success"] is False
