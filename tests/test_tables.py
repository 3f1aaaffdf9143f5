"""
Tests for the configured REST resources.

Covers the end-to-end task lifecycle and the table-specific hooks and
custom routes mounted under /api.
"""

import pytest


class TestTaskLifecycle:
    """Create, complete, delete and re-read a task."""

    def test_end_to_end(self, client):
        created = client.post("/api/tasks", json={"title": "Write proposal", "priority": 2})

        assert created.status_code == 201
        task = created.json()
        assert task["id"]
        assert task["status"] == "todo"
        assert task["priority"] == 2
        assert task["created_at"] == task["updated_at"]

        updated = client.put(f"/api/tasks/{task['id']}", json={"status": "completed"})

        assert updated.status_code == 200
        done = updated.json()
        assert done["status"] == "completed"
        assert done["title"] == "Write proposal"
        assert done["updated_at"] > task["updated_at"]
        assert done["completed_at"] == done["updated_at"]

        deleted = client.delete(f"/api/tasks/{task['id']}")

        assert deleted.status_code == 200
        assert deleted.json() == {"message": "Deleted successfully", "id": task["id"]}

        missing = client.get(f"/api/tasks/{task['id']}")

        assert missing.status_code == 404
        assert missing.json() == {"error": "Task not found"}

    def test_title_required(self, client):
        response = client.post("/api/tasks", json={"priority": 2})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required field(s): title"}

    def test_title_cannot_be_blanked(self, client):
        task = client.post("/api/tasks", json={"title": "x"}).json()

        response = client.put(f"/api/tasks/{task['id']}", json={"title": "  "})

        assert response.status_code == 400

    def test_reopening_clears_completed_at(self, client):
        task = client.post("/api/tasks", json={"title": "x", "status": "completed"}).json()
        assert task["completed_at"]

        reopened = client.put(f"/api/tasks/{task['id']}", json={"status": "todo"}).json()

        assert reopened["completed_at"] is None

    def test_null_status_gets_default(self, client):
        """An explicit null status is treated like a missing one."""
        task = client.post("/api/tasks", json={"title": "x", "status": None}).json()

        assert task["status"] == "todo"
        assert [t["title"] for t in client.get("/api/tasks/pending").json()] == ["x"]

    def test_null_status_on_update_reopens(self, client):
        task = client.post("/api/tasks", json={"title": "x", "status": "completed"}).json()

        updated = client.put(f"/api/tasks/{task['id']}", json={"status": None}).json()

        assert updated["status"] == "todo"
        assert updated["completed_at"] is None

    def test_pending_excludes_completed(self, client):
        client.post("/api/tasks", json={"title": "low", "priority": 1})
        client.post("/api/tasks", json={"title": "high", "priority": 5})
        client.post("/api/tasks", json={"title": "done", "status": "completed"})

        titles = [t["title"] for t in client.get("/api/tasks/pending").json()]

        assert titles == ["high", "low"]

    def test_filter_by_status(self, client):
        client.post("/api/tasks", json={"title": "a", "status": "in_progress"})
        client.post("/api/tasks", json={"title": "b"})

        records = client.get("/api/tasks", params={"status": "in_progress"}).json()

        assert [r["title"] for r in records] == ["a"]

    def test_tags_list_is_stored_as_json(self, client):
        task = client.post("/api/tasks", json={"title": "x", "tags": ["a", "b"]}).json()
        assert task["tags"] == '["a", "b"]'


class TestSessions:
    def test_start_and_complete(self, client):
        task = client.post("/api/tasks", json={"title": "Deep work"}).json()

        started = client.post("/api/sessions/start", json={"task_id": task["id"]})

        assert started.status_code == 201
        session = started.json()
        assert session["status"] == "running"
        assert session["task_title"] == "Deep work"
        assert client.get(f"/api/tasks/{task['id']}").json()["status"] == "in_progress"

        completed = client.post(f"/api/sessions/{session['id']}/complete", json={"documentation": "notes"})

        assert completed.status_code == 200
        assert completed.json()["status"] == "completed"
        assert completed.json()["documentation"] == "notes"
        assert completed.json()["ended_at"]

    def test_create_with_null_defaults(self, client):
        task = client.post("/api/tasks", json={"title": "x"}).json()

        created = client.post("/api/sessions", json={"task_id": task["id"], "status": None, "started_at": None})

        assert created.status_code == 201
        assert created.json()["status"] == "running"
        assert created.json()["started_at"] == created.json()["created_at"]

    def test_start_requires_existing_task(self, client):
        assert client.post("/api/sessions/start", json={}).status_code == 400
        assert client.post("/api/sessions/start", json={"task_id": "nope"}).status_code == 404

    def test_complete_missing_session(self, client):
        response = client.post("/api/sessions/missing/complete")

        assert response.status_code == 404
        assert response.json() == {"error": "Session not found"}

    def test_sessions_cannot_be_deleted(self, client):
        task = client.post("/api/tasks", json={"title": "x"}).json()
        session = client.post("/api/sessions/start", json={"task_id": task["id"]}).json()

        assert client.delete(f"/api/sessions/{session['id']}").status_code == 405

    def test_stats(self, client):
        stats = client.get("/api/sessions/stats").json()

        assert stats["total_sessions"] == 0
        assert stats["sessions_today"] == 0


class TestGoals:
    @pytest.mark.parametrize("progress,expected", [(-10, 0), (40, 40), (150, 100)])
    def test_progress_is_clamped(self, client, progress, expected):
        goal = client.post("/api/goals", json={"title": "Ship", "progress": progress}).json()
        assert goal["progress"] == expected

    def test_full_progress_completes_goal(self, client):
        goal = client.post("/api/goals", json={"title": "Ship"}).json()
        assert goal["status"] == "active"

        updated = client.put(f"/api/goals/{goal['id']}", json={"progress": 100}).json()

        assert updated["status"] == "completed"

    def test_null_status_gets_default(self, client):
        goal = client.post("/api/goals", json={"title": "Ship", "status": None}).json()
        assert goal["status"] == "active"

    def test_non_numeric_progress_rejected(self, client):
        response = client.post("/api/goals", json={"title": "Ship", "progress": "lots"})
        assert response.status_code == 400

    def test_stats_overview(self, client):
        client.post("/api/goals", json={"title": "a", "progress": 50})
        client.post("/api/goals", json={"title": "b", "progress": 100})

        stats = client.get("/api/goals/stats/overview").json()

        assert stats["total_goals"] == 2
        assert stats["active_goals"] == 1
        assert stats["completed_goals"] == 1
        assert stats["avg_progress"] == 75


class TestCRM:
    def test_contact_search(self, client):
        client.post("/api/crm/contacts", json={"name": "Ada", "company": "Analytical Engines"})
        client.post("/api/crm/contacts", json={"name": "Grace", "email": "grace@navy.mil"})

        names = [c["name"] for c in client.get("/api/crm/contacts", params={"search": "navy"}).json()]

        assert names == ["Grace"]

    def test_contact_not_found_label(self, client):
        assert client.get("/api/crm/contacts/nope").json() == {"error": "Contact not found"}

    def test_complete_crm_task(self, client):
        task = client.post("/api/crm/tasks", json={"title": "Call back"}).json()
        assert task["status"] == "pending"

        done = client.post(f"/api/crm/tasks/{task['id']}/complete").json()

        assert done["status"] == "completed"
        assert done["completed_at"]


class TestJobsAndContent:
    def test_job_requires_company_and_position(self, client):
        response = client.post("/api/jobs", json={"company": "ACME"})

        assert response.status_code == 400
        assert "position" in response.json()["error"]

    def test_job_stats(self, client):
        client.post("/api/jobs", json={"company": "A", "position": "Dev"})
        client.post("/api/jobs", json={"company": "B", "position": "Dev", "status": "interview"})

        stats = client.get("/api/jobs/stats/overview").json()

        assert stats == {"total": 2, "applied": 1, "interview": 1, "offer": 0, "rejected": 0}

    def test_archive_usage_counter(self, client):
        element = client.post(
            "/api/content/archive", json={"title": "Intro", "element_type": "hook"}
        ).json()
        assert element["usage_count"] == 0

        client.post(f"/api/content/archive/{element['id']}/use")
        used = client.post(f"/api/content/archive/{element['id']}/use").json()

        assert used["usage_count"] == 2
        assert used["last_used"]

    def test_content_idea_crud(self, client):
        idea = client.post("/api/content/ideas", json={"title": "Reel"}).json()
        assert idea["status"] == "idea"
        assert client.delete(f"/api/content/ideas/{idea['id']}").status_code == 200


class TestCalendar:
    def test_end_before_start_rejected(self, client):
        response = client.post("/api/calendar/events", json={
            "title": "Meeting",
            "start_time": "2026-01-01T10:00:00",
            "end_time": "2026-01-01T09:00:00",
        })

        assert response.status_code == 400
        assert response.json() == {"error": "end_time must not be before start_time"}

    def test_update_checks_against_stored_start(self, client):
        event = client.post("/api/calendar/events", json={
            "title": "Meeting",
            "start_time": "2026-01-01T10:00:00Z",
        }).json()

        response = client.put(f"/api/calendar/events/{event['id']}", json={"end_time": "2026-01-01T08:00:00Z"})

        assert response.status_code == 400

    def test_null_status_gets_default(self, client):
        event = client.post("/api/calendar/events", json={
            "title": "Meeting",
            "start_time": "2026-01-01T10:00:00Z",
            "status": None,
        }).json()

        assert event["status"] == "scheduled"

    def test_start_time_required(self, client):
        assert client.post("/api/calendar/events", json={"title": "x"}).status_code == 400


class TestProjectsAndBranding:
    def test_asset_belongs_to_project(self, client):
        project = client.post("/api/projects", json={"name": "Mutuus"}).json()

        asset = client.post("/api/branding-assets", json={
            "project_id": project["id"],
            "asset_type": "logo",
            "title": "Primary logo",
        })

        assert asset.status_code == 201
        listed = client.get("/api/branding-assets", params={"project_id": project["id"]}).json()
        assert [a["title"] for a in listed] == ["Primary logo"]


class TestSops:
    def test_versioned_updates(self, client):
        sop = client.post("/api/sops", json={"title": "Onboarding"}).json()
        assert sop["version"] == 1

        ok = client.put(f"/api/sops/{sop['id']}", json={"steps": "1. Say hi", "version": 1})
        stale = client.put(f"/api/sops/{sop['id']}", json={"steps": "1. Wave", "version": 1})

        assert ok.json()["version"] == 2
        assert stale.status_code == 409


class TestHabits:
    def test_seeded_habits(self, client):
        habits = client.get("/api/habits").json()
        assert [h["id"] for h in habits] == ["habit-1", "habit-2", "habit-3"]

    def test_check_until_completed(self, client):
        client.post("/api/habits", json={"title": "Stretch", "target_count": 2})
        habit = [h for h in client.get("/api/habits").json() if h["title"] == "Stretch"][0]

        first = client.post(f"/api/habits/{habit['id']}/check").json()
        second = client.post(f"/api/habits/{habit['id']}/check").json()

        assert (first["checked_count"], first["completed"]) == (1, 0)
        assert (second["checked_count"], second["completed"]) == (2, 1)


class TestUserFacts:
    def test_fact_crud(self, client):
        fact = client.post("/api/ai/facts", json={"key": "city", "value": "Berlin"}).json()
        assert fact["category"] == "info"

        updated = client.put(f"/api/ai/facts/{fact['id']}", json={"value": "Hamburg"}).json()
        assert updated["value"] == "Hamburg"


class TestSalesPipeline:
    """Stages, pipeline contacts and deals."""

    @pytest.fixture
    def contact_id(self, client):
        return client.post("/api/crm/contacts", json={"name": "Ada", "company": "Engines Ltd"}).json()["id"]

    def test_default_stages_in_board_order(self, client):
        stages = client.get("/api/sales-pipeline/stages").json()

        assert [s["id"] for s in stages] == [
            "stage-lead", "stage-contacted", "stage-qualified", "stage-proposal",
            "stage-negotiation", "stage-won", "stage-lost",
        ]

    def test_custom_stage_goes_last(self, client):
        stage = client.post("/api/sales-pipeline/stages", json={"name": "Follow-up"}).json()

        assert stage["position"] == 999
        assert client.get("/api/sales-pipeline/stages").json()[-1]["name"] == "Follow-up"

    def test_stage_in_use_cannot_be_deleted(self, client, contact_id):
        client.post("/api/deals", json={"contact_id": contact_id, "title": "Retainer"})

        response = client.delete("/api/sales-pipeline/stages/stage-lead")

        assert response.status_code == 400
        assert client.delete("/api/sales-pipeline/stages/stage-contacted").status_code == 200

    def test_deal_defaults(self, client, contact_id):
        created = client.post("/api/deals", json={"contact_id": contact_id, "title": "Retainer", "deal_value": 1200})

        assert created.status_code == 201
        deal = created.json()
        assert deal["stage_id"] == "stage-lead"
        assert deal["status"] == "open"
        assert deal["currency"] == "EUR"

    def test_deal_rejects_unknown_references(self, client, contact_id):
        unknown_contact = client.post("/api/deals", json={"contact_id": "nope", "title": "x"})
        unknown_stage = client.post("/api/deals", json={"contact_id": contact_id, "title": "x", "stage_id": "nope"})

        assert unknown_contact.json() == {"error": "Unknown contact_id"}
        assert unknown_stage.json() == {"error": "Unknown stage_id"}

    def test_move_deal(self, client, contact_id):
        deal = client.post("/api/deals", json={"contact_id": contact_id, "title": "Retainer"}).json()

        moved = client.post(f"/api/deals/{deal['id']}/move", json={"stage_id": "stage-proposal"})

        assert moved.status_code == 200
        assert moved.json()["stage_id"] == "stage-proposal"
        assert moved.json()["updated_at"] > deal["updated_at"]
        assert client.post(f"/api/deals/{deal['id']}/move", json={}).status_code == 400
        assert client.post(f"/api/deals/{deal['id']}/move", json={"stage_id": "nope"}).status_code == 404
        assert client.post("/api/deals/missing/move", json={"stage_id": "stage-lead"}).status_code == 404

    def test_win_and_lose(self, client, contact_id):
        won = client.post("/api/deals", json={"contact_id": contact_id, "title": "A", "deal_value": 1000}).json()
        lost = client.post("/api/deals", json={"contact_id": contact_id, "title": "B", "deal_value": 500}).json()

        won = client.post(f"/api/deals/{won['id']}/win").json()
        lost = client.post(f"/api/deals/{lost['id']}/lose", json={"lost_reason": "budget"}).json()

        assert (won["status"], won["stage_id"]) == ("won", "stage-won")
        assert won["actual_close_date"]
        assert (lost["status"], lost["stage_id"], lost["lost_reason"]) == ("lost", "stage-lost", "budget")

        stats = client.get("/api/deals/stats/overview").json()

        assert stats["total_deals"] == 2
        assert stats["won_value"] == 1000
        assert stats["win_rate"] == 50
        assert len(stats["by_stage"]) == 7

    def test_by_stage_board(self, client, contact_id):
        client.post("/api/deals", json={"contact_id": contact_id, "title": "Small", "deal_value": 100})
        client.post("/api/deals", json={"contact_id": contact_id, "title": "Big", "deal_value": 900})

        board = client.get("/api/deals/by-stage").json()

        assert [s["id"] for s in board][-1] == "stage-negotiation"
        lead = board[0]
        assert [d["title"] for d in lead["deals"]] == ["Big", "Small"]
        assert lead["deals"][0]["contact_name"] == "Ada"
        assert (lead["count"], lead["total_value"]) == (2, 1000)

    def test_filter_deals_by_status(self, client, contact_id):
        deal = client.post("/api/deals", json={"contact_id": contact_id, "title": "A"}).json()
        client.post(f"/api/deals/{deal['id']}/win")

        assert client.get("/api/deals", params={"status": "open"}).json() == []
        assert len(client.get("/api/deals", params={"status": "won"}).json()) == 1

    def test_pipeline_contact_move_and_stats(self, client, contact_id):
        created = client.post("/api/sales-pipeline/contacts", json={
            "contact_id": contact_id,
            "stage_id": "stage-lead",
            "potential_value": 2000,
            "probability": 50,
        })

        assert created.status_code == 201
        entry = created.json()
        assert entry["last_interaction"] == entry["created_at"]

        moved = client.post(f"/api/sales-pipeline/contacts/{entry['id']}/move", json={"stage_id": "stage-won"}).json()

        assert moved["stage_name"] == "Won"
        assert moved["name"] == "Ada"
        assert moved["won_date"] == moved["updated_at"]

        stats = client.get("/api/sales-pipeline/contacts/stats/overview").json()

        assert stats["total_contacts"] == 1
        assert stats["total_value"] == 2000
        assert stats["weighted_value"] == 1000
        assert stats["conversion_rate"] == 100

    def test_pipeline_contact_requires_stage(self, client, contact_id):
        response = client.post("/api/sales-pipeline/contacts", json={"contact_id": contact_id})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required field(s): stage_id"}
