"""
Tests for tool-call marker extraction and response cleaning.
"""

import logging

from kensenich.agent.calls import clean_response, extract_tool_calls, iter_tool_calls


class TestExtraction:
    """Parsing [TOOL_CALL: name({...})] markers out of model output."""

    def test_two_good_one_bad(self, caplog):
        """A malformed marker is skipped without affecting its neighbours."""
        text = (
            'Sure! [TOOL_CALL: getTasks({"status": "todo"})] '
            "[TOOL_CALL: createTask({title: oops})] "
            '[TOOL_CALL: getGoals({"status": "active"})]'
        )

        with caplog.at_level(logging.WARNING):
            calls = extract_tool_calls(text)

        assert [(c.name, c.args) for c in calls] == [
            ("getTasks", {"status": "todo"}),
            ("getGoals", {"status": "active"}),
        ]
        assert "createTask" in caplog.text

    def test_empty_arguments(self):
        calls = extract_tool_calls("[TOOL_CALL: getDailyHabits()] and [TOOL_CALL: getGoals({})]")

        assert [(c.name, c.args) for c in calls] == [("getDailyHabits", {}), ("getGoals", {})]

    def test_whitespace_after_colon_is_optional(self):
        calls = extract_tool_calls("[TOOL_CALL:getTasks()][TOOL_CALL:    getGoals()]")
        assert [c.name for c in calls] == ["getTasks", "getGoals"]

    def test_arguments_may_span_lines(self):
        text = '[TOOL_CALL: createTask({\n  "title": "Portfolio",\n  "priority": 3\n})]'

        calls = extract_tool_calls(text)

        assert calls[0].args == {"title": "Portfolio", "priority": 3}

    def test_unclosed_marker_does_not_swallow_next_call(self):
        """A marker missing its ')]' is skipped; the valid call after it still parses."""
        text = (
            'Creating it now [TOOL_CALL: createTask({"title": "Portfolio"]\n'
            "Also checking your goals:\n"
            "[TOOL_CALL: getGoals({})]"
        )

        calls = extract_tool_calls(text)

        assert [(c.name, c.args) for c in calls] == [("getGoals", {})]

    def test_unclosed_marker_on_same_line(self):
        text = '[TOOL_CALL: createTask({"title": "x"] [TOOL_CALL: getTasks()]'
        assert [c.name for c in extract_tool_calls(text)] == ["getTasks"]

    def test_non_object_json_is_skipped(self):
        assert extract_tool_calls('[TOOL_CALL: getTasks(["todo"])] [TOOL_CALL: getTasks("x")]') == []

    def test_raw_and_span_point_at_marker(self):
        text = 'prefix [TOOL_CALL: getTasks({"status": "todo"})] suffix'

        call = extract_tool_calls(text)[0]

        assert call.raw == '[TOOL_CALL: getTasks({"status": "todo"})]'
        assert text[call.span[0]:call.span[1]] == call.raw

    def test_order_of_appearance(self):
        text = "[TOOL_CALL: c()] [TOOL_CALL: a()] [TOOL_CALL: b()]"
        assert [c.name for c in extract_tool_calls(text)] == ["c", "a", "b"]

    def test_each_scan_restarts(self):
        """Iterating twice yields the same calls; no state leaks between scans."""
        text = "[TOOL_CALL: getTasks()] [TOOL_CALL: getGoals()]"

        first = [c.name for c in iter_tool_calls(text)]
        second = [c.name for c in iter_tool_calls(text)]

        assert first == second == ["getTasks", "getGoals"]

    def test_no_markers(self):
        assert extract_tool_calls("Just chatting, no tools here.") == []
        assert extract_tool_calls("") == []


class TestCleanResponse:
    """Removing markers from the text shown to the user."""

    def test_removes_good_and_bad_markers(self):
        text = (
            "Let me check.\n"
            '[TOOL_CALL: getTasks({"status": "todo"})]\n'
            "[TOOL_CALL: createTask({broken)]\n"
            "One moment."
        )

        cleaned = clean_response(text)

        assert "TOOL_CALL" not in cleaned
        assert cleaned.startswith("Let me check.")
        assert cleaned.endswith("One moment.")

    def test_unclosed_marker_keeps_following_prose(self):
        text = (
            'Creating it now [TOOL_CALL: createTask({"title": "Portfolio"]\n'
            "Also checking your goals:\n"
            "[TOOL_CALL: getGoals({})]"
        )

        cleaned = clean_response(text)

        assert "TOOL_CALL" not in cleaned
        assert cleaned == "Creating it now \nAlso checking your goals:"

    def test_collapses_leftover_blank_lines(self):
        text = "Hello\n\n[TOOL_CALL: getTasks()]\n\n\nBye"
        assert clean_response(text) == "Hello\n\nBye"

    def test_marker_only_reply_becomes_empty(self):
        assert clean_response("  [TOOL_CALL: getDailyHabits({})]  ") == ""

    def test_plain_text_is_only_stripped(self):
        assert clean_response("  Hi there  ") == "Hi there"
