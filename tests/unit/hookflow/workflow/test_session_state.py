"""Tests for the session initialization gate."""

from __future__ import annotations

import pytest

from hookflow.workflow.session import (
    INITIALIZED_GUIDANCE,
    WORKING_GUIDANCE,
    SessionState,
    SessionStateTracker,
    StateTransitionResult,
    create_session_state_tracker,
)
from hookflow.workflow.state import create_blocking_response


@pytest.fixture
def tracker():
    return create_session_state_tracker(
        requires_init_tools=["toolkit:build", "toolkit:deploy"],
    )


class TestCheckToolAllowed:
    def test_requires_init_blocked_before_init(self, tracker):
        result = tracker.check_tool_allowed("toolkit:build")
        assert not result.allowed
        assert result.blocked_by == "session_init"
        assert result.message == (
            'Tool "toolkit:build" requires session initialization. '
            "You MUST call session_init first before using this tool."
        )

    def test_message_lists_every_init_tool(self):
        tracker = SessionStateTracker(
            init_tools=["session_init", "resume_session"], requires_init=["build"]
        )
        result = tracker.check_tool_allowed("build")
        assert "You MUST call session_init or resume_session first" in result.message

    def test_init_tools_required(self):
        with pytest.raises(ValueError, match="init_tools"):
            SessionStateTracker(init_tools=[], requires_init=["build"])

    def test_init_and_exempt_tools_always_allowed(self, tracker):
        assert tracker.check_tool_allowed("session_init").allowed
        assert tracker.check_tool_allowed("server_info").allowed

    def test_other_tools_allowed_before_init(self, tracker):
        assert tracker.check_tool_allowed("toolkit:list").allowed

    def test_allowed_after_init(self, tracker):
        tracker.record_tool_call("session_init")
        assert tracker.check_tool_allowed("toolkit:build").allowed

    def test_blocking_response(self, tracker):
        response = create_blocking_response(tracker.check_tool_allowed("toolkit:deploy"))
        assert response["is_error"] is True
        assert "workflow_violation" in response["content"][0]["text"]

    def test_request_id_recorded(self, tracker):
        tracker.check_tool_allowed("server_info", request_id="req-1")
        assert tracker.get_timing_info().request_id == "req-1"


class TestRecordToolCall:
    def test_default_progression(self, tracker):
        assert tracker.get_state() == SessionState.UNINITIALIZED
        assert not tracker.is_initialized()

        init = tracker.record_tool_call("session_init")
        assert init == StateTransitionResult(
            previous_state="uninitialized",
            new_state="initialized",
            transitioned=True,
            guidance=INITIALIZED_GUIDANCE,
        )
        assert tracker.is_initialized()
        assert tracker.get_timing_info().init_at is not None

        work = tracker.record_tool_call("toolkit:build")
        assert work == StateTransitionResult("initialized", "working", True, WORKING_GUIDANCE)

        again = tracker.record_tool_call("toolkit:deploy")
        assert again == StateTransitionResult("working", "working", False)

    def test_exempt_tool_does_not_start_work(self, tracker):
        tracker.record_tool_call("session_init")
        result = tracker.record_tool_call("server_info")
        assert not result.transitioned
        assert tracker.get_state() == "initialized"

    def test_repeated_init_is_not_a_transition(self, tracker):
        tracker.record_tool_call("session_init")
        result = tracker.record_tool_call("session_init")
        assert not result.transitioned
        assert tracker.get_state() == "initialized"

    def test_calls_before_init_do_not_transition(self, tracker):
        result = tracker.record_tool_call("toolkit:list")
        assert result == StateTransitionResult("uninitialized", "uninitialized", False)

    def test_custom_transitions(self):
        tracker = SessionStateTracker(
            init_tools=["session_init"],
            requires_init=["build"],
            transition_triggers={"session_init": "initialized", "load_context": "ready"},
        )
        tracker.record_tool_call("session_init")
        ready = tracker.record_tool_call("load_context")
        assert ready == StateTransitionResult("initialized", "ready", True)
        assert tracker.record_tool_call("build").new_state == "working"

    def test_custom_labels(self):
        tracker = SessionStateTracker(
            init_tools=["open"],
            transition_triggers={"open": "initialized", "archive": "archived"},
        )
        tracker.record_tool_call("open")
        result = tracker.record_tool_call("archive")
        assert result.new_state == "archived"
        assert result.guidance is None
        assert tracker.get_state() == "archived"


class TestSessionInfo:
    def test_session_id(self, tracker):
        assert tracker.get_session_id() is None
        tracker.set_session_id("s1")
        assert tracker.get_session_id() == "s1"
        assert tracker.get_timing_info().session_id == "s1"

    def test_reset(self, tracker):
        tracker.set_session_id("s1")
        tracker.record_tool_call("session_init", request_id="req-1")
        tracker.reset()

        info = tracker.get_timing_info()
        assert info.state == "uninitialized"
        assert info.session_id is None
        assert info.request_id is None
        assert info.init_at is None
        assert not tracker.check_tool_allowed("toolkit:build").allowed
