"""Tests for the prefix / hook-completion gate."""

from __future__ import annotations

import json

import pytest

from conftest import make_hook
from hookflow.workflow import state as workflow_state
from hookflow.workflow.state import (
    BlockingHookDef,
    WorkflowCheckResult,
    WorkflowStateTracker,
    create_blocking_response,
    create_workflow_state_tracker,
)


class TestCheckToolAllowed:
    def test_blocks_until_completed(self, workflow_tracker):
        result = workflow_tracker.check_tool_allowed("toolkit:build")
        assert result == WorkflowCheckResult(
            allowed=False,
            blocked_by="cfg",
            message="Finish configuration first.",
            hint='Complete the "Project Configuration" workflow first.',
        )

        workflow_tracker.mark_hook_completed("cfg")
        assert workflow_tracker.check_tool_allowed("toolkit:build").allowed

    def test_unrelated_tool_allowed(self, workflow_tracker):
        assert workflow_tracker.check_tool_allowed("server_info") == WorkflowCheckResult.allow()

    def test_first_registered_unmet_hook_wins(self, workflow_tracker):
        workflow_tracker.register_blocking_hook(
            BlockingHookDef("auth", "toolkit:deploy", "Authentication", "Log in first.")
        )
        assert workflow_tracker.check_tool_allowed("toolkit:deploy").blocked_by == "cfg"

        workflow_tracker.mark_hook_completed("cfg")
        assert workflow_tracker.check_tool_allowed("toolkit:deploy").blocked_by == "auth"
        assert workflow_tracker.check_tool_allowed("toolkit:build").allowed

    def test_registration_order_not_prefix_length(self):
        tracker = WorkflowStateTracker()
        tracker.register_blocking_hooks(
            [
                BlockingHookDef("long", "toolkit:build", "Long", "long"),
                BlockingHookDef("short", "toolkit:", "Short", "short"),
            ]
        )
        assert tracker.check_tool_allowed("toolkit:build").blocked_by == "long"

    def test_no_blocking_hooks(self):
        assert create_workflow_state_tracker().check_tool_allowed("anything").allowed


class TestCompletion:
    def test_completion_record(self, workflow_tracker):
        workflow_tracker.mark_hook_completed("cfg", {"path": "config.toml"})
        record = workflow_tracker.get_hook_completion("cfg")
        assert record.hook_id == "cfg"
        assert record.data == {"path": "config.toml"}
        assert record.completed_at.tzinfo is not None
        assert workflow_tracker.is_hook_completed("cfg")

    def test_mark_completed_is_idempotent(self, workflow_tracker):
        workflow_tracker.mark_hook_completed("cfg", {"run": 1})
        first = workflow_tracker.get_hook_completion("cfg")
        workflow_tracker.mark_hook_completed("cfg", {"run": 2})
        second = workflow_tracker.get_hook_completion("cfg")

        assert len(workflow_tracker.get_completed_hooks()) == 1
        assert second.data == {"run": 2}
        assert second.completed_at >= first.completed_at

    def test_unknown_hook(self, workflow_tracker):
        assert workflow_tracker.get_hook_completion("nope") is None
        assert not workflow_tracker.is_hook_completed("nope")

    def test_reset_keeps_registrations(self, workflow_tracker):
        workflow_tracker.mark_hook_completed("cfg")
        workflow_tracker.reset()

        assert workflow_tracker.get_completed_hooks() == []
        assert len(workflow_tracker.get_blocking_hooks()) == 1
        assert not workflow_tracker.check_tool_allowed("toolkit:build").allowed

    def test_clear_blocking_hooks(self, workflow_tracker):
        workflow_tracker.clear_blocking_hooks()
        assert workflow_tracker.get_blocking_hooks() == []
        assert workflow_tracker.check_tool_allowed("toolkit:build").allowed


class TestBlockingHookDef:
    def test_from_hook(self):
        hook = make_hook("config", name="Project Configuration")
        definition = BlockingHookDef.from_hook(hook, "toolkit:", "Finish configuration first.")
        assert definition.hook_id == "hookflow:config:start:config"
        assert definition.name == "Project Configuration"
        assert definition.tool_prefix == "toolkit:"


class TestBlockingResponse:
    def test_payload(self, workflow_tracker):
        result = workflow_tracker.check_tool_allowed("toolkit:build")
        response = workflow_tracker.create_blocking_response(result)

        assert response["is_error"] is True
        assert response["content"][0]["type"] == "text"
        assert json.loads(response["content"][0]["text"]) == {
            "success": False,
            "error": "Finish configuration first.",
            "workflow_violation": True,
            "blocked_by": "cfg",
            "hint": 'Complete the "Project Configuration" workflow first.',
        }

    def test_module_function_matches_method(self, workflow_tracker):
        result = workflow_tracker.check_tool_allowed("toolkit:build")
        assert create_blocking_response(result) == workflow_tracker.create_blocking_response(result)


class TestDefaultTracker:
    @pytest.fixture(autouse=True)
    def _fresh_default(self):
        workflow_state.reset_default_workflow_tracker()
        yield
        workflow_state.reset_default_workflow_tracker()

    def test_helpers_share_one_tracker(self):
        workflow_state.register_blocking_hook(
            BlockingHookDef("cfg", "toolkit:", "Configuration", "Configure first.")
        )
        assert not workflow_state.check_workflow_allowed("toolkit:build").allowed

        workflow_state.mark_workflow_hook_completed("cfg")
        assert workflow_state.check_workflow_allowed("toolkit:build").allowed
        assert workflow_state.get_default_workflow_tracker() is workflow_state.get_default_workflow_tracker()

    def test_reset_discards_registrations(self):
        workflow_state.register_blocking_hook(
            BlockingHookDef("cfg", "toolkit:", "Configuration", "Configure first.")
        )
        workflow_state.reset_default_workflow_tracker()
        assert workflow_state.check_workflow_allowed("toolkit:build").allowed
