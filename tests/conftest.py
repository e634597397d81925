"""Shared test fixtures for the hookflow test suite."""

from __future__ import annotations

from typing import Any

import pytest

from hookflow.hooks.base import HookDefinition
from hookflow.hooks.composer import HookComposer
from hookflow.hooks.loader import HookContentLoader
from hookflow.hooks.registry import HookRegistry
from hookflow.workflow.state import BlockingHookDef, WorkflowStateTracker


# ---------------------------------------------------------------------------
# Hook helpers
# ---------------------------------------------------------------------------


def hook_input(tag: str, **overrides: Any) -> dict[str, Any]:
    """Minimal valid registration input for a config/start hook."""
    data: dict[str, Any] = {
        "tag": tag,
        "type": "config",
        "lifecycle": "start",
        "name": tag.replace("-", " ").title(),
        "requirement_level": "MUST",
    }
    data.update(overrides)
    return data


def make_hook(tag: str, **overrides: Any) -> HookDefinition:
    return HookDefinition.from_input(hook_input(tag, **overrides))


def hook_id(tag: str, type: str = "config", lifecycle: str = "start") -> str:
    return f"hookflow:{type}:{lifecycle}:{tag}"


# ---------------------------------------------------------------------------
# Pytest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def registry():
    return HookRegistry()


@pytest.fixture
def composer():
    return HookComposer()


@pytest.fixture
def content_dir(tmp_path):
    path = tmp_path / "hooks"
    path.mkdir()
    return path


@pytest.fixture
def loader(content_dir):
    return HookContentLoader(content_dir)


@pytest.fixture
def workflow_tracker():
    tracker = WorkflowStateTracker()
    tracker.register_blocking_hook(
        BlockingHookDef(
            hook_id="cfg",
            tool_prefix="toolkit:",
            name="Project Configuration",
            block_message="Finish configuration first.",
        )
    )
    return tracker
