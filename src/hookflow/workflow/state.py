"""Workflow state: blocks tools until prerequisite hooks have completed.

Tools are matched to blocking hooks by name prefix, e.g. a hook registered
with ``tool_prefix="toolkit:"`` blocks every ``toolkit:*`` tool until it is
marked completed.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from hookflow.hooks.base import HookDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlockingHookDef:
    """A hook that must complete before tools with ``tool_prefix`` may run."""

    hook_id: str
    tool_prefix: str
    name: str
    block_message: str

    @classmethod
    def from_hook(
        cls, hook: HookDefinition, tool_prefix: str, block_message: str
    ) -> BlockingHookDef:
        return cls(
            hook_id=hook.id,
            tool_prefix=tool_prefix,
            name=hook.name,
            block_message=block_message,
        )


@dataclass(frozen=True)
class CompletionRecord:
    hook_id: str
    completed_at: datetime
    data: dict[str, Any] | None = None


@dataclass(frozen=True)
class WorkflowCheckResult:
    """Outcome of a gate check. A blocked tool is a normal result, not an error."""

    allowed: bool
    blocked_by: str | None = None
    message: str | None = None
    hint: str | None = None

    @staticmethod
    def allow() -> WorkflowCheckResult:
        return WorkflowCheckResult(allowed=True)


def create_blocking_response(result: WorkflowCheckResult) -> dict[str, Any]:
    """Build the error payload returned in place of a blocked tool's result."""
    payload = {
        "success": False,
        "error": result.message or "Workflow requirement not met",
        "workflow_violation": True,
        "blocked_by": result.blocked_by,
        "hint": result.hint,
    }
    return {
        "is_error": True,
        "content": [{"type": "text", "text": json.dumps(payload, indent=2)}],
    }


class WorkflowStateTracker:
    """Tracks completed blocking hooks and decides whether a tool may run.

    Blocking hook registrations survive ``reset``; only completion records
    are cleared, so one configuration can be reused across sessions.
    """

    def __init__(self) -> None:
        self._blocking_hooks: list[BlockingHookDef] = []
        self._completed: dict[str, CompletionRecord] = {}

    def register_blocking_hook(self, definition: BlockingHookDef) -> None:
        self._blocking_hooks.append(definition)

    def register_blocking_hooks(self, definitions: Iterable[BlockingHookDef]) -> None:
        for definition in definitions:
            self.register_blocking_hook(definition)

    def mark_hook_completed(self, hook_id: str, data: dict[str, Any] | None = None) -> None:
        self._completed[hook_id] = CompletionRecord(
            hook_id=hook_id,
            completed_at=datetime.now(timezone.utc),
            data=data,
        )
        logger.debug("Hook %s marked completed", hook_id)

    def is_hook_completed(self, hook_id: str) -> bool:
        return hook_id in self._completed

    def get_hook_completion(self, hook_id: str) -> CompletionRecord | None:
        return self._completed.get(hook_id)

    def check_tool_allowed(self, tool_name: str) -> WorkflowCheckResult:
        """Check blocking hooks in registration order; the first unmet one wins."""
        for definition in self._blocking_hooks:
            if not tool_name.startswith(definition.tool_prefix):
                continue
            if definition.hook_id in self._completed:
                continue
            logger.warning("Tool %s blocked by hook %s", tool_name, definition.hook_id)
            return WorkflowCheckResult(
                allowed=False,
                blocked_by=definition.hook_id,
                message=definition.block_message,
                hint=f'Complete the "{definition.name}" workflow first.',
            )
        return WorkflowCheckResult.allow()

    def create_blocking_response(self, result: WorkflowCheckResult) -> dict[str, Any]:
        return create_blocking_response(result)

    def get_completed_hooks(self) -> list[CompletionRecord]:
        return list(self._completed.values())

    def get_blocking_hooks(self) -> list[BlockingHookDef]:
        return list(self._blocking_hooks)

    def reset(self) -> None:
        """Forget completed hooks. Registered blocking hooks are kept."""
        self._completed.clear()

    def clear_blocking_hooks(self) -> None:
        self._blocking_hooks.clear()


def create_workflow_state_tracker() -> WorkflowStateTracker:
    return WorkflowStateTracker()


# Process-wide convenience instance. Prefer passing a tracker explicitly;
# these helpers exist for hosts that only ever run one workflow.
_default_tracker: WorkflowStateTracker | None = None


def get_default_workflow_tracker() -> WorkflowStateTracker:
    global _default_tracker
    if _default_tracker is None:
        _default_tracker = WorkflowStateTracker()
    return _default_tracker


def reset_default_workflow_tracker() -> None:
    global _default_tracker
    if _default_tracker is not None:
        _default_tracker.reset()
        _default_tracker.clear_blocking_hooks()
    _default_tracker = None


def check_workflow_allowed(tool_name: str) -> WorkflowCheckResult:
    return get_default_workflow_tracker().check_tool_allowed(tool_name)


def register_blocking_hook(definition: BlockingHookDef) -> None:
    get_default_workflow_tracker().register_blocking_hook(definition)


def mark_workflow_hook_completed(hook_id: str, data: dict[str, Any] | None = None) -> None:
    get_default_workflow_tracker().mark_hook_completed(hook_id, data)
