"""Execution gates that allow or block tools based on workflow progress."""

from hookflow.workflow.session import (
    SessionState,
    SessionStateTracker,
    SessionTimingInfo,
    StateTransitionResult,
    create_session_state_tracker,
)
from hookflow.workflow.state import (
    BlockingHookDef,
    CompletionRecord,
    WorkflowCheckResult,
    WorkflowStateTracker,
    create_blocking_response,
    create_workflow_state_tracker,
)

__all__ = [
    "BlockingHookDef",
    "CompletionRecord",
    "SessionState",
    "SessionStateTracker",
    "SessionTimingInfo",
    "StateTransitionResult",
    "WorkflowCheckResult",
    "WorkflowStateTracker",
    "create_blocking_response",
    "create_session_state_tracker",
    "create_workflow_state_tracker",
]
