"""Session state: blocks tools until the session has been initialized."""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone

from hookflow.workflow.state import WorkflowCheckResult

logger = logging.getLogger(__name__)


class SessionState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    READY = "ready"
    WORKING = "working"


INITIALIZED_GUIDANCE = "Session initialized. Ready to work."
WORKING_GUIDANCE = "Session is now working. Initialization tools are no longer needed."


@dataclass(frozen=True)
class StateTransitionResult:
    previous_state: str
    new_state: str
    transitioned: bool
    guidance: str | None = None


@dataclass(frozen=True)
class SessionTimingInfo:
    state: str
    session_id: str | None
    request_id: str | None
    init_at: datetime | None


class SessionStateTracker:
    """State machine for a single tracked session.

    The built-in progression is uninitialized -> initialized (any init tool)
    -> working (first other tool). ``transition_triggers`` replaces the
    init-tool triggers with an explicit tool -> state map, for workflows that
    need other states.

    Usage::

        tracker = SessionStateTracker(
            init_tools=["session_init"],
            requires_init=["build", "deploy"],
            exempt_tools=["server_info"],
        )
        check = tracker.check_tool_allowed("build")
        if not check.allowed:
            return create_blocking_response(check)
        tracker.record_tool_call("build")
    """

    def __init__(
        self,
        init_tools: Iterable[str],
        requires_init: Iterable[str] = (),
        transition_triggers: Mapping[str, str] | None = None,
        exempt_tools: Iterable[str] = (),
    ) -> None:
        self.init_tools = tuple(dict.fromkeys(init_tools))
        if not self.init_tools:
            raise ValueError("init_tools must name at least one tool")
        self.requires_init = frozenset(requires_init)
        self.exempt_tools = frozenset(exempt_tools)
        if transition_triggers is None:
            transition_triggers = {name: SessionState.INITIALIZED for name in self.init_tools}
        self.transition_triggers = {
            name: _label(state) for name, state in transition_triggers.items()
        }

        self._state: str = SessionState.UNINITIALIZED.value
        self._init_at: datetime | None = None
        self._session_id: str | None = None
        self._request_id: str | None = None

    def get_state(self) -> str:
        return self._state

    def is_initialized(self) -> bool:
        return self._state != SessionState.UNINITIALIZED.value

    def set_session_id(self, session_id: str) -> None:
        self._session_id = session_id

    def get_session_id(self) -> str | None:
        return self._session_id

    def check_tool_allowed(
        self, tool_name: str, request_id: str | None = None
    ) -> WorkflowCheckResult:
        if request_id:
            self._request_id = request_id

        if tool_name in self.init_tools or tool_name in self.exempt_tools:
            return WorkflowCheckResult.allow()

        if tool_name in self.requires_init and not self.is_initialized():
            init_names = " or ".join(self.init_tools)
            logger.warning("Tool %s called before session initialization", tool_name)
            return WorkflowCheckResult(
                allowed=False,
                blocked_by=self.init_tools[0],
                message=(
                    f'Tool "{tool_name}" requires session initialization. '
                    f"You MUST call {init_names} first before using this tool."
                ),
                hint=f"Call {init_names} to initialize the session.",
            )

        return WorkflowCheckResult.allow()

    def record_tool_call(
        self, tool_name: str, request_id: str | None = None
    ) -> StateTransitionResult:
        """Record a completed tool call and advance the state if it triggers a transition."""
        if request_id:
            self._request_id = request_id

        previous = self._state

        target = self.transition_triggers.get(tool_name)
        if target is not None and target != previous:
            self._state = target
            logger.debug("Session state %s -> %s via %s", previous, target, tool_name)
            if (
                previous == SessionState.UNINITIALIZED.value
                and target == SessionState.INITIALIZED.value
            ):
                self._init_at = datetime.now(timezone.utc)
                return StateTransitionResult(previous, target, True, INITIALIZED_GUIDANCE)
            return StateTransitionResult(previous, target, True)

        if (
            previous in (SessionState.INITIALIZED.value, SessionState.READY.value)
            and tool_name not in self.init_tools
            and tool_name not in self.exempt_tools
        ):
            self._state = SessionState.WORKING.value
            return StateTransitionResult(previous, self._state, True, WORKING_GUIDANCE)

        return StateTransitionResult(previous, self._state, False)

    def get_timing_info(self) -> SessionTimingInfo:
        return SessionTimingInfo(
            state=self._state,
            session_id=self._session_id,
            request_id=self._request_id,
            init_at=self._init_at,
        )

    def reset(self) -> None:
        self._state = SessionState.UNINITIALIZED.value
        self._init_at = None
        self._session_id = None
        self._request_id = None


def _label(state: str) -> str:
    return state.value if isinstance(state, SessionState) else str(state)


def create_session_state_tracker(
    init_tool: str = "session_init",
    requires_init_tools: Iterable[str] = (),
    exempt_tools: Iterable[str] = ("server_info",),
) -> SessionStateTracker:
    return SessionStateTracker(
        init_tools=[init_tool],
        requires_init=requires_init_tools,
        exempt_tools=exempt_tools,
    )
