"""Exceptions raised by the hook registry and composer."""

from __future__ import annotations


class HookError(Exception):
    """Base class for hook system errors."""


class DuplicateHookError(HookError):
    """A hook with the same ID is already registered."""

    def __init__(self, hook_id: str) -> None:
        self.hook_id = hook_id
        super().__init__(f"Hook with ID '{hook_id}' is already registered")


class CircularDependencyError(HookError):
    """Hook dependencies form a cycle, so no ordering exists."""

    def __init__(self, hook_id: str, cycle: list[str] | None = None) -> None:
        self.hook_id = hook_id
        self.cycle = list(cycle) if cycle else [hook_id, hook_id]
        super().__init__(
            f"Circular dependency detected for hook '{hook_id}': {' -> '.join(self.cycle)}"
        )
