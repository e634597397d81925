"""Hook registry for storing definitions and answering conditional queries."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from hookflow.hooks.base import (
    HookDefinition,
    HookDefinitionInput,
    HookQuery,
    HookSummary,
    SkippedHook,
)
from hookflow.hooks.conditions import check_condition
from hookflow.hooks.errors import DuplicateHookError

logger = logging.getLogger(__name__)


class HookRegistry:
    """Registry of hook definitions keyed by hook ID.

    Query results are sorted by priority (lower first); hooks with equal
    priority keep their registration order.
    """

    def __init__(self) -> None:
        self._hooks: dict[str, HookDefinition] = {}

    def register(self, data: HookDefinitionInput | dict[str, Any]) -> HookDefinition:
        hook = HookDefinition.from_input(data)
        if hook.id in self._hooks:
            raise DuplicateHookError(hook.id)
        self._hooks[hook.id] = hook
        logger.debug("Registered hook %s (priority %d)", hook.id, hook.priority)
        return hook

    def register_all(
        self, inputs: Iterable[HookDefinitionInput | dict[str, Any]]
    ) -> list[HookDefinition]:
        """Register a batch of hooks, all or nothing.

        Every input is validated and checked for ID collisions, against the
        registry and within the batch, before anything is stored.
        """
        hooks = [HookDefinition.from_input(data) for data in inputs]

        seen: set[str] = set()
        for hook in hooks:
            if hook.id in self._hooks or hook.id in seen:
                raise DuplicateHookError(hook.id)
            seen.add(hook.id)

        for hook in hooks:
            self._hooks[hook.id] = hook
        logger.debug("Registered %d hooks", len(hooks))
        return hooks

    def get(self, hook_id: str) -> HookDefinition | None:
        return self._hooks.get(hook_id)

    def has(self, hook_id: str) -> bool:
        return hook_id in self._hooks

    def unregister(self, hook_id: str) -> bool:
        """Remove a hook. Returns False if it was not registered."""
        return self._hooks.pop(hook_id, None) is not None

    def all(self) -> list[HookDefinition]:
        return list(self._hooks.values())

    def size(self) -> int:
        return len(self._hooks)

    def clear(self) -> None:
        self._hooks.clear()

    def __len__(self) -> int:
        return len(self._hooks)

    def __contains__(self, hook_id: object) -> bool:
        return hook_id in self._hooks

    def query(self, options: HookQuery | None = None, **filters: Any) -> list[HookDefinition]:
        """Return the hooks that apply to the given context.

        Accepts either a ``HookQuery`` or the same fields as keyword arguments.
        """
        hooks, _ = self.query_with_skipped(options, **filters)
        return hooks

    def query_with_skipped(
        self, options: HookQuery | None = None, **filters: Any
    ) -> tuple[list[HookDefinition], list[SkippedHook]]:
        """Like ``query``, but also report hooks excluded by their conditions.

        Hooks filtered out by type, lifecycle, tags or scope are simply not
        relevant and are not reported as skipped.
        """
        if options is None:
            options = HookQuery(**filters)

        matched: list[HookDefinition] = []
        skipped: list[SkippedHook] = []

        for hook in self._hooks.values():
            if not self._matches_filters(hook, options):
                continue
            reason = self._unmet_condition(hook, options)
            if reason is None:
                matched.append(hook)
            else:
                skipped.append(SkippedHook(hook=HookSummary.from_hook(hook), reason=reason))

        matched.sort(key=lambda h: h.priority)
        return matched, skipped

    @staticmethod
    def _matches_filters(hook: HookDefinition, options: HookQuery) -> bool:
        if options.type is not None and hook.type != options.type:
            return False
        if options.lifecycle is not None and hook.lifecycle != options.lifecycle:
            return False
        if options.tags and not any(tag in options.tags for tag in hook.tags):
            return False
        # Unscoped hooks are global and match every session/request.
        if hook.session_id is not None and hook.session_id != options.session_id:
            return False
        if hook.request_id is not None and hook.request_id != options.request_id:
            return False
        return True

    @staticmethod
    def _unmet_condition(hook: HookDefinition, options: HookQuery) -> str | None:
        for condition in hook.conditions:
            reason = check_condition(
                condition,
                provider=options.provider,
                feature=options.feature,
                storage=options.storage,
                config=options.config,
            )
            if reason is not None:
                return reason
        return None


def create_hook_registry() -> HookRegistry:
    return HookRegistry()
