"""Query, load and compose hooks in one call."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from hookflow.hooks.base import ComposedResult, FailedHook, HookSummary, ResolvedHook, SkippedHook
from hookflow.hooks.composer import HookComposer
from hookflow.hooks.loader import HookContentLoader
from hookflow.hooks.registry import HookRegistry


@dataclass
class HookLoadResult:
    hooks: list[ResolvedHook] = field(default_factory=list)
    skipped: list[SkippedHook] = field(default_factory=list)
    failed: list[FailedHook] = field(default_factory=list)
    composed: ComposedResult = field(default_factory=ComposedResult)

    @property
    def content(self) -> str:
        return self.composed.content


async def load_hooks(
    registry: HookRegistry,
    loader: HookContentLoader,
    composer: HookComposer | None = None,
    **query: Any,
) -> HookLoadResult:
    """Select the hooks that apply to ``query``, load them and compose the result.

    Hooks excluded by their conditions and hooks whose content failed to load
    are reported in the composed notices instead of raising.
    """
    composer = composer or HookComposer()

    hooks, skipped = registry.query_with_skipped(**query)
    loaded = await loader.load_all(hooks)
    failed = [
        FailedHook(hook=HookSummary.from_hook(f.hook), error=f.error) for f in loaded.failed
    ]

    composed = composer.compose_with_transparency(loaded.resolved, skipped, failed)
    return HookLoadResult(
        hooks=loaded.resolved,
        skipped=skipped,
        failed=failed,
        composed=composed,
    )
