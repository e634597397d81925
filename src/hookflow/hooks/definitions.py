"""Built-in session lifecycle hooks shipped with the package."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from hookflow.hooks.base import HookDefinition, HookDefinitionInput, HookLifecycle, HookType
from hookflow.hooks.composer import HookComposer
from hookflow.hooks.loader import HookContentLoader
from hookflow.hooks.pipeline import HookLoadResult, load_hooks
from hookflow.hooks.registry import HookRegistry

session_start_core_hook = HookDefinitionInput(
    tag="session-start-core",
    type=HookType.SESSION,
    lifecycle=HookLifecycle.START,
    name="Session Initialization",
    description="Server status, ping handling and workflow setup at session start",
    requirement_level="MUST",
    priority=10,
    content_file="core.md",
)

session_end_core_hook = HookDefinitionInput(
    tag="session-end-core",
    type=HookType.SESSION,
    lifecycle=HookLifecycle.END,
    name="Session Completion",
    description="Context handoff, cleanup and summary generation at session end",
    requirement_level="SHOULD",
    priority=10,
    content_file="session-end-core.md",
)

core_hook_definitions: list[HookDefinitionInput] = [
    session_start_core_hook,
    session_end_core_hook,
]


def get_hooks_content_path() -> Path:
    return Path(__file__).parent / "content"


def create_core_hook_registry() -> HookRegistry:
    """Create a registry with the core hooks registered."""
    registry = HookRegistry()
    registry.register_all(core_hook_definitions)
    return registry


def extend_core_hooks(
    hooks: list[HookDefinitionInput | dict[str, Any]],
    registry: HookRegistry | None = None,
) -> HookRegistry:
    registry = registry or create_core_hook_registry()
    registry.register_all(hooks)
    return registry


def get_core_hook(tag: str) -> HookDefinition | None:
    for hook in create_core_hook_registry().all():
        if hook.tag == tag:
            return hook
    return None


async def load_core_hooks(
    type: HookType | str,
    lifecycle: HookLifecycle | str,
    registry: HookRegistry | None = None,
    composer: HookComposer | None = None,
    **query: Any,
) -> HookLoadResult:
    """Load and compose the hooks for one lifecycle phase.

    Content is read from the package's ``content`` directory.
    """
    registry = registry or create_core_hook_registry()
    loader = HookContentLoader(get_hooks_content_path())
    return await load_hooks(
        registry, loader, composer, type=type, lifecycle=lifecycle, **query
    )


async def get_session_start_content(
    registry: HookRegistry | None = None, **query: Any
) -> str:
    result = await load_core_hooks(HookType.SESSION, HookLifecycle.START, registry, **query)
    return result.content


async def get_session_end_content(registry: HookRegistry | None = None, **query: Any) -> str:
    result = await load_core_hooks(HookType.SESSION, HookLifecycle.END, registry, **query)
    return result.content
