"""Hook system: registry, content loader and composer."""

from hookflow.hooks.base import (
    ComposedResult,
    FailedHook,
    HookDefinition,
    HookDefinitionInput,
    HookLifecycle,
    HookQuery,
    HookSummary,
    HookType,
    RequirementLevel,
    ResolvedHook,
    SkippedHook,
)
from hookflow.hooks.composer import (
    ComposerOptions,
    HookComposer,
    compose_hooks,
    create_composer,
    order_by_dependencies,
)
from hookflow.hooks.conditions import (
    RequiresConfig,
    RequiresFeatures,
    RequiresProvider,
    RequiresStorage,
)
from hookflow.hooks.errors import CircularDependencyError, DuplicateHookError, HookError
from hookflow.hooks.loader import FailedLoad, HookContentLoader, LoadResult, create_content_loader
from hookflow.hooks.pipeline import HookLoadResult, load_hooks
from hookflow.hooks.registry import HookRegistry, create_hook_registry

__all__ = [
    "CircularDependencyError",
    "ComposedResult",
    "ComposerOptions",
    "DuplicateHookError",
    "FailedHook",
    "FailedLoad",
    "HookComposer",
    "HookContentLoader",
    "HookDefinition",
    "HookDefinitionInput",
    "HookError",
    "HookLifecycle",
    "HookLoadResult",
    "HookQuery",
    "HookRegistry",
    "HookSummary",
    "HookType",
    "LoadResult",
    "RequirementLevel",
    "RequiresConfig",
    "RequiresFeatures",
    "RequiresProvider",
    "RequiresStorage",
    "ResolvedHook",
    "SkippedHook",
    "compose_hooks",
    "create_composer",
    "create_content_loader",
    "create_hook_registry",
    "load_hooks",
    "order_by_dependencies",
]
