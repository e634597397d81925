"""hookflow: composable workflow hooks with dependency-aware composition and tool gating.

Usage:
    from hookflow import HookRegistry, HookContentLoader, HookComposer

    registry = HookRegistry()
    registry.register({"tag": "config", "type": "config", "lifecycle": "start",
                       "name": "Configuration", "requirement_level": "MUST"})
    hooks = registry.query(lifecycle="start")
    loaded = await HookContentLoader("hooks").load_all(hooks)
    document = HookComposer().compose(loaded.resolved).content
"""

__version__ = "0.1.0"

from .hooks import HookComposer, HookContentLoader, HookRegistry
from .workflow import SessionStateTracker, WorkflowStateTracker

__all__ = [
    "HookComposer",
    "HookContentLoader",
    "HookRegistry",
    "SessionStateTracker",
    "WorkflowStateTracker",
]
