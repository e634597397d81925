"""Configuration management with TOML loading."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from hookflow.hooks.base import HookDefinitionInput
from hookflow.hooks.composer import ComposerOptions, HookComposer
from hookflow.hooks.loader import HookContentLoader
from hookflow.hooks.registry import HookRegistry
from hookflow.workflow.session import SessionStateTracker
from hookflow.workflow.state import BlockingHookDef, WorkflowStateTracker

DEFAULT_CONFIG_DIR = ".hookflow"
DEFAULT_CONFIG_FILE = "config.toml"


class BlockingHookConfig(BaseModel):
    """A ``[[workflow.blocking]]`` entry."""

    hook_id: str = Field(..., min_length=1)
    tool_prefix: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    block_message: str = "Workflow requirement not met"

    def to_definition(self) -> BlockingHookDef:
        return BlockingHookDef(
            hook_id=self.hook_id,
            tool_prefix=self.tool_prefix,
            name=self.name,
            block_message=self.block_message,
        )


@dataclass
class SessionGateConfig:
    init_tools: list[str] = field(default_factory=lambda: ["session_init"])
    requires_init: list[str] = field(default_factory=list)
    exempt_tools: list[str] = field(default_factory=lambda: ["server_info"])
    transitions: dict[str, str] | None = None


@dataclass
class Settings:
    content_dir: str = "hooks"
    cache: bool = True
    parse_frontmatter: bool = False
    composer: ComposerOptions = field(default_factory=ComposerOptions)
    hooks: list[HookDefinitionInput] = field(default_factory=list)
    blocking: list[BlockingHookConfig] = field(default_factory=list)
    session: SessionGateConfig = field(default_factory=SessionGateConfig)
    working_directory: str = field(default_factory=lambda: os.getcwd())

    @property
    def content_path(self) -> Path:
        path = Path(self.content_dir).expanduser()
        if not path.is_absolute():
            path = Path(self.working_directory) / path
        return path

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> "Settings":
        """Load settings from TOML. A missing file yields the defaults.

        Relative paths in the file resolve against the project root, the
        directory that holds ``.hookflow/``.
        """
        if config_path is None:
            config_path = Path(os.getcwd()) / DEFAULT_CONFIG_DIR / DEFAULT_CONFIG_FILE

        config_path = Path(config_path)
        raw: dict[str, Any] = {}

        if config_path.exists():
            with open(config_path, "rb") as f:
                raw = tomllib.load(f)

        root = config_path.absolute().parent
        if root.name == DEFAULT_CONFIG_DIR:
            root = root.parent
        raw.setdefault("working_directory", str(root))
        return cls._from_dict(raw)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Settings":
        hooks_data = data.get("hooks", {})
        definitions = [HookDefinitionInput(**h) for h in hooks_data.get("definitions", [])]

        composer = ComposerOptions(**data.get("composer", {}))

        workflow = data.get("workflow", {})
        blocking = [BlockingHookConfig(**b) for b in workflow.get("blocking", [])]

        session_data = data.get("session", {})
        session = SessionGateConfig(
            init_tools=session_data.get("init_tools", ["session_init"]),
            requires_init=session_data.get("requires_init", []),
            exempt_tools=session_data.get("exempt_tools", ["server_info"]),
            transitions=session_data.get("transitions"),
        )

        return cls(
            content_dir=hooks_data.get("content_dir", "hooks"),
            cache=hooks_data.get("cache", True),
            parse_frontmatter=hooks_data.get("parse_frontmatter", False),
            composer=composer,
            hooks=definitions,
            blocking=blocking,
            session=session,
            working_directory=data.get("working_directory", os.getcwd()),
        )

    def build_registry(self) -> HookRegistry:
        registry = HookRegistry()
        registry.register_all(self.hooks)
        return registry

    def build_loader(self) -> HookContentLoader:
        return HookContentLoader(
            self.content_path,
            cache=self.cache,
            parse_frontmatter=self.parse_frontmatter,
        )

    def build_composer(self) -> HookComposer:
        return HookComposer(self.composer)

    def build_workflow_tracker(self) -> WorkflowStateTracker:
        tracker = WorkflowStateTracker()
        tracker.register_blocking_hooks(b.to_definition() for b in self.blocking)
        return tracker

    def build_session_tracker(self) -> SessionStateTracker:
        return SessionStateTracker(
            init_tools=self.session.init_tools,
            requires_init=self.session.requires_init,
            transition_triggers=self.session.transitions,
            exempt_tools=self.session.exempt_tools,
        )
