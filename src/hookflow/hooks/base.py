"""Hook model: enums, definitions, resolved hooks and composition results."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from hookflow.hooks.conditions import Condition, normalize_conditions

DEFAULT_NAMESPACE = "hookflow"
DEFAULT_PRIORITY = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HookType(str, enum.Enum):
    """Category of a hook."""

    SESSION = "session"
    ACTION = "action"
    STORAGE = "storage"
    CONFIG = "config"


class HookLifecycle(str, enum.Enum):
    """Phase of the workflow in which a hook is relevant."""

    START = "start"
    RUNNING = "running"
    PROGRESS = "progress"
    CANCEL = "cancel"
    END = "end"


class RequirementLevel(str, enum.Enum):
    """RFC 2119 requirement strength, in composition order."""

    MUST = "MUST"
    SHOULD = "SHOULD"
    MAY = "MAY"


class _HookFields(BaseModel):
    """Fields shared by registration input and registered definitions."""

    tag: str = Field(..., min_length=1)
    type: HookType
    lifecycle: HookLifecycle
    name: str = Field(..., min_length=1)
    requirement_level: RequirementLevel
    description: str | None = None
    content_file: str | None = None
    dependencies: tuple[str, ...] = ()
    conditions: tuple[Condition, ...] = ()
    blocking: bool = False
    session_id: str | None = None
    request_id: str | None = None

    @field_validator("conditions", mode="before")
    @classmethod
    def _normalize_conditions(cls, value: Any) -> Any:
        return normalize_conditions(value)


class HookDefinitionInput(_HookFields):
    """What callers hand to ``HookRegistry.register``.

    ``namespace``, ``priority`` and ``tags`` may be omitted; the registry fills
    in the defaults.
    """

    model_config = ConfigDict(extra="forbid")

    namespace: str | None = None
    priority: int | None = None
    tags: tuple[str, ...] | None = None


class HookDefinition(_HookFields):
    """A registered hook with every default applied.

    The ID is derived from ``namespace:type:lifecycle:tag`` and, like the rest
    of the model, cannot change after construction.
    """

    model_config = ConfigDict(frozen=True)

    namespace: str = Field(default=DEFAULT_NAMESPACE, min_length=1)
    priority: int = DEFAULT_PRIORITY
    tags: tuple[str, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def id(self) -> str:
        return f"{self.namespace}:{self.type.value}:{self.lifecycle.value}:{self.tag}"

    @classmethod
    def from_input(cls, data: HookDefinitionInput | dict[str, Any]) -> HookDefinition:
        """Validate input and apply defaults."""
        if not isinstance(data, HookDefinitionInput):
            data = HookDefinitionInput.model_validate(data)
        fields = data.model_dump()
        for key in ("namespace", "priority", "tags"):
            if fields[key] is None:
                del fields[key]
        return cls.model_validate(fields)

    @property
    def summary(self) -> HookSummary:
        return HookSummary.from_hook(self)


class ResolvedHook(HookDefinition):
    """A hook definition paired with its loaded content."""

    content: str
    content_path: str | None = None
    resolved_at: datetime = Field(default_factory=_utcnow)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_definition(
        cls,
        hook: HookDefinition,
        content: str,
        content_path: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ResolvedHook:
        data = hook.model_dump(exclude={"id"})
        data.update(
            content=content,
            content_path=content_path,
            metadata=dict(metadata or {}),
        )
        return cls.model_validate(data)


class HookQuery(BaseModel):
    """Filters for ``HookRegistry.query``. Every supplied filter must match."""

    model_config = ConfigDict(extra="forbid")

    type: HookType | None = None
    lifecycle: HookLifecycle | None = None
    tags: list[str] | None = None
    provider: str | None = None
    feature: str | None = None
    storage: str | None = None
    config: dict[str, Any] | None = None
    session_id: str | None = None
    request_id: str | None = None


@dataclass(frozen=True)
class HookSummary:
    """Identity of a hook as reported in composition results."""

    id: str
    name: str
    requirement_level: RequirementLevel
    priority: int = DEFAULT_PRIORITY

    @classmethod
    def from_hook(cls, hook: HookDefinition) -> HookSummary:
        return cls(
            id=hook.id,
            name=hook.name,
            requirement_level=hook.requirement_level,
            priority=hook.priority,
        )


@dataclass(frozen=True)
class SkippedHook:
    """A hook left out because its conditions were not met."""

    hook: HookSummary
    reason: str


@dataclass(frozen=True)
class FailedHook:
    """A hook whose content could not be loaded."""

    hook: HookSummary
    error: str


@dataclass
class ComposedResult:
    """Output of a single composition."""

    content: str = ""
    included_hooks: list[HookSummary] = field(default_factory=list)
    skipped_hooks: list[SkippedHook] = field(default_factory=list)
    failed_hooks: list[FailedHook] = field(default_factory=list)
    notices: list[str] = field(default_factory=list)
    blocking_hooks: list[str] = field(default_factory=list)
    composed_at: datetime = field(default_factory=_utcnow)
