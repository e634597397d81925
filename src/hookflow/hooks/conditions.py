"""Hook activation conditions as a closed set of tagged variants."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Condition(BaseModel):
    model_config = ConfigDict(frozen=True)


class RequiresProvider(_Condition):
    """Only include the hook when this provider is active."""

    kind: Literal["provider"] = "provider"
    provider: str = Field(..., min_length=1)


class RequiresFeatures(_Condition):
    """Only include the hook when the current feature is one of these."""

    kind: Literal["features"] = "features"
    features: tuple[str, ...] = Field(..., min_length=1)

    @field_validator("features", mode="before")
    @classmethod
    def _single_feature(cls, value: Any) -> Any:
        if isinstance(value, str):
            return (value,)
        return value


class RequiresStorage(_Condition):
    """Only include the hook when the current storage backend is one of these."""

    kind: Literal["storage"] = "storage"
    storage: tuple[str, ...] = Field(..., min_length=1)

    @field_validator("storage", mode="before")
    @classmethod
    def _single_backend(cls, value: Any) -> Any:
        if isinstance(value, str):
            return (value,)
        return value


class RequiresConfig(_Condition):
    """Only include the hook when the supplied config contains these pairs.

    Evaluated only when a config context is supplied with the query.
    """

    kind: Literal["config"] = "config"
    config: dict[str, Any] = Field(default_factory=dict)


Condition = Annotated[
    Union[RequiresProvider, RequiresFeatures, RequiresStorage, RequiresConfig],
    Field(discriminator="kind"),
]


def normalize_conditions(value: Any) -> Any:
    """Accept the mapping shape used in hook definitions and turn it into variants.

    ``{"requires_provider": "git", "requires_config": {"debug": True}}`` becomes
    ``[{"kind": "provider", ...}, {"kind": "config", ...}]``. Lists of variants
    pass through untouched.
    """
    if value is None:
        return []
    if not isinstance(value, Mapping):
        return value
    if "kind" in value:
        return [value]

    conditions: list[dict[str, Any]] = []
    if value.get("requires_provider"):
        conditions.append({"kind": "provider", "provider": value["requires_provider"]})

    features: list[str] = []
    if value.get("requires_feature"):
        features.append(value["requires_feature"])
    features.extend(value.get("requires_features") or [])
    if features:
        conditions.append({"kind": "features", "features": features})

    if value.get("requires_storage"):
        conditions.append({"kind": "storage", "storage": value["requires_storage"]})
    if value.get("requires_config"):
        conditions.append({"kind": "config", "config": dict(value["requires_config"])})

    unknown = set(value) - {
        "requires_provider",
        "requires_feature",
        "requires_features",
        "requires_storage",
        "requires_config",
    }
    if unknown:
        raise ValueError(f"Unknown condition keys: {sorted(unknown)}")
    return conditions


def check_condition(
    condition: Condition,
    *,
    provider: str | None = None,
    feature: str | None = None,
    storage: str | None = None,
    config: Mapping[str, Any] | None = None,
) -> str | None:
    """Evaluate one condition against the query context.

    Returns None when the condition holds, otherwise a human-readable reason.
    """
    if isinstance(condition, RequiresProvider):
        if provider == condition.provider:
            return None
        return f"requires provider: {condition.provider}"

    if isinstance(condition, RequiresFeatures):
        if feature is not None and feature in condition.features:
            return None
        return f"requires feature: {', '.join(condition.features)}"

    if isinstance(condition, RequiresStorage):
        if storage is not None and storage in condition.storage:
            return None
        return f"requires storage: {', '.join(condition.storage)}"

    if isinstance(condition, RequiresConfig):
        if config is None:
            return None
        for key, expected in condition.config.items():
            if key not in config or config[key] != expected:
                pairs = ", ".join(f"{k}={v!r}" for k, v in condition.config.items())
                return f"requires config: {pairs}"
        return None

    raise TypeError(f"Unsupported hook condition: {condition!r}")
