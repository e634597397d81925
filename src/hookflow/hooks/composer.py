"""Hook composer: merges resolved hooks into one ordered document.

Hooks are grouped into RFC 2119 sections (MUST, SHOULD, MAY). Inside a
section, dependencies are placed before their dependents and otherwise hooks
follow priority order (lower first, ties keep input order).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TypeVar

from pydantic import BaseModel, ConfigDict

from hookflow.hooks.base import (
    ComposedResult,
    FailedHook,
    HookDefinition,
    HookSummary,
    RequirementLevel,
    ResolvedHook,
    SkippedHook,
)
from hookflow.hooks.errors import CircularDependencyError

logger = logging.getLogger(__name__)

REQUIREMENT_PREAMBLES: dict[RequirementLevel, str] = {
    RequirementLevel.MUST: "These are absolute requirements. You must follow these instructions.",
    RequirementLevel.SHOULD: (
        "These are recommended actions. Follow unless you have good reason not to."
    ),
    RequirementLevel.MAY: "These are optional. Use your judgment.",
}

RFC2119_REFERENCE = (
    "> The sections above use requirement levels defined in "
    "[RFC 2119](https://www.rfc-editor.org/rfc/rfc2119)."
)

H = TypeVar("H", bound=HookDefinition)

_UNVISITED, _VISITING, _DONE = 0, 1, 2


class ComposerOptions(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    separator: str = "\n\n"
    include_headers: bool = True
    header_format: str = "### {name}"
    group_by_requirement_level: bool = True
    include_preambles: bool = True
    include_rfc2119_reference: bool = True


def order_by_dependencies(hooks: Sequence[H]) -> list[H]:
    """Topologically order hooks so every dependency precedes its dependents.

    Only dependencies present in ``hooks`` create edges; other IDs are ignored.
    Raises CircularDependencyError if the dependencies form a cycle, including
    a hook that depends on itself.
    """
    count = len(hooks)

    def rank(index: int) -> tuple[int, int]:
        return hooks[index].priority, index

    indices_by_id: dict[str, list[int]] = {}
    for index, hook in enumerate(hooks):
        indices_by_id.setdefault(hook.id, []).append(index)

    edges: list[list[int]] = []
    for hook in hooks:
        deps = {dep_index for dep in hook.dependencies for dep_index in indices_by_id.get(dep, [])}
        edges.append(sorted(deps, key=rank))

    state = [_UNVISITED] * count
    path: list[int] = []
    ordered: list[H] = []

    def enter(index: int) -> None:
        if state[index] == _VISITING:
            cycle = path[path.index(index):] + [index]
            raise CircularDependencyError(hooks[index].id, [hooks[i].id for i in cycle])
        state[index] = _VISITING
        path.append(index)

    for root in sorted(range(count), key=rank):
        if state[root] == _DONE:
            continue
        enter(root)
        # Frames are (hook index, position of the next edge to follow).
        stack: list[tuple[int, int]] = [(root, 0)]
        while stack:
            index, pos = stack[-1]
            if pos < len(edges[index]):
                stack[-1] = (index, pos + 1)
                dep_index = edges[index][pos]
                if state[dep_index] != _DONE:
                    enter(dep_index)
                    stack.append((dep_index, 0))
                continue
            stack.pop()
            path.pop()
            state[index] = _DONE
            ordered.append(hooks[index])

    return ordered


class HookComposer:
    """Composes resolved hooks into a single markdown document."""

    def __init__(self, options: ComposerOptions | None = None, **overrides: object) -> None:
        if options is None:
            options = ComposerOptions.model_validate(overrides)
        elif overrides:
            options = options.model_copy(update=overrides)
        self.options = options

    def compose(self, hooks: Sequence[ResolvedHook]) -> ComposedResult:
        """Compose hooks into one document.

        Raises CircularDependencyError before rendering anything if any
        section contains a dependency cycle.
        """
        if not hooks:
            return ComposedResult()

        scopes = [
            (level, order_by_dependencies(members)) for level, members in self._scopes(hooks)
        ]

        parts: list[str] = []
        result = ComposedResult()

        for level, ordered in scopes:
            body = self.options.separator.join(self._render_hook(hook) for hook in ordered)
            if level is None:
                parts.append(body)
            else:
                header = f"## {level.value}"
                if self.options.include_preambles:
                    header += "\n\n" + REQUIREMENT_PREAMBLES[level]
                parts.append(header + "\n\n" + body)

            for hook in ordered:
                result.included_hooks.append(HookSummary.from_hook(hook))
                if hook.blocking:
                    result.blocking_hooks.append(hook.id)

        if self.options.group_by_requirement_level and self.options.include_rfc2119_reference:
            parts.append(RFC2119_REFERENCE)

        result.content = "\n\n".join(parts)
        logger.debug(
            "Composed %d hooks into %d sections", len(result.included_hooks), len(scopes)
        )
        return result

    def compose_with_transparency(
        self,
        resolved: Sequence[ResolvedHook],
        skipped: Sequence[SkippedHook] = (),
        failed: Sequence[FailedHook] = (),
    ) -> ComposedResult:
        """Compose hooks and report the ones that were skipped or failed to load."""
        result = self.compose(resolved)
        result.skipped_hooks = list(skipped)
        result.failed_hooks = list(failed)

        if skipped:
            details = ", ".join(f"{s.hook.name} ({s.reason})" for s in skipped)
            result.notices.append(
                f"{len(skipped)} hook(s) were skipped (conditions not met): {details}"
            )
        if failed:
            details = ", ".join(f"{f.hook.name} ({f.error})" for f in failed)
            result.notices.append(f"{len(failed)} hook(s) failed to load: {details}")

        return result

    def _scopes(
        self, hooks: Sequence[ResolvedHook]
    ) -> list[tuple[RequirementLevel | None, list[ResolvedHook]]]:
        if not self.options.group_by_requirement_level:
            return [(None, list(hooks))]

        scopes: list[tuple[RequirementLevel | None, list[ResolvedHook]]] = []
        for level in RequirementLevel:
            members = [h for h in hooks if h.requirement_level == level]
            if members:
                scopes.append((level, members))
        return scopes

    def _render_hook(self, hook: ResolvedHook) -> str:
        if not self.options.include_headers:
            return hook.content
        header = self.options.header_format.format(
            name=hook.name,
            id=hook.id,
            tag=hook.tag,
            requirement_level=hook.requirement_level.value,
        )
        return f"{header}\n\n{hook.content}"


def create_composer(options: ComposerOptions | None = None, **overrides: object) -> HookComposer:
    return HookComposer(options, **overrides)


def compose_hooks(hooks: Sequence[ResolvedHook]) -> ComposedResult:
    """Compose hooks with default options."""
    return HookComposer().compose(hooks)
