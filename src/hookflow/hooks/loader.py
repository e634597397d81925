"""Hook content loader: reads markdown bodies for hook definitions."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import frontmatter

from hookflow.hooks.base import HookDefinition, ResolvedHook

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FailedLoad:
    """A hook whose content could not be read."""

    hook: HookDefinition
    error: str


@dataclass
class LoadResult:
    resolved: list[ResolvedHook] = field(default_factory=list)
    failed: list[FailedLoad] = field(default_factory=list)


def _error_text(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class HookContentLoader:
    """Resolves hook content from ``<base_path>/<tag>.md`` or an explicit file.

    Content is cached by normalized absolute path. The cache is never
    invalidated on its own; call ``clear_cache`` after editing content files.
    """

    def __init__(
        self,
        base_path: str | Path,
        cache: bool = True,
        parse_frontmatter: bool = False,
    ) -> None:
        self._base_path = Path(os.path.normpath(Path(base_path).expanduser().absolute()))
        self._cache_enabled = cache
        self._parse_frontmatter = parse_frontmatter
        self._cache: dict[str, tuple[str, dict[str, Any]]] = {}

    @property
    def base_path(self) -> Path:
        return self._base_path

    def resolve_content_path(self, hook: HookDefinition) -> str:
        if hook.content_file:
            path = self._base_path / hook.content_file
        else:
            path = self._base_path / f"{hook.tag}.md"
        return os.path.normpath(path)

    async def load(self, hook: HookDefinition) -> ResolvedHook:
        """Load content for a hook.

        Raises OSError if the content file is missing or unreadable.
        """
        content_path = self.resolve_content_path(hook)

        cached = self._cache.get(content_path) if self._cache_enabled else None
        if cached is not None:
            logger.debug("Cache hit for %s", content_path)
            content, metadata = cached
        else:
            text = await asyncio.to_thread(Path(content_path).read_text, encoding="utf-8")
            content, metadata = self._split(text)
            if self._cache_enabled:
                self._cache[content_path] = (content, metadata)

        return ResolvedHook.from_definition(
            hook, content, content_path=content_path, metadata=metadata
        )

    async def load_all(self, hooks: list[HookDefinition]) -> LoadResult:
        """Load every hook independently. A failing hook never fails the batch."""
        outcomes = await asyncio.gather(
            *(self.load(hook) for hook in hooks), return_exceptions=True
        )

        result = LoadResult()
        for hook, outcome in zip(hooks, outcomes):
            if isinstance(outcome, ResolvedHook):
                result.resolved.append(outcome)
                continue
            if not isinstance(outcome, Exception):
                raise outcome
            logger.warning("Failed to load content for hook %s: %s", hook.id, outcome)
            result.failed.append(FailedLoad(hook=hook, error=_error_text(outcome)))
        return result

    def load_inline(self, hook: HookDefinition, content: str) -> ResolvedHook:
        """Wrap supplied content without touching disk or the cache."""
        return ResolvedHook.from_definition(hook, content)

    def clear_cache(self) -> None:
        self._cache.clear()

    def cache_size(self) -> int:
        return len(self._cache)

    def _split(self, text: str) -> tuple[str, dict[str, Any]]:
        if not self._parse_frontmatter:
            return text, {}
        post = frontmatter.loads(text)
        return post.content, dict(post.metadata)


def create_content_loader(base_path: str | Path, **options: Any) -> HookContentLoader:
    return HookContentLoader(base_path, **options)
