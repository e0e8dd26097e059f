"""Base class for build plugins and the path helpers they share."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import TYPE_CHECKING

from blogsmith.errors import BuildError
from blogsmith.models import FileMap

if TYPE_CHECKING:
    from blogsmith.builder import Builder


class Plugin(ABC):
    """A single stage of the build.

    Plugins mutate the file map (and the builder's global metadata) in
    place. They may rename keys but must keep the ``SourceFile`` objects.
    """

    name: str = "plugin"

    @abstractmethod
    def __call__(self, files: FileMap, builder: Builder) -> None:
        """Run this stage over the file map."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


@lru_cache(maxsize=128)
def _compile_glob(pattern: str) -> re.Pattern[str]:
    parts: list[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(parts) + r"\Z")


def match_pattern(path: str, pattern: str) -> bool:
    """Match a POSIX path against a glob where ``*`` stays within a segment.

    ``**`` crosses directory boundaries, so ``"**/*"`` matches every file
    and ``"posts/*.md"`` matches only direct children of ``posts``.
    """
    return _compile_glob(pattern).match(path) is not None


def rename(files: FileMap, old: str, new: str, *, plugin: str) -> None:
    """Move a file map entry, refusing to clobber another file."""
    if old == new:
        return
    if new in files:
        raise BuildError(f"{old} and an existing file both map to {new}", plugin=plugin)
    files[new] = files.pop(old)
