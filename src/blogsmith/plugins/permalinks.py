"""Move HTML pages to clean ``<path>/index.html`` permalinks."""

from __future__ import annotations

import logging
import re
import unicodedata
from datetime import date
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any

from blogsmith.dates import format_datetime
from blogsmith.models import FileMap, SourceFile
from blogsmith.plugins.base import Plugin, rename

if TYPE_CHECKING:
    from blogsmith.builder import Builder

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r":(\w+)")


def slugify(text: str) -> str:
    """Convert text to a URL-friendly slug.

    >>> slugify("ECMAScript 6: Features & Tools")
    'ecmascript-6-features-tools'
    """
    normalized = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower())
    return slug.strip("-")


def own_path(path: str) -> str:
    """Directory-style path for a page that the pattern cannot place.

    ``about.html`` becomes ``about``, ``blog/index.html`` stays ``blog``.
    """
    pure = PurePosixPath(path)
    parent = "" if str(pure.parent) == "." else str(pure.parent)
    if pure.stem == "index":
        return parent
    return f"{parent}/{pure.stem}" if parent else pure.stem


def output_path(permalink: str) -> str:
    return f"{permalink}/index.html" if permalink else "index.html"


class PermalinksPlugin(Plugin):
    """Rewrites page locations from metadata.

    Each ``:key`` in the pattern is replaced with the page's metadata.
    Dates are formatted with ``date_format``; everything else is
    slugified. Pages missing any key keep their own name as a directory.
    The resulting path is stored as ``path`` metadata.

    Args:
        pattern: Pattern such as ``":date/:title"``.
        date_format: Moment-style format for date values.
        relative: Copy sibling non-HTML files next to each moved page.
    """

    name = "permalinks"

    def __init__(
        self,
        pattern: str = ":date/:title",
        *,
        date_format: str = "YYYY/MM/DD",
        relative: bool = False,
    ) -> None:
        self.pattern = pattern
        self.date_format = date_format
        self.relative = relative

    def format_value(self, value: Any) -> str:
        if isinstance(value, date):
            return format_datetime(value, self.date_format)
        if isinstance(value, (list, tuple)):
            return slugify("-".join(str(v) for v in value))
        return slugify(str(value))

    def resolve(self, f: SourceFile) -> str | None:
        """Fill in the pattern from metadata, or ``None`` if a key is missing."""
        keys = _TOKEN_RE.findall(self.pattern)
        if not keys or any(f.get(key) in (None, "") for key in keys):
            return None
        return _TOKEN_RE.sub(lambda m: self.format_value(f[m.group(1)]), self.pattern).strip("/")

    def __call__(self, files: FileMap, builder: Builder) -> None:
        pages = [path for path in sorted(files) if path.endswith(".html")]
        siblings = self._siblings(files) if self.relative else {}

        for path in pages:
            f = files[path]
            permalink = self.resolve(f)
            if permalink is None:
                permalink = own_path(path)
            target = output_path(permalink)
            rename(files, path, target, plugin=self.name)
            f["path"] = permalink
            logger.debug("Permalink %s -> %s", path, target)

            if self.relative and target != path:
                self._copy_siblings(files, siblings.get(str(PurePosixPath(path).parent), []), permalink)

    def _siblings(self, files: FileMap) -> dict[str, list[tuple[str, SourceFile]]]:
        grouped: dict[str, list[tuple[str, SourceFile]]] = {}
        for path, f in files.items():
            if path.endswith(".html"):
                continue
            pure = PurePosixPath(path)
            grouped.setdefault(str(pure.parent), []).append((pure.name, f))
        return grouped

    def _copy_siblings(
        self, files: FileMap, siblings: list[tuple[str, SourceFile]], permalink: str
    ) -> None:
        for name, sibling in siblings:
            copy_path = f"{permalink}/{name}" if permalink else name
            if copy_path not in files:
                files[copy_path] = SourceFile(raw=sibling.raw, metadata=dict(sibling.metadata))
