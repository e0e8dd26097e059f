"""Group files into named, sorted collections (e.g. all posts by date)."""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Any

from blogsmith.frontmatter import coerce_datetime
from blogsmith.models import FileMap, SourceFile
from blogsmith.plugins.base import Plugin, match_pattern

if TYPE_CHECKING:
    from blogsmith.builder import Builder
    from blogsmith.config import CollectionConfig

logger = logging.getLogger(__name__)


def _sort_value(value: Any) -> Any:
    if isinstance(value, date):
        return coerce_datetime(value)
    return value


def sort_files(members: list[SourceFile], sort_by: str, *, reverse: bool = False) -> list[SourceFile]:
    """Sort files on a metadata key.

    Files without the key always come after the files that have it,
    whichever direction the keyed files are sorted in.
    """
    keyed = [f for f in members if f.get(sort_by) is not None]
    unkeyed = [f for f in members if f.get(sort_by) is None]
    keyed.sort(key=lambda f: _sort_value(f[sort_by]), reverse=reverse)
    return keyed + unkeyed


class CollectionsPlugin(Plugin):
    """Publishes sorted file lists as global metadata.

    Each collection is available to templates under its own name and in
    the ``collections`` mapping. Members are annotated with ``collection``
    (the names of every collection they belong to) plus ``previous`` and
    ``next`` neighbours in sorted order.
    """

    name = "collections"

    def __init__(self, collections: dict[str, CollectionConfig]) -> None:
        self.collections = collections

    def __call__(self, files: FileMap, builder: Builder) -> None:
        published: dict[str, list[SourceFile]] = builder.metadata.setdefault("collections", {})

        for name, options in self.collections.items():
            members = [
                f
                for path, f in sorted(files.items())
                if (options.pattern and match_pattern(path, options.pattern))
                or name in _declared_collections(f)
            ]
            members = sort_files(members, options.sort_by, reverse=options.reverse)
            if options.limit is not None:
                members = members[: options.limit]

            for index, member in enumerate(members):
                names = _declared_collections(member)
                if name not in names:
                    names.append(name)
                member["collection"] = names
                if index > 0:
                    member["previous"] = members[index - 1]
                if index < len(members) - 1:
                    member["next"] = members[index + 1]

            published[name] = members
            builder.metadata[name] = members
            logger.info("Collection %r: %d file(s)", name, len(members))


def _declared_collections(f: SourceFile) -> list[str]:
    declared = f.get("collection")
    if declared is None:
        return []
    if isinstance(declared, str):
        return [declared]
    return list(declared)
