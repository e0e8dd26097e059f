"""Helpers for parsing YAML front-matter from content files."""

from __future__ import annotations

import contextlib
import logging
from datetime import UTC, date, datetime
from typing import Any

import frontmatter
import yaml

from blogsmith.errors import FrontmatterError

logger = logging.getLogger(__name__)

# Accepted in addition to ISO 8601.
_DATE_FORMATS = ("%Y-%m-%d %H:%M", "%b %d, %Y", "%d %b %Y")


def parse_frontmatter(text: str, *, path: str | None = None) -> tuple[dict[str, Any], str]:
    """Split a document into its front-matter mapping and its body.

    Args:
        text: Document text, with or without a leading ``---`` block.
        path: Source path, used only in error messages.

    Returns:
        Tuple of (metadata dict, body string). Documents without
        front-matter return an empty dict and the text unchanged.

    Raises:
        FrontmatterError: If the front-matter block is not valid YAML or is
            not a mapping.
    """
    handler = frontmatter.detect_format(text, frontmatter.handlers)
    if handler is None:
        return {}, text

    try:
        block, body = handler.split(text.strip())
        loaded = handler.load(block)
    except (yaml.YAMLError, ValueError) as exc:
        raise FrontmatterError(f"invalid front-matter: {exc}", path=path) from exc

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise FrontmatterError(
            f"front-matter must be a mapping, not {type(loaded).__name__}", path=path
        )

    metadata = dict(loaded)
    if "date" in metadata and metadata["date"] is not None:
        metadata["date"] = coerce_datetime(metadata["date"], path=path)

    logger.debug("Parsed front-matter for %s: %s", path or "<text>", sorted(metadata))
    return metadata, body.strip()


def coerce_datetime(value: Any, *, path: str | None = None) -> datetime:
    """Normalise a front-matter date so that all dates compare with each other.

    Plain dates become midnight, naive datetimes are taken as UTC.

    Raises:
        FrontmatterError: If ``value`` is not a recognisable date.
    """
    if isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        result = _parse_date_string(value.strip(), path=path)
    else:
        raise FrontmatterError(f"unsupported date value {value!r}", path=path)

    if result.tzinfo is None:
        result = result.replace(tzinfo=UTC)
    return result


def _parse_date_string(value: str, *, path: str | None) -> datetime:
    with contextlib.suppress(ValueError):
        return datetime.fromisoformat(value)
    for fmt in _DATE_FORMATS:
        with contextlib.suppress(ValueError):
            return datetime.strptime(value, fmt)
    raise FrontmatterError(f"unrecognised date {value!r}", path=path)
