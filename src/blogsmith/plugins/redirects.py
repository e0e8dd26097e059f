"""Write HTML redirect stubs for retired URLs."""

from __future__ import annotations

import html
import json
import logging
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from blogsmith.errors import BuildError
from blogsmith.models import FileMap, SourceFile
from blogsmith.plugins.base import Plugin

if TYPE_CHECKING:
    from blogsmith.builder import Builder

logger = logging.getLogger(__name__)

REDIRECT_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>Redirecting&hellip;</title>
<meta http-equiv="refresh" content="0; url={attr}">
<link rel="canonical" href="{attr}">
<meta name="robots" content="noindex">
<script>window.location.replace({script});</script>
</head>
<body>
<p>This page has moved to <a href="{attr}">{text}</a>.</p>
</body>
</html>
"""


def stub_path(source: str) -> str:
    """File map key for the stub that answers requests to ``source``.

    ``/a/b.html`` → ``a/b.html``; ``/a/b/`` → ``a/b/index.html``;
    ``/a/b`` → ``a/b/index.html``.

    Raises:
        ValueError: If ``source`` is not an absolute URL path.
    """
    if not source.startswith("/"):
        raise ValueError(f"redirect source must start with '/': {source!r}")
    stripped = source.lstrip("/")
    if not stripped or source.endswith("/"):
        return f"{stripped}index.html"
    if PurePosixPath(stripped).suffix:
        return stripped
    return f"{stripped}/index.html"


def render_stub(destination: str) -> str:
    # json.dumps yields a safe JS string literal; "</" is split so the
    # script element cannot be closed early.
    script = json.dumps(destination).replace("</", "<\\/")
    return REDIRECT_TEMPLATE.format(
        attr=html.escape(destination, quote=True),
        text=html.escape(destination, quote=False),
        script=script,
    )


class RedirectsPlugin(Plugin):
    """Adds one stub page per ``old path → new path`` entry.

    Stubs carry ``redirect`` metadata with their target. A stub may not
    replace a real page of the site.
    """

    name = "redirects"

    def __init__(self, redirects: dict[str, str]) -> None:
        self.redirects = dict(redirects)

    def __call__(self, files: FileMap, builder: Builder) -> None:
        for source, destination in self.redirects.items():
            try:
                key = stub_path(source)
            except ValueError as exc:
                raise BuildError(str(exc), plugin=self.name) from exc
            if key in files:
                raise BuildError(
                    f"redirect {source} would overwrite an existing page ({key})",
                    plugin=self.name,
                )
            files[key] = SourceFile(
                raw=render_stub(destination).encode("utf-8"),
                metadata={"redirect": destination},
            )
            logger.debug("Redirect %s -> %s", source, destination)

        logger.info("Wrote %d redirect(s)", len(self.redirects))
