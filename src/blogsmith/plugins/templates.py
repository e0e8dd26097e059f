"""Jinja2 rendering: in-place templating and layout wrapping.

Two modes, matching how a site uses them:

- in place: the contents of every matching text file are themselves a
  template (e.g. ``index.html`` looping over ``posts``);
- layout: every file that declares ``template`` in its front-matter is
  wrapped in that layout, which receives the page as ``contents``.

Both modes share the ``datetime`` helper and the named partials, so
``{% include "head" %}`` resolves through the partials table.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2 import (
    BaseLoader,
    Environment,
    TemplateError,
    TemplateNotFound,
    TemplateSyntaxError,
)

from blogsmith.dates import DEFAULT_FORMAT, format_datetime
from blogsmith.errors import BuildError
from blogsmith.models import FileMap, SourceFile
from blogsmith.plugins.base import Plugin, match_pattern
from blogsmith.plugins.permalinks import slugify

if TYPE_CHECKING:
    from blogsmith.builder import Builder

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIXES = ("", ".html", ".jinja", ".j2", ".hbs")


class SiteLoader(BaseLoader):
    """Finds templates in a list of directories.

    Names may omit the extension (``post`` finds ``post.html``) and may be
    partial aliases (``head`` → ``partials/head``).
    """

    def __init__(self, search_path: list[Path], partials: dict[str, str] | None = None) -> None:
        self.search_path = search_path
        self.partials = dict(partials or {})

    def locate(self, name: str) -> Path | None:
        target = self.partials.get(name, name)
        for directory in self.search_path:
            for suffix in TEMPLATE_SUFFIXES:
                candidate = directory / f"{target}{suffix}"
                if candidate.is_file():
                    return candidate
        return None

    def get_source(
        self, environment: Environment, template: str
    ) -> tuple[str, str, Callable[[], bool]]:
        path = self.locate(template)
        if path is None:
            raise TemplateNotFound(template)
        mtime = path.stat().st_mtime
        source = path.read_text(encoding="utf-8")
        return source, str(path), lambda: path.exists() and path.stat().st_mtime == mtime


def create_environment(
    search_path: list[Path],
    *,
    partials: dict[str, str] | None = None,
    datetime_format: str = DEFAULT_FORMAT,
    helpers: dict[str, Callable[..., Any]] | None = None,
) -> Environment:
    """Create the Jinja2 environment shared by both rendering modes."""
    env = Environment(
        loader=SiteLoader(search_path, partials),
        autoescape=False,
        keep_trailing_newline=True,
    )

    def datetime_helper(value: Any = None, fmt: str | None = None) -> str:
        return format_datetime(value, fmt or datetime_format)

    env.globals["datetime"] = datetime_helper
    env.filters["datetime"] = datetime_helper
    env.filters["slugify"] = slugify
    for helper_name, helper in (helpers or {}).items():
        env.globals[helper_name] = helper
        env.filters[helper_name] = helper
    return env


class TemplatesPlugin(Plugin):
    """Renders pages through Jinja2.

    Args:
        directory: Directory searched first for templates and partials.
        in_place: Render file contents as templates instead of applying
            layouts.
        pattern: Glob selecting files for in-place rendering.
        partials: Partial name → template path (without extension).
        fallback_directories: Further directories searched after
            ``directory`` (layouts and partials shared with in-place pages).
        datetime_format: Default format of the ``datetime`` helper.
        helpers: Extra callables exposed as globals and filters.
    """

    def __init__(
        self,
        directory: Path,
        *,
        in_place: bool = False,
        pattern: str = "**/*",
        partials: dict[str, str] | None = None,
        fallback_directories: list[Path] | None = None,
        datetime_format: str = DEFAULT_FORMAT,
        helpers: dict[str, Callable[..., Any]] | None = None,
    ) -> None:
        self.directory = directory
        self.in_place = in_place
        self.pattern = pattern
        self.name = "templates:in-place" if in_place else "templates"
        self.env = create_environment(
            [directory, *(fallback_directories or [])],
            partials=partials,
            datetime_format=datetime_format,
            helpers=helpers,
        )

    def context(self, f: SourceFile, builder: Builder) -> dict[str, Any]:
        return {**builder.metadata, **f.template_context()}

    def __call__(self, files: FileMap, builder: Builder) -> None:
        for path in sorted(files):
            f = files[path]
            if self.in_place:
                if not match_pattern(path, self.pattern) or not f.is_text:
                    continue
                f.contents = self._render_in_place(path, f, builder)
            else:
                layout = f.get("template")
                if not layout:
                    continue
                f.contents = self._render_layout(path, str(layout), f, builder)

    def _render_in_place(self, path: str, f: SourceFile, builder: Builder) -> str:
        try:
            template = self.env.from_string(f.contents)
            return template.render(self.context(f, builder))
        except TemplateSyntaxError as exc:
            raise BuildError(f"{path}: template syntax error on line {exc.lineno}: {exc.message}") from exc
        except TemplateError as exc:
            raise BuildError(f"{path}: {exc}") from exc

    def _render_layout(self, path: str, layout: str, f: SourceFile, builder: Builder) -> str:
        try:
            template = self.env.get_template(layout)
            rendered = template.render(self.context(f, builder))
        except TemplateNotFound as exc:
            raise BuildError(f"{path}: template {exc.name!r} not found in {self.directory}") from exc
        except TemplateSyntaxError as exc:
            raise BuildError(
                f"{path}: syntax error in {exc.filename or layout} line {exc.lineno}: {exc.message}"
            ) from exc
        except TemplateError as exc:
            raise BuildError(f"{path}: {exc}") from exc
        logger.debug("Applied layout %s to %s", layout, path)
        return rendered
