"""Render markdown files to HTML with Pygments-highlighted code blocks."""

from __future__ import annotations

import logging
import re
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

import markdown
from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor

from blogsmith.models import FileMap
from blogsmith.plugins.base import Plugin, rename

if TYPE_CHECKING:
    from blogsmith.builder import Builder

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = (".md", ".markdown")

_FENCE_RE = re.compile(r"^(?P<indent>\s{0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$")


class DefaultLanguagePreprocessor(Preprocessor):
    """Tags fenced code blocks that name no language with a default one."""

    def __init__(self, md: markdown.Markdown, language: str) -> None:
        super().__init__(md)
        self.language = language

    def run(self, lines: list[str]) -> list[str]:
        result: list[str] = []
        open_fence: str | None = None
        for line in lines:
            match = _FENCE_RE.match(line)
            if match is None:
                result.append(line)
                continue
            fence = match.group("fence")
            if open_fence is None:
                open_fence = fence
                if not match.group("info").strip():
                    line = f"{match.group('indent')}{fence} {self.language}"
            elif fence[0] == open_fence[0] and len(fence) >= len(open_fence):
                open_fence = None
            result.append(line)
        return result


class DefaultLanguageExtension(Extension):
    def __init__(self, language: str) -> None:
        self.language = language
        super().__init__()

    def extendMarkdown(self, md: markdown.Markdown) -> None:  # noqa: N802
        # Runs before fenced_code (priority 25).
        md.preprocessors.register(
            DefaultLanguagePreprocessor(md, self.language), "default_code_language", 28
        )


def create_renderer(
    extensions: list[str],
    *,
    highlight: bool = True,
    default_language: str | None = "javascript",
) -> markdown.Markdown:
    """Build a reusable Markdown instance.

    Args:
        extensions: Extra Python-Markdown extensions (e.g. ``"tables"``).
        highlight: Highlight fenced code with Pygments via ``codehilite``.
        default_language: Language assumed for fences without one.
    """
    configured: list[str | Extension] = ["fenced_code", *extensions]
    extension_configs: dict[str, dict[str, object]] = {}
    if highlight:
        configured.append("codehilite")
        extension_configs["codehilite"] = {
            "guess_lang": False,
            "css_class": "highlight",
        }
    if default_language:
        configured.append(DefaultLanguageExtension(default_language))
    return markdown.Markdown(extensions=configured, extension_configs=extension_configs)


class MarkdownPlugin(Plugin):
    """Converts every ``*.md``/``*.markdown`` file into ``*.html``."""

    name = "markdown"

    def __init__(
        self,
        extensions: list[str] | None = None,
        *,
        highlight: bool = True,
        default_language: str | None = "javascript",
    ) -> None:
        self.renderer = create_renderer(
            list(extensions or []),
            highlight=highlight,
            default_language=default_language,
        )

    def render(self, text: str) -> str:
        self.renderer.reset()
        return self.renderer.convert(text)

    def __call__(self, files: FileMap, builder: Builder) -> None:
        for path in sorted(files):
            if not path.endswith(MARKDOWN_SUFFIXES):
                continue
            source = files[path]
            source.contents = self.render(source.contents)
            html_path = str(PurePosixPath(path).with_suffix(".html"))
            rename(files, path, html_path, plugin=self.name)
            logger.debug("Rendered %s -> %s", path, html_path)
