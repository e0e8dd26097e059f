"""Extract the first paragraph of each page as its ``excerpt``."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup

from blogsmith.models import FileMap
from blogsmith.plugins.base import Plugin

if TYPE_CHECKING:
    from blogsmith.builder import Builder

logger = logging.getLogger(__name__)


def first_paragraph(html: str) -> str:
    """Return the outer HTML of the first ``<p>`` element, or ``""``."""
    soup = BeautifulSoup(html, "html.parser")
    paragraph = soup.find("p")
    if paragraph is None:
        return ""
    return str(paragraph).strip()


class ExcerptsPlugin(Plugin):
    """Sets ``excerpt`` on HTML pages that do not declare one."""

    name = "excerpts"

    def __call__(self, files: FileMap, builder: Builder) -> None:
        for path, f in files.items():
            if not path.endswith(".html") or not f.is_text:
                continue
            if f.get("excerpt"):
                continue
            f["excerpt"] = first_paragraph(f.contents)
            if not f["excerpt"]:
                logger.debug("No paragraph to excerpt in %s", path)
