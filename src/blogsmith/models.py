"""Data models shared by the reader, the builder and the plugins.

``SourceFile`` is the unit that flows through the pipeline. The file map
(``FileMap``) keys each one by its POSIX path relative to the source
directory. Plugins rename keys but never replace the ``SourceFile`` objects,
so references held in collections stay valid until the files are written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


@dataclass(eq=False, repr=False)
class SourceFile:
    """One file of the site: raw bytes plus mutable metadata.

    Metadata keys are readable as items and, from templates, as attributes
    (Jinja falls back to item lookup), so ``post.title`` and
    ``post.contents`` both work.
    """

    raw: bytes
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_text(self) -> bool:
        try:
            self.raw.decode("utf-8")
        except UnicodeDecodeError:
            return False
        return True

    @property
    def contents(self) -> str:
        return self.raw.decode("utf-8")

    @contents.setter
    def contents(self, value: str) -> None:
        self.raw = value.encode("utf-8")

    def get(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    def __getitem__(self, key: str) -> Any:
        if key == "contents":
            return self.contents
        return self.metadata[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.metadata[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self.metadata

    def template_context(self) -> dict[str, Any]:
        """Metadata plus decoded contents, ready to hand to a template."""
        context = dict(self.metadata)
        context["contents"] = self.contents
        return context

    def __repr__(self) -> str:
        title = self.metadata.get("title")
        label = f" title={title!r}" if title else ""
        return f"<SourceFile{label} bytes={len(self.raw)}>"


FileMap = dict[str, SourceFile]


class BuildReport(BaseModel):
    """Summary of a finished build."""

    destination: Path
    files_read: int = 0
    files_written: int = 0
    collections: dict[str, int] = Field(default_factory=dict)
    redirects: int = 0
    elapsed_seconds: float = 0.0
    written: list[str] = Field(default_factory=list)
