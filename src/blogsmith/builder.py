"""The build runner: read the source tree, run plugins in order, write."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any

from blogsmith.errors import BuildError
from blogsmith.models import BuildReport, FileMap
from blogsmith.plugins.base import Plugin
from blogsmith.reader import read_tree, write_tree

logger = logging.getLogger(__name__)


class Builder:
    """Runs an ordered chain of plugins over a site's files.

    The whole chain runs in memory. Files are only written once every
    plugin has succeeded; the first failure halts the build.

    Args:
        root: Site root. Relative ``source``/``destination`` resolve here.
        source: Directory holding content, relative to ``root``.
        destination: Output directory, relative to ``root``.
        clean: Remove the destination before writing.
        metadata: Initial global metadata (e.g. ``{"site": {...}}``).
    """

    def __init__(
        self,
        root: Path | str,
        *,
        source: Path | str = "src",
        destination: Path | str = "build",
        clean: bool = True,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        self.root = Path(root)
        self.source = self._resolve(source)
        self.destination = self._resolve(destination)
        self.clean = clean
        self.metadata: dict[str, Any] = dict(metadata or {})
        self.plugins: list[Plugin] = []

    def _resolve(self, path: Path | str) -> Path:
        candidate = Path(path)
        return candidate if candidate.is_absolute() else self.root / candidate

    def use(self, plugin: Plugin) -> Builder:
        """Append a plugin to the chain. Returns self for chaining."""
        self.plugins.append(plugin)
        return self

    def read(self) -> FileMap:
        return read_tree(self.source)

    def run(self, files: FileMap) -> FileMap:
        """Run every plugin over ``files`` in order.

        Raises:
            BuildError: Wrapping the first plugin failure.
        """
        for plugin in self.plugins:
            logger.debug("Running %s over %d file(s)", plugin.name, len(files))
            try:
                plugin(files, self)
            except BuildError as exc:
                if exc.plugin is None:
                    raise BuildError(str(exc), plugin=plugin.name) from exc
                raise
            except Exception as exc:
                raise BuildError(str(exc) or type(exc).__name__, plugin=plugin.name) from exc
        return files

    def process(self) -> FileMap:
        """Read and transform the site without writing anything."""
        return self.run(self.read())

    def build(self) -> BuildReport:
        """Process the site and write the result to the destination."""
        started = time.monotonic()
        files = self.read()
        files_read = len(files)
        self.run(files)
        written = write_tree(files, self.destination, clean=self.clean)

        collections = self.metadata.get("collections", {})
        report = BuildReport(
            destination=self.destination,
            files_read=files_read,
            files_written=len(written),
            collections={name: len(items) for name, items in collections.items()},
            redirects=sum(1 for f in files.values() if "redirect" in f),
            elapsed_seconds=round(time.monotonic() - started, 3),
            written=sorted(files),
        )
        logger.info(
            "Built %d file(s) into %s in %.2fs",
            report.files_written,
            report.destination,
            report.elapsed_seconds,
        )
        return report
