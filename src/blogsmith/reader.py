"""Read a source tree into a file map and write a file map back to disk."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from blogsmith.errors import BuildError
from blogsmith.frontmatter import parse_frontmatter
from blogsmith.models import FileMap, SourceFile

logger = logging.getLogger(__name__)


def read_file(path: Path, relative: str) -> SourceFile:
    """Read one file, splitting front-matter off text files.

    Binary files keep their bytes and get empty metadata.
    """
    raw = path.read_bytes()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("Treating %s as binary", relative)
        return SourceFile(raw=raw)

    metadata, body = parse_frontmatter(text, path=relative)
    return SourceFile(raw=body.encode("utf-8"), metadata=metadata)


def read_tree(source_dir: Path) -> FileMap:
    """Walk ``source_dir`` and build the file map.

    Hidden files and directories (leading ``.``) are skipped.

    Raises:
        BuildError: If the source directory does not exist.
        FrontmatterError: If any file has unparseable front-matter.
    """
    if not source_dir.is_dir():
        raise BuildError(f"Source directory not found: {source_dir}")

    files: FileMap = {}
    for path in sorted(source_dir.rglob("*")):
        if not path.is_file():
            continue
        relative = path.relative_to(source_dir)
        if any(part.startswith(".") for part in relative.parts):
            continue
        key = relative.as_posix()
        files[key] = read_file(path, key)

    logger.info("Read %d file(s) from %s", len(files), source_dir)
    return files


def write_tree(files: FileMap, destination: Path, *, clean: bool = True) -> list[Path]:
    """Write every file of the map below ``destination``.

    Args:
        files: The processed file map.
        destination: Output directory.
        clean: Remove the destination first so stale pages disappear.

    Returns:
        Paths of the written files, in key order.
    """
    if clean and destination.exists():
        logger.debug("Cleaning %s", destination)
        shutil.rmtree(destination)

    written: list[Path] = []
    for key in sorted(files):
        out_path = destination / key
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(files[key].raw)
        written.append(out_path)

    logger.info("Wrote %d file(s) to %s", len(written), destination)
    return written
