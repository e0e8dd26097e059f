"""Exception types raised by the build pipeline."""

from __future__ import annotations


class BlogsmithError(Exception):
    """Base class for all blogsmith errors."""


class FrontmatterError(BlogsmithError):
    """A content file carries front-matter that cannot be parsed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class BuildError(BlogsmithError):
    """The build pipeline failed and nothing was written."""

    def __init__(self, message: str, plugin: str | None = None) -> None:
        self.plugin = plugin
        if plugin:
            message = f"[{plugin}] {message}"
        super().__init__(message)


class DeployError(BlogsmithError):
    """A git step of the deploy sequence failed."""

    def __init__(self, command: list[str], stderr: str = "") -> None:
        self.command = command
        self.stderr = stderr
        detail = f": {stderr.strip()[:500]}" if stderr.strip() else ""
        super().__init__(f"Command failed ({' '.join(command)}){detail}")
