"""Site configuration loaded from .blogsmith.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".blogsmith.toml"
CONFIG_SEARCH_PATHS = [Path(".")]
GLOBAL_CONFIG = Path.home() / ".config" / "blogsmith" / "config.toml"


class SiteConfig(BaseModel):
    """[site] section -- free-form metadata exposed to templates as ``site``."""

    model_config = ConfigDict(extra="allow")

    url: str = ""


class BuildSectionConfig(BaseModel):
    """[build] section."""

    source: str = "src"
    destination: str = "build"
    clean: bool = True


class CollectionConfig(BaseModel):
    """A single named collection (e.g. [collections.posts])."""

    pattern: str = ""
    sort_by: str = "date"
    reverse: bool = False
    limit: int | None = None


class MarkdownSectionConfig(BaseModel):
    """[markdown] section."""

    extensions: list[str] = Field(default_factory=lambda: ["tables"])
    highlight: bool = True
    default_language: str = "javascript"


class PermalinksSectionConfig(BaseModel):
    """[permalinks] section."""

    pattern: str = ":date/:title"
    date_format: str = "YYYY/MM/DD"
    relative: bool = False


class ExcerptsSectionConfig(BaseModel):
    """[excerpts] section."""

    enabled: bool = True


class TemplatesSectionConfig(BaseModel):
    """[templates] section."""

    directory: str = "templates"
    in_place: bool = True
    in_place_directory: str = "src"
    in_place_pattern: str = "**/*"
    datetime_format: str = "ddd, DD MMM YYYY HH:mm:ss ZZ"
    partials: dict[str, str] = Field(default_factory=dict)


class DeploySectionConfig(BaseModel):
    """[deploy] section -- mirrors the git subtree publish flow."""

    remote: str = "origin"
    deploy_branch: str = "master"
    source_branch: str = "source"


class BlogsmithConfig(BaseModel):
    """Top-level configuration model for a site build."""

    root: Path = Path(".")
    site: SiteConfig = Field(default_factory=SiteConfig)
    build: BuildSectionConfig = Field(default_factory=BuildSectionConfig)
    collections: dict[str, CollectionConfig] = Field(default_factory=dict)
    markdown: MarkdownSectionConfig = Field(default_factory=MarkdownSectionConfig)
    permalinks: PermalinksSectionConfig = Field(default_factory=PermalinksSectionConfig)
    excerpts: ExcerptsSectionConfig = Field(default_factory=ExcerptsSectionConfig)
    templates: TemplatesSectionConfig = Field(default_factory=TemplatesSectionConfig)
    redirects: dict[str, str] = Field(default_factory=dict)
    deploy: DeploySectionConfig = Field(default_factory=DeploySectionConfig)

    @field_validator("redirects")
    @classmethod
    def _absolute_sources(cls, value: dict[str, str]) -> dict[str, str]:
        for source in value:
            if not source.startswith("/"):
                raise ValueError(f"redirect source must start with '/': {source!r}")
        return value

    def resolve(self, relative: str) -> Path:
        """Resolve a configured path against the site root."""
        path = Path(relative)
        return path if path.is_absolute() else self.root / path

    @property
    def source_dir(self) -> Path:
        return self.resolve(self.build.source)

    @property
    def destination_dir(self) -> Path:
        return self.resolve(self.build.destination)

    @property
    def templates_dir(self) -> Path:
        return self.resolve(self.templates.directory)

    def site_metadata(self) -> dict[str, Any]:
        """Global metadata handed to every template."""
        return {"site": self.site.model_dump()}


def load_config(path: str | Path | None = None) -> BlogsmithConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .blogsmith.toml in CWD
    3. ~/.config/blogsmith/config.toml

    Then overlay environment variables. The directory holding a site
    config file (1 or 2) becomes the site root. The user-wide file (3)
    only supplies defaults, so relative paths stay relative to the CWD.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged BlogsmithConfig.
    """
    data: dict[str, Any] = {}
    root = Path(".")

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
            root = toml_path.parent
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                root = search_dir
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG.exists():
            data = _load_toml(GLOBAL_CONFIG)
            logger.info("Loaded config from %s", GLOBAL_CONFIG)

    data.setdefault("root", root)
    config = BlogsmithConfig.model_validate(data)

    config = _apply_env_vars(config)

    return config


def merge_cli_overrides(config: BlogsmithConfig, **cli_kwargs: object) -> BlogsmithConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).

    Args:
        config: Base config.
        **cli_kwargs: CLI flag values (``source``, ``destination``,
            ``site_url``, ``templates``, ``clean``).

    Returns:
        Updated config with CLI overrides applied.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "source": ("build", "source"),
        "destination": ("build", "destination"),
        "clean": ("build", "clean"),
        "site_url": ("site", "url"),
        "templates": ("templates", "directory"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return BlogsmithConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: BlogsmithConfig) -> BlogsmithConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "BLOGSMITH_SOURCE": ("build", "source"),
        "BLOGSMITH_DESTINATION": ("build", "destination"),
        "BLOGSMITH_SITE_URL": ("site", "url"),
        "BLOGSMITH_TEMPLATES": ("templates", "directory"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    clean_raw = os.environ.get("BLOGSMITH_CLEAN")
    if clean_raw is not None:
        data["build"]["clean"] = clean_raw.lower() in ("true", "1", "yes")

    return BlogsmithConfig.model_validate(data)
