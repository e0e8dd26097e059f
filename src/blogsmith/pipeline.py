"""Site pipeline -- content files → collections → HTML → permalinks → pages."""

from __future__ import annotations

import logging

from blogsmith.builder import Builder
from blogsmith.config import BlogsmithConfig
from blogsmith.models import BuildReport
from blogsmith.plugins import create_plugin

logger = logging.getLogger(__name__)


def configure_builder(config: BlogsmithConfig) -> Builder:
    """Assemble the plugin chain for a site without running it.

    Order: collections, markdown, permalinks, excerpts, in-place templates,
    layout templates, redirects.
    """
    builder = Builder(
        config.root,
        source=config.build.source,
        destination=config.build.destination,
        clean=config.build.clean,
        metadata=config.site_metadata(),
    )

    if config.collections:
        builder.use(create_plugin("collections", collections=config.collections))

    builder.use(
        create_plugin(
            "markdown",
            extensions=config.markdown.extensions,
            highlight=config.markdown.highlight,
            default_language=config.markdown.default_language or None,
        )
    )
    builder.use(
        create_plugin(
            "permalinks",
            pattern=config.permalinks.pattern,
            date_format=config.permalinks.date_format,
            relative=config.permalinks.relative,
        )
    )
    if config.excerpts.enabled:
        builder.use(create_plugin("excerpts"))

    templates = config.templates
    if templates.in_place:
        builder.use(
            create_plugin(
                "templates",
                directory=config.resolve(templates.in_place_directory),
                in_place=True,
                pattern=templates.in_place_pattern,
                partials=templates.partials,
                fallback_directories=[config.templates_dir],
                datetime_format=templates.datetime_format,
            )
        )
    builder.use(
        create_plugin(
            "templates",
            directory=config.templates_dir,
            partials=templates.partials,
            datetime_format=templates.datetime_format,
        )
    )

    if config.redirects:
        builder.use(create_plugin("redirects", redirects=config.redirects))

    return builder


def build_site(config: BlogsmithConfig) -> BuildReport:
    """Build the site described by ``config``.

    Raises:
        BuildError: If any stage fails; nothing is written in that case.
        FrontmatterError: If a content file has invalid front-matter.
    """
    builder = configure_builder(config)
    logger.info(
        "Building %s -> %s (%d plugin(s))",
        builder.source,
        builder.destination,
        len(builder.plugins),
    )
    return builder.build()
