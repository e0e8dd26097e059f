"""Build plugin factory and registry."""

from __future__ import annotations

from typing import Any

from blogsmith.plugins.base import Plugin, match_pattern

PLUGIN_NAMES = ("collections", "markdown", "permalinks", "excerpts", "templates", "redirects")


def create_plugin(name: str, **options: Any) -> Plugin:
    """Create a plugin by name.

    Args:
        name: One of ``PLUGIN_NAMES``.
        **options: Keyword arguments for the plugin's constructor.

    Returns:
        A Plugin instance.

    Raises:
        ValueError: If the name is unknown.
    """
    from blogsmith.plugins.collections import CollectionsPlugin
    from blogsmith.plugins.excerpts import ExcerptsPlugin
    from blogsmith.plugins.markdown import MarkdownPlugin
    from blogsmith.plugins.permalinks import PermalinksPlugin
    from blogsmith.plugins.redirects import RedirectsPlugin
    from blogsmith.plugins.templates import TemplatesPlugin

    factories: dict[str, type[Plugin]] = {
        "collections": CollectionsPlugin,
        "markdown": MarkdownPlugin,
        "permalinks": PermalinksPlugin,
        "excerpts": ExcerptsPlugin,
        "templates": TemplatesPlugin,
        "redirects": RedirectsPlugin,
    }

    if name in factories:
        return factories[name](**options)

    raise ValueError(f"Unknown plugin: {name!r}")


__all__ = ["PLUGIN_NAMES", "Plugin", "create_plugin", "match_pattern"]
