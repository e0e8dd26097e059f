"""blogsmith - static blog builder.

Reads markdown posts with front-matter, groups them into collections,
renders them to HTML at date-based permalinks, applies Jinja2 layouts and
writes redirect stubs for retired URLs.
"""

from blogsmith.builder import Builder
from blogsmith.config import BlogsmithConfig, load_config, merge_cli_overrides
from blogsmith.errors import BlogsmithError, BuildError, DeployError, FrontmatterError
from blogsmith.models import BuildReport, FileMap, SourceFile
from blogsmith.pipeline import build_site, configure_builder

__version__ = "0.3.0"

__all__ = [
    "BlogsmithConfig",
    "BlogsmithError",
    "Builder",
    "BuildError",
    "BuildReport",
    "DeployError",
    "FileMap",
    "FrontmatterError",
    "SourceFile",
    "build_site",
    "configure_builder",
    "load_config",
    "merge_cli_overrides",
]
