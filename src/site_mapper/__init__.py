"""Local representation of a site: paths, templates, configuration and the page tree."""

from .errors import (
    SiteMapperError,
    FilesystemError,
    ConfigError,
    FrontmatterError,
    TreeBuildError,
)
from .site_reader import SiteReader
from .site_writer import SiteWriter
from .tree_builder import BuildResult, TreeBuilder

__all__ = [
    "SiteMapperError",
    "FilesystemError",
    "ConfigError",
    "FrontmatterError",
    "TreeBuildError",
    "SiteReader",
    "SiteWriter",
    "BuildResult",
    "TreeBuilder",
]
