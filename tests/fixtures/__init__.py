"""Test fixtures for mounter tests.

This module provides sample site directories (config, page templates,
snippets, content types and entries) written to temporary directories.
"""

from .sample_sites import (
    SITE_CONFIG,
    SIMPLE_SITE,
    LAYOUT_SITE,
    LAYOUT_CYCLE_SITE,
    CONTENT_SITE,
    write_site,
)

__all__ = [
    "SITE_CONFIG",
    "SIMPLE_SITE",
    "LAYOUT_SITE",
    "LAYOUT_CYCLE_SITE",
    "CONTENT_SITE",
    "write_site",
]
