"""Typed exception hierarchy for local site errors.

This module defines the exceptions raised while reading, building and
writing the local representation of a site. All of them inherit from
SiteMapperError and carry the offending path or field.
"""

from typing import List, Optional

from src.engine_client.errors import SyncError


class SiteMapperError(SyncError):
    """Base exception for all local site errors."""
    pass


class FilesystemError(SiteMapperError):
    """Raised when filesystem operations fail (read, write, permissions, etc)."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Filesystem operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason


class ConfigError(SiteMapperError):
    """Raised when site configuration validation fails."""

    def __init__(self, message: str, config_field: Optional[str] = None):
        if config_field:
            full_message = f"Configuration error in field '{config_field}': {message}"
        else:
            full_message = f"Configuration error: {message}"
        super().__init__(full_message)
        self.config_field = config_field
        self.original_message = message


class FrontmatterError(SiteMapperError):
    """Raised when YAML front matter parsing or validation fails."""

    def __init__(self, file_path: str, message: str):
        super().__init__(
            f"Frontmatter error in {file_path}: {message}"
        )
        self.file_path = file_path
        self.message = message


class TreeBuildError(SiteMapperError):
    """Raised when the page tree cannot be built (missing root, runaway depth)."""

    def __init__(self, message: str, fullpaths: Optional[List[str]] = None):
        super().__init__(f"Cannot build the page tree: {message}")
        self.fullpaths = list(fullpaths or [])
