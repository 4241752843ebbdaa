"""Typed exception hierarchy for CLI-related errors."""

from src.engine_client.errors import SyncError


class CLIError(SyncError):
    """Base exception for all CLI-related errors."""
    pass


class SitePathNotFoundError(CLIError):
    """Raised when the site directory given on the command line does not exist."""

    def __init__(self, site_path: str):
        super().__init__(f"Site directory not found at {site_path}")
        self.site_path = site_path
