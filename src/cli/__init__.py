"""Command-line interface of the mounter.

This package provides the `mounter` CLI tool: `push` mirrors a local site
directory to the engine, `pull` mirrors the engine into a local directory
and `tree` prints the page tree of a local site.
"""

from .sync_command import SyncCommand
from .models import ExitCode, PushSummary
from .errors import CLIError, SitePathNotFoundError

__all__ = [
    'SyncCommand',
    'ExitCode',
    'PushSummary',
    'CLIError',
    'SitePathNotFoundError',
]
