"""Exceptions aborting a push run."""

from typing import List, Optional

from src.engine_client.errors import SyncError


class PushError(SyncError):
    """Base exception for fatal push errors."""
    pass


class PreconditionError(PushError):
    """Raised when a page is about to be created while its parent has no remote id.

    This means the push order itself is broken, so the run stops.
    """

    def __init__(self, fullpath: str, parent_fullpath: Optional[str]):
        super().__init__(
            f"Cannot create page '{fullpath}': parent page '{parent_fullpath}' has no remote id"
        )
        self.fullpath = fullpath
        self.parent_fullpath = parent_fullpath


class LocaleMismatchError(PushError):
    """Raised when the local locales do not match the ones of the remote site."""

    def __init__(self, message: str, local_locales: List[str], remote_locales: List[str]):
        super().__init__(f"{message}. Use the force option in order to force your locale settings.")
        self.local_locales = list(local_locales)
        self.remote_locales = list(remote_locales)
