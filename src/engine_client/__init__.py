"""Client library for the engine REST API.

This package wraps the HTTP API of the remote engine (pages, snippets,
translations, content types, entries, assets and the site itself) behind
typed errors and rate-limit retries.
"""

from .errors import (
    SyncError,
    EngineError,
    InvalidCredentialsError,
    ResourceNotFoundError,
    APIUnreachableError,
    APIAccessError,
    ValidationFailedError,
)

__all__ = [
    "SyncError",
    "EngineError",
    "InvalidCredentialsError",
    "ResourceNotFoundError",
    "APIUnreachableError",
    "APIAccessError",
    "ValidationFailedError",
]
