"""Typed exception hierarchy for engine API errors.

This module defines the root SyncError and the exceptions raised by the
engine client. All of them carry a descriptive message with enough context
(endpoint, resource, attribute errors) to debug a failed request.
"""

from typing import Dict, List, Optional, Union


class SyncError(Exception):
    """Base exception for all mounter errors.

    Use this to catch any application-level error from the sync tool.
    """
    pass


class EngineError(SyncError):
    """Base exception for all engine API errors."""
    pass


class InvalidCredentialsError(EngineError):
    """Raised when credentials are missing or the engine refuses them."""

    def __init__(self, user: str, endpoint: str):
        super().__init__(
            f"Credentials are invalid (user: {user}, endpoint: {endpoint})"
        )
        self.user = user
        self.endpoint = endpoint


class ResourceNotFoundError(EngineError):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource: str):
        super().__init__(f"Resource {resource} not found")
        self.resource = resource


class APIUnreachableError(EngineError):
    """Raised when the engine API is not available or unreachable."""

    def __init__(self, endpoint: str):
        super().__init__(f"API is not available at {endpoint}")
        self.endpoint = endpoint


class APIAccessError(EngineError):
    """Raised when API access fails after retries or due to access restrictions."""

    def __init__(self, message: str = "Engine API failure (after 3 retries)"):
        super().__init__(message)


class ValidationFailedError(EngineError):
    """Raised when the engine rejects a payload (HTTP 422).

    Attributes:
        resource: Resource path of the request
        errors: Attribute name -> list of messages returned by the engine
    """

    def __init__(self, resource: str, errors: Optional[Dict[str, Union[str, List[str]]]] = None):
        self.resource = resource
        self.errors: Dict[str, List[str]] = {}
        for attribute, messages in (errors or {}).items():
            if isinstance(messages, (list, tuple)):
                self.errors[attribute] = [str(message) for message in messages]
            else:
                self.errors[attribute] = [str(messages)]

        details = '; '.join(
            f"{attribute} => {', '.join(messages)}"
            for attribute, messages in self.errors.items()
        )
        message = f"Validation failed for {resource}"
        if details:
            message += f": {details}"
        super().__init__(message)
