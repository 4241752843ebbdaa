"""Active locale tracking for localized site resources.

Every localized attribute (page titles, templates, snippet sources, ...)
is stored per locale. Readers and writers pass the locale explicitly; when
they do not, the locale of the surrounding `with_locale` block is used.

The active locale is kept in a ContextVar rather than a module global, so
two threads (or two asyncio tasks) pushing different locales never see
each other's value.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Callable, Iterator, Optional, TypeVar

from src.engine_client.errors import SyncError

T = TypeVar('T')

_current_locale: ContextVar[Optional[str]] = ContextVar('mounter_locale', default=None)


class LocaleNotSetError(SyncError):
    """Raised when a localized value is read without any locale available."""

    def __init__(self, attribute: str):
        super().__init__(
            f"Cannot read localized attribute '{attribute}': no locale given and no active locale"
        )
        self.attribute = attribute


def current_locale() -> Optional[str]:
    """Return the active locale, or None outside of any locale block."""
    return _current_locale.get()


def set_locale(locale: Optional[str]) -> None:
    """Set the active locale for the current context (no automatic restore)."""
    _current_locale.set(str(locale) if locale is not None else None)


@contextmanager
def with_locale(locale: Optional[str]) -> Iterator[Optional[str]]:
    """Temporarily switch the active locale.

    The previous locale is restored when the block exits, whether it
    returns normally or raises.

    Example:
        >>> with with_locale('fr'):
        ...     page.get('title')
    """
    token = _current_locale.set(str(locale) if locale is not None else None)
    try:
        yield current_locale()
    finally:
        _current_locale.reset(token)


def call_with_locale(locale: Optional[str], func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run `func` with `locale` active and return its result."""
    with with_locale(locale):
        return func(*args, **kwargs)


def resolve_locale(locale: Optional[str], attribute: str = 'value') -> str:
    """Return `locale` if given, else the active locale.

    Raises:
        LocaleNotSetError: If neither is available
    """
    resolved = locale if locale is not None else current_locale()
    if resolved is None:
        raise LocaleNotSetError(attribute)
    return str(resolved)
