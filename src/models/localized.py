"""Per-locale attribute storage shared by localized site resources."""

from typing import Any, Dict, Optional, Set

from .locale import resolve_locale


class Localized:
    """Mixin storing a set of attributes independently for each locale.

    Subclasses list their localized attribute names in LOCALIZED_FIELDS and
    must call `_init_translations()` from their constructor (or
    `__post_init__` for dataclasses).
    """

    LOCALIZED_FIELDS: tuple = ()

    def _init_translations(self) -> None:
        self._translations: Dict[str, Dict[str, Any]] = {}

    def get(self, name: str, locale: Optional[str] = None, default: Any = None) -> Any:
        """Read a localized attribute in `locale` (or the active locale)."""
        self._check_field(name)
        locale = resolve_locale(locale, name)
        return self._translations.get(locale, {}).get(name, default)

    def set(self, name: str, value: Any, locale: Optional[str] = None) -> None:
        """Write a localized attribute in `locale` (or the active locale)."""
        self._check_field(name)
        locale = resolve_locale(locale, name)
        self._translations.setdefault(locale, {})[name] = value

    def has(self, name: str, locale: Optional[str] = None) -> bool:
        """Tell if the attribute holds a non-blank value in the locale."""
        value = self.get(name, locale)
        if value is None:
            return False
        if isinstance(value, str):
            return value != ''
        return True

    def translations_of(self, name: str) -> Dict[str, Any]:
        """Return the locale -> value mapping of one attribute."""
        self._check_field(name)
        return {
            locale: values[name]
            for locale, values in self._translations.items()
            if name in values
        }

    def locales_with_content(self) -> Set[str]:
        """Locales in which at least one localized attribute is set."""
        return {
            locale for locale, values in self._translations.items()
            if any(value not in (None, '') for value in values.values())
        }

    def assign(self, attributes: Dict[str, Any], locale: Optional[str] = None) -> None:
        """Bulk-assign attributes; localized names go to the locale, others to the object."""
        for name, value in attributes.items():
            if name in self.LOCALIZED_FIELDS:
                self.set(name, value, locale)
            elif hasattr(self, name) and not name.startswith('_'):
                setattr(self, name, value)

    def _check_field(self, name: str) -> None:
        if name not in self.LOCALIZED_FIELDS:
            raise AttributeError(
                f"{type(self).__name__} has no localized attribute '{name}'"
            )
