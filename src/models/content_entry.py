"""Content entry model."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .locale import resolve_locale


@dataclass(eq=False)
class ContentEntry:
    """One entry of a content type.

    Field values are stored per locale. Non-localized fields are stored
    under every locale they were read in; `value()` falls back to the
    default locale when a locale has no value of its own.
    """
    content_type: str
    slug: str
    label: str = ''
    position: int = 0
    remote_id: Optional[str] = None
    default_locale: Optional[str] = None
    values: Dict[str, Dict[str, Any]] = field(default_factory=dict, repr=False)

    def value(self, name: str, locale: Optional[str] = None) -> Any:
        locale = resolve_locale(locale, name)
        localized = self.values.get(locale, {})
        if name in localized:
            return localized[name]
        if self.default_locale:
            return self.values.get(self.default_locale, {}).get(name)
        return None

    def set_value(self, name: str, value: Any, locale: Optional[str] = None) -> None:
        locale = resolve_locale(locale, name)
        self.values.setdefault(locale, {})[name] = value

    @property
    def translated_in(self) -> List[str]:
        return [locale for locale, values in self.values.items() if values]

    def is_translated_in(self, locale: str) -> bool:
        return bool(self.values.get(str(locale)))
