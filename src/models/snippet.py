"""Snippet model."""

from dataclasses import dataclass
from typing import List, Optional

from .localized import Localized


@dataclass(eq=False)
class Snippet(Localized):
    """A reusable template fragment, one source per locale."""
    slug: str
    name: str = ''
    remote_id: Optional[str] = None

    LOCALIZED_FIELDS = ('template', 'template_filepath')

    def __post_init__(self) -> None:
        self._init_translations()

    @property
    def translated_in(self) -> List[str]:
        return [locale for locale, source in self.translations_of('template').items() if source is not None]

    def is_translated_in(self, locale: str) -> bool:
        return self.get('template', locale) is not None

    def set_default_template_for_each_locale(self, default_locale: str, locales: List[str]) -> None:
        """Copy the default locale source into locales that have none."""
        default_template = self.get('template', default_locale)
        if not default_template:
            return
        for locale in locales:
            if locale != default_locale and not self.get('template', locale):
                self.set('template', default_template, locale)
