"""Site model."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .localized import Localized


@dataclass(eq=False)
class Site(Localized):
    """The site being mirrored.

    The first entry of `locales` is the default locale.

    Attributes:
        name: Site name
        locales: Ordered locale codes, default locale first
        subdomain: Engine subdomain
        domains: Extra domains served by the engine
        timezone: Timezone name (engine default when None)
        remote_id: Engine identifier once the site exists remotely
    """
    name: str
    locales: List[str] = field(default_factory=list)
    subdomain: Optional[str] = None
    domains: List[str] = field(default_factory=list)
    timezone: Optional[str] = None
    remote_id: Optional[str] = None

    LOCALIZED_FIELDS = ('seo_title', 'meta_keywords', 'meta_description')

    def __post_init__(self) -> None:
        self._init_translations()
        self.locales = [str(locale) for locale in self.locales]

    @property
    def default_locale(self) -> Optional[str]:
        return self.locales[0] if self.locales else None

    def to_params(self, locale: str) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            'name': self.name,
            'locales': list(self.locales),
            'subdomain': self.subdomain,
            'domains': list(self.domains),
            'timezone': self.timezone,
        }
        for name in self.LOCALIZED_FIELDS:
            params[name] = self.get(name, locale)
        return {key: value for key, value in params.items() if value is not None}
