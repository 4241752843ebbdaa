"""Translation model."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class Translation:
    """A translation key and its value in each locale.

    Translations are independent of pages: the values are stored as a
    single mapping and pushed in one request, without any locale context.
    """
    key: str
    values: Dict[str, str] = field(default_factory=dict)
    remote_id: Optional[str] = None

    def get(self, locale: str) -> Optional[str]:
        return self.values.get(str(locale))

    def to_params(self) -> Dict[str, Any]:
        return {'key': self.key, 'values': dict(self.values)}
