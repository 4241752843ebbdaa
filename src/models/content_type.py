"""Content type and field schema models.

Only the part of the schema needed to push and pull entries is modelled:
the field kind decides how a value is serialized, and relationship kinds
point to the content type holding the target entries.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class FieldKind(str, Enum):
    """Closed set of content field kinds."""
    STRING = 'string'
    TEXT = 'text'
    FILE = 'file'
    DATE = 'date'
    SELECT = 'select'
    BELONGS_TO = 'belongs_to'
    MANY_TO_MANY = 'many_to_many'

    @property
    def is_relationship(self) -> bool:
        return self in (FieldKind.BELONGS_TO, FieldKind.MANY_TO_MANY)

    @classmethod
    def parse(cls, value: str) -> 'FieldKind':
        """Return the kind named by `value` (case-insensitive).

        Raises:
            ValueError: If the kind is unknown
        """
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            known = ', '.join(kind.value for kind in cls)
            raise ValueError(f"Unknown field type '{value}' (expected one of: {known})")


@dataclass
class ContentField:
    """One field of a content type.

    Attributes:
        name: Field name (key in entries)
        kind: Field kind
        label: Human label
        class_name: Target content type slug for relationship kinds
        select_options: Option names for select fields
        required: Whether the engine requires a value
        localized: Whether the value differs per locale
    """
    name: str
    kind: FieldKind = FieldKind.STRING
    label: Optional[str] = None
    class_name: Optional[str] = None
    select_options: List[str] = field(default_factory=list)
    required: bool = False
    localized: bool = False
    position: int = 0

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            'name': self.name,
            'type': self.kind.value,
            'label': self.label or self.name.replace('_', ' ').capitalize(),
            'required': self.required,
            'localized': self.localized,
            'position': self.position,
        }
        if self.class_name:
            params['class_name'] = self.class_name
        if self.select_options:
            params['select_options'] = [
                {'name': option, 'position': index}
                for index, option in enumerate(self.select_options)
            ]
        return params


@dataclass(eq=False)
class ContentType:
    """A content type (collection of structured entries)."""
    slug: str
    name: str = ''
    description: Optional[str] = None
    label_field_name: Optional[str] = None
    fields: List[ContentField] = field(default_factory=list)
    remote_id: Optional[str] = None

    def find_field(self, name: str) -> Optional[ContentField]:
        for content_field in self.fields:
            if content_field.name == name:
                return content_field
        return None

    @property
    def relationship_fields(self) -> List[ContentField]:
        return [content_field for content_field in self.fields if content_field.kind.is_relationship]

    @property
    def label_field(self) -> Optional[str]:
        if self.label_field_name:
            return self.label_field_name
        return self.fields[0].name if self.fields else None

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            'name': self.name or self.slug,
            'slug': self.slug,
            'fields': [content_field.to_params() for content_field in self.fields],
        }
        if self.description:
            params['description'] = self.description
        if self.label_field_name:
            params['label_field_name'] = self.label_field_name
        return params
