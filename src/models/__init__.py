"""Data model of a mirrored site."""

from .content_asset import ContentAsset
from .content_entry import ContentEntry
from .content_type import ContentField, ContentType, FieldKind
from .locale import (
    LocaleNotSetError,
    call_with_locale,
    current_locale,
    set_locale,
    with_locale,
)
from .mounting_point import MountingPoint
from .page import DEFAULT_POSITION, INDEX_FULLPATH, NOT_FOUND_FULLPATH, Page
from .site import Site
from .snippet import Snippet
from .translation import Translation

__all__ = [
    'ContentAsset',
    'ContentEntry',
    'ContentField',
    'ContentType',
    'FieldKind',
    'LocaleNotSetError',
    'call_with_locale',
    'current_locale',
    'set_locale',
    'with_locale',
    'MountingPoint',
    'DEFAULT_POSITION',
    'INDEX_FULLPATH',
    'NOT_FOUND_FULLPATH',
    'Page',
    'Site',
    'Snippet',
    'Translation',
]
