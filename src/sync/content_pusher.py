"""Push of content entries.

Entries are first created or updated without their relationship fields,
since the entries they point to may not exist yet. Entries carrying
relationship values are remembered and, once every writer has run, a
second pass sends only those fields, with target slugs resolved to remote
ids.
"""

import datetime
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from src.engine_client.api_wrapper import APIWrapper
from src.engine_client.errors import EngineError
from src.models.content_entry import ContentEntry
from src.models.content_type import ContentField, ContentType, FieldKind
from src.models.mounting_point import MountingPoint
from src.site_mapper.path_resolver import permalink
from .content_assets import ContentAssetsPusher
from .ledger import Status, SyncReport
from .pages_pusher import remote_id_of

logger = logging.getLogger(__name__)


@dataclass
class DeferredRelationships:
    """(entry, locale) pairs whose relationship fields are pushed last."""
    items: List[Tuple[ContentEntry, str]] = field(default_factory=list)

    def add(self, entry: ContentEntry, locale: str) -> None:
        if (entry, locale) not in self.items:
            self.items.append((entry, locale))

    def __iter__(self) -> Iterator[Tuple[ContentEntry, str]]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


def serialize_value(content_field: ContentField, value: Any, assets: ContentAssetsPusher) -> Any:
    """Convert a non-relationship value to its API form.

    Raises:
        ValueError: If called with a relationship field
    """
    if value is None:
        return None

    kind = content_field.kind
    if kind is FieldKind.STRING or kind is FieldKind.TEXT:
        return assets.replace_content_assets(str(value))
    elif kind is FieldKind.FILE:
        reference = value.get('url') if isinstance(value, dict) else str(value)
        if reference and reference.startswith('/samples/'):
            return assets.resolve(reference) or reference
        return reference
    elif kind is FieldKind.DATE:
        if isinstance(value, (datetime.date, datetime.datetime)):
            return value.isoformat()
        return str(value)
    elif kind is FieldKind.SELECT:
        return str(value)
    elif kind is FieldKind.BELONGS_TO or kind is FieldKind.MANY_TO_MANY:
        raise ValueError(f"Relationship field '{content_field.name}' is pushed in the deferred pass")
    raise ValueError(f"Unsupported field kind {kind!r}")


class ContentEntriesPusher:
    """Creates or updates the entries of every content type.

    Args:
        api: Engine client
        mounting_point: Local site
        report: Status trail of the run
        assets: Resolver for files and asset references in text fields
    """

    def __init__(
        self,
        api: APIWrapper,
        mounting_point: MountingPoint,
        report: SyncReport,
        assets: ContentAssetsPusher
    ):
        self.api = api
        self.mounting_point = mounting_point
        self.report = report
        self.assets = assets
        self.deferred = DeferredRelationships()

    def prepare(self) -> None:
        default_locale = self.mounting_point.default_locale
        for slug in self.mounting_point.content_entries:
            for record in self.api.list_entries(slug, default_locale):
                entry_slug = record.get('_slug') or record.get('slug')
                entry = self.mounting_point.find_entry(slug, str(entry_slug))
                if entry is not None:
                    entry.remote_id = remote_id_of(record)

    def push(self) -> None:
        default_locale = self.mounting_point.default_locale
        for locale in self.mounting_point.locales:
            for slug, entries in sorted(self.mounting_point.content_entries.items()):
                content_type = self.mounting_point.content_types.get(slug)
                if content_type is None:
                    logger.error(f"Entries of unknown content type '{slug}' are not pushed")
                    continue

                for entry in sorted(entries.values(), key=lambda entry: entry.position):
                    if locale != default_locale and not entry.is_translated_in(locale):
                        continue
                    self._push_entry(content_type, entry, locale)

    def _push_entry(self, content_type: ContentType, entry: ContentEntry, locale: str) -> None:
        params = self.entry_params(content_type, entry, locale)
        operation = 'create' if entry.remote_id is None else 'update'
        identifier = f"{content_type.slug}/{entry.slug}"

        try:
            if entry.remote_id is None:
                entry.remote_id = remote_id_of(self.api.create_entry(content_type.slug, params, locale))
            else:
                self.api.update_entry(content_type.slug, entry.remote_id, params, locale)
        except EngineError as e:
            logger.error(f"Failed to {operation} entry '{identifier}' ({locale}): {e}")
            self.report.record('content_entry', identifier, locale, Status.ERROR, operation, str(e))
            return

        self.report.record('content_entry', identifier, locale, Status.SUCCESS, operation)

        relationship_fields = self._relationship_fields_in(content_type, locale)
        if any(entry.value(rel.name, locale) is not None for rel in relationship_fields):
            self.deferred.add(entry, locale)

    def _relationship_fields_in(self, content_type: ContentType, locale: str) -> List[ContentField]:
        """Relationship fields sent in `locale` (unlocalized ones only in the default locale)."""
        default_locale = self.mounting_point.default_locale
        return [
            content_field for content_field in content_type.relationship_fields
            if locale == default_locale or content_field.localized
        ]

    def entry_params(self, content_type: ContentType, entry: ContentEntry, locale: str) -> Dict[str, Any]:
        """Payload of an entry in a locale, relationship fields excluded."""
        params: Dict[str, Any] = {'_slug': entry.slug, '_position': entry.position}
        for content_field in content_type.fields:
            if content_field.kind.is_relationship:
                continue
            value = entry.value(content_field.name, locale)
            if value is not None:
                params[content_field.name] = serialize_value(content_field, value, self.assets)
        return params

    def push_relationships(self) -> None:
        """Second pass: send only the relationship fields of deferred entries."""
        for entry, locale in self.deferred:
            content_type = self.mounting_point.content_types[entry.content_type]
            identifier = f"{content_type.slug}/{entry.slug}"

            if entry.remote_id is None:
                continue

            params = self.relationship_params(content_type, entry, locale)
            if not params:
                continue

            try:
                self.api.update_entry(content_type.slug, entry.remote_id, params, locale)
            except EngineError as e:
                logger.error(f"Failed to update relationships of entry '{identifier}' ({locale}): {e}")
                self.report.record('content_entry', identifier, locale, Status.ERROR, 'relationships', str(e))
                continue
            self.report.record('content_entry', identifier, locale, Status.SUCCESS, 'relationships')

    def relationship_params(self, content_type: ContentType, entry: ContentEntry, locale: str) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        for content_field in self._relationship_fields_in(content_type, locale):
            value = entry.value(content_field.name, locale)
            if value is None:
                continue

            kind = content_field.kind
            if kind is FieldKind.BELONGS_TO:
                params[content_field.name] = self._target_id(content_field, value)
            elif kind is FieldKind.MANY_TO_MANY:
                values = value if isinstance(value, list) else [value]
                params[content_field.name] = [
                    target_id for target_id in
                    (self._target_id(content_field, item) for item in values)
                    if target_id is not None
                ]
        return params

    def _target_id(self, content_field: ContentField, reference: Any) -> Optional[str]:
        target = self.mounting_point.find_entry(content_field.class_name, str(reference))
        if target is None:
            target = self.mounting_point.find_entry(content_field.class_name, permalink(str(reference)))
        if target is None or target.remote_id is None:
            logger.warning(
                f"Entry '{reference}' of '{content_field.class_name}' referenced by field "
                f"'{content_field.name}' has no remote id"
            )
            return None
        return target.remote_id
