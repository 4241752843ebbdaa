"""Pull of a site from the engine into a mounting point.

The engine is queried resource by resource, default locale first. Pages
are listed once in the default locale; a page is then fetched in another
locale only when the engine reports it as translated in that locale.
"""

import logging
from typing import Any, Dict, List, Optional

from src.engine_client.api_wrapper import APIWrapper
from src.engine_client.errors import ResourceNotFoundError
from src.models.content_asset import ContentAsset
from src.models.content_entry import ContentEntry
from src.models.content_type import ContentField, ContentType, FieldKind
from src.models.mounting_point import MountingPoint
from src.models.page import Page
from src.models.site import Site
from src.models.snippet import Snippet
from src.models.translation import Translation
from src.site_mapper.frontmatter_handler import FrontmatterHandler
from src.site_mapper.tree_builder import TreeBuilder
from .content_assets import PULLED_ASSETS_FOLDER, ContentAssetsLocalizer
from .ledger import Status, SyncReport
from .pages_pusher import SEO_ATTRIBUTES, remote_id_of

logger = logging.getLogger(__name__)

# Structural page attributes copied as-is from the default locale record
PAGE_ATTRIBUTES = (
    'handle', 'listed', 'published', 'redirect_url', 'response_type',
    'cache_strategy',
)

# Localized page attributes merged from each locale record
LOCALIZED_PAGE_ATTRIBUTES = ('title', 'slug') + SEO_ATTRIBUTES

# Editable element type holding a file rather than text
EDITABLE_FILE = 'EditableFile'


class PullEngine:
    """Builds a MountingPoint from the engine.

    Args:
        api: Engine client
        data: Also pull content entries (and editable elements)
        report: Status trail of the run

    Example:
        >>> mounting_point = PullEngine(api, data=True).run()
        >>> SiteWriter(mounting_point, './my-site', api.download).write()
    """

    def __init__(self, api: APIWrapper, data: bool = False, report: Optional[SyncReport] = None):
        self.api = api
        self.data = data
        self.report = report if report is not None else SyncReport()
        self.localizer: Optional[ContentAssetsLocalizer] = None

    def run(self) -> MountingPoint:
        """Fetch every resource and build the page tree.

        Raises:
            ResourceNotFoundError: If the engine has no site for these credentials
            EngineError: If a listing request fails
            TreeBuildError: If the engine has no index or 404 page
        """
        mounting_point = MountingPoint(site=self.pull_site())
        self.localizer = ContentAssetsLocalizer(mounting_point, PULLED_ASSETS_FOLDER)

        self.pull_content_assets(mounting_point)
        self.pull_snippets(mounting_point)
        self.pull_content_types(mounting_point)
        if self.data:
            self.pull_content_entries(mounting_point)
        self.pull_pages(mounting_point)
        self.pull_translations(mounting_point)

        result = TreeBuilder(
            mounting_point.locales, mounting_point.default_locale, use_parent_ids=True
        ).build(mounting_point.pages)
        mounting_point.orphans = result.orphans

        logger.info(
            f"Pulled {len(mounting_point.pages)} page(s), {len(mounting_point.snippets)} snippet(s), "
            f"{len(mounting_point.content_assets)} content asset(s)"
        )
        return mounting_point

    # ------------------------------------------------------------------
    # site
    # ------------------------------------------------------------------

    def pull_site(self) -> Site:
        record = self.api.get_current_site()
        if record is None:
            raise ResourceNotFoundError('current_site')

        site = Site(
            name=str(record.get('name') or ''),
            locales=[str(locale) for locale in record.get('locales') or []],
            subdomain=record.get('subdomain'),
            domains=list(record.get('domains') or []),
            timezone=record.get('timezone'),
            remote_id=remote_id_of(record),
        )
        default_locale = site.default_locale
        self._assign_site_seo(site, record, default_locale)

        for locale in site.locales[1:]:
            self._assign_site_seo(site, self.api.get_current_site(locale) or {}, locale)

        self.report.record('site', site.name, default_locale, Status.SUCCESS, 'fetch')
        logger.info(f"Pulling site '{site.name}' (locales: {', '.join(site.locales)})")
        return site

    @staticmethod
    def _assign_site_seo(site: Site, record: Dict[str, Any], locale: str) -> None:
        for name in Site.LOCALIZED_FIELDS:
            if record.get(name) is not None:
                site.set(name, record[name], locale)

    # ------------------------------------------------------------------
    # content assets
    # ------------------------------------------------------------------

    def pull_content_assets(self, mounting_point: MountingPoint) -> None:
        for record in self.api.list_content_assets():
            url = record.get('url')
            if not url:
                continue
            asset = ContentAsset.from_remote_url(str(url), PULLED_ASSETS_FOLDER)
            filename = record.get('full_filename') or record.get('filename')
            if filename:
                asset.local_path = f"/{PULLED_ASSETS_FOLDER}/{filename}"
            asset.size = record.get('size')
            asset.remote_id = remote_id_of(record)
            mounting_point.register_asset(asset)

    # ------------------------------------------------------------------
    # snippets
    # ------------------------------------------------------------------

    def pull_snippets(self, mounting_point: MountingPoint) -> None:
        default_locale = mounting_point.default_locale
        for record in self.api.list_snippets(default_locale):
            slug = str(record.get('slug'))
            snippet = Snippet(slug=slug, name=str(record.get('name') or slug), remote_id=remote_id_of(record))
            snippet.set('template', self.localizer.localize(record.get('template')), default_locale)

            for locale in mounting_point.locales[1:]:
                if snippet.remote_id is None:
                    break
                localized = self.api.get_snippet(snippet.remote_id, locale)
                template = localized.get('template')
                if template is not None:
                    snippet.set('template', self.localizer.localize(template), locale)

            mounting_point.snippets[slug] = snippet
            self.report.record('snippet', slug, None, Status.SUCCESS, 'fetch')

    # ------------------------------------------------------------------
    # content types and entries
    # ------------------------------------------------------------------

    def pull_content_types(self, mounting_point: MountingPoint) -> None:
        for record in self.api.list_content_types():
            slug = str(record.get('slug'))
            fields = []
            for position, field_record in enumerate(record.get('fields') or []):
                content_field = self._content_field(slug, field_record, position)
                if content_field is not None:
                    fields.append(content_field)

            mounting_point.content_types[slug] = ContentType(
                slug=slug,
                name=str(record.get('name') or slug),
                description=record.get('description'),
                label_field_name=record.get('label_field_name'),
                fields=fields,
                remote_id=remote_id_of(record),
            )
            self.report.record('content_type', slug, None, Status.SUCCESS, 'fetch')

    @staticmethod
    def _content_field(slug: str, record: Dict[str, Any], position: int) -> Optional[ContentField]:
        name = str(record.get('name'))
        try:
            kind = FieldKind.parse(record.get('type', 'string'))
        except ValueError as e:
            logger.warning(f"Skipping field '{name}' of content type '{slug}': {e}")
            return None

        select_options = [
            str(option.get('name')) if isinstance(option, dict) else str(option)
            for option in record.get('select_options') or []
        ]
        return ContentField(
            name=name,
            kind=kind,
            label=record.get('label'),
            class_name=record.get('class_name'),
            select_options=select_options,
            required=bool(record.get('required', False)),
            localized=bool(record.get('localized', False)),
            position=int(record.get('position', position)),
        )

    def pull_content_entries(self, mounting_point: MountingPoint) -> None:
        default_locale = mounting_point.default_locale
        for slug, content_type in mounting_point.content_types.items():
            for position, record in enumerate(self.api.list_entries(slug, default_locale)):
                entry_slug = str(record.get('_slug') or record.get('slug'))
                label_field = content_type.label_field
                entry = ContentEntry(
                    content_type=slug,
                    slug=entry_slug,
                    label=str(record.get('_label') or record.get(label_field) or entry_slug),
                    position=int(record.get('_position', position)),
                    remote_id=remote_id_of(record),
                    default_locale=default_locale,
                )
                self._assign_entry_values(content_type, entry, record, default_locale)

                for locale in mounting_point.locales[1:]:
                    if entry.remote_id is None or not any(f.localized for f in content_type.fields):
                        break
                    localized = self.api.get_entry(slug, entry.remote_id, locale)
                    self._assign_entry_values(content_type, entry, localized, locale, localized_only=True)

                mounting_point.add_entry(entry)
            self.report.record('content_type', slug, None, Status.SUCCESS, 'fetch entries')

    def _assign_entry_values(
        self,
        content_type: ContentType,
        entry: ContentEntry,
        record: Dict[str, Any],
        locale: str,
        localized_only: bool = False
    ) -> None:
        for content_field in content_type.fields:
            if localized_only and not content_field.localized:
                continue
            value = record.get(content_field.name)
            if value is None:
                continue

            kind = content_field.kind
            if kind is FieldKind.STRING or kind is FieldKind.TEXT:
                value = self.localizer.localize(str(value))
            elif kind is FieldKind.FILE:
                url = value.get('url') if isinstance(value, dict) else str(value)
                value = self.localizer.register(url) if url else None

            if value is not None:
                entry.set_value(content_field.name, value, locale)

    # ------------------------------------------------------------------
    # pages
    # ------------------------------------------------------------------

    def pull_pages(self, mounting_point: MountingPoint) -> None:
        default_locale = mounting_point.default_locale

        for record in self.api.list_pages(default_locale):
            page = self._build_page(record, default_locale)
            translated_in = [str(locale) for locale in record.get('translated_in') or [default_locale]]
            page.remote_translated_in = set(translated_in)

            for locale in mounting_point.locales[1:]:
                if locale not in translated_in or page.remote_id is None:
                    continue
                localized = self.api.get_page(page.remote_id, locale)
                self._assign_localized_page(page, localized, locale)

            mounting_point.add_page(page)
            self.report.record('page', page.fullpath, None, Status.SUCCESS, 'fetch')

    def _build_page(self, record: Dict[str, Any], default_locale: str) -> Page:
        content_type = record.get('content_type') or record.get('target_klass_slug')
        page = Page(
            fullpath=str(record.get('fullpath')),
            remote_id=remote_id_of(record),
            parent_id=record.get('parent_id'),
            position=int(record.get('position') or 0),
            templatized=bool(record.get('templatized', False)),
            content_type=str(content_type) if content_type else None,
        )
        for name in PAGE_ATTRIBUTES:
            if record.get(name) is not None:
                setattr(page, name, record[name])

        self._assign_localized_page(page, record, default_locale)
        page.layout = FrontmatterHandler.extract_layout(page.get('raw_template', default_locale))
        return page

    def _assign_localized_page(self, page: Page, record: Dict[str, Any], locale: str) -> None:
        for name in LOCALIZED_PAGE_ATTRIBUTES:
            if record.get(name) is not None:
                page.set(name, record[name], locale)

        if self.data and record.get('editable_elements'):
            page.set('editable_elements', self.editable_elements(record['editable_elements']), locale)

        page.set_template(self.localizer.localize(record.get('raw_template')) or '', locale)

    def editable_elements(self, records: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Keep block, slug and content of each element as {'block/slug': content}."""
        elements: Dict[str, Any] = {}
        for record in records:
            slug = record.get('slug')
            content = record.get('content')
            if not slug or content is None:
                continue

            if record.get('type') == EDITABLE_FILE:
                content = self.localizer.register(str(content))
            elif isinstance(content, str):
                content = self.localizer.localize(content)

            block = record.get('block')
            elements[f"{block}/{slug}" if block else str(slug)] = content
        return elements

    # ------------------------------------------------------------------
    # translations
    # ------------------------------------------------------------------

    def pull_translations(self, mounting_point: MountingPoint) -> None:
        for record in self.api.list_translations():
            key = str(record.get('key'))
            values = {str(locale): value for locale, value in (record.get('values') or {}).items()}
            mounting_point.translations[key] = Translation(key=key, values=values, remote_id=remote_id_of(record))
