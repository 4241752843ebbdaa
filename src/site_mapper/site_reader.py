"""Reads a local site directory into a mounting point.

Layout of a site directory:

    config/site.yml, config/translations.yml
    app/views/pages/**/*.liquid      one template per page and locale
    app/views/snippets/*.liquid      one template per snippet and locale
    app/content_types/*.yml          content type schemas
    data/*.yml                       content entries, one file per content type
    public/samples/**                content assets referenced by templates
"""

import logging
import os
from typing import Any, Dict, List, Optional

from src.models.content_entry import ContentEntry
from src.models.content_type import ContentField, ContentType, FieldKind
from src.models.mounting_point import MountingPoint
from src.models.page import DEFAULT_POSITION, Page
from src.models.snippet import Snippet
from .config_loader import ConfigLoader
from .errors import ConfigError, FilesystemError
from .frontmatter_handler import FrontmatterHandler
from .path_resolver import filepath_locale, filepath_to_fullpath, humanize, permalink
from .tree_builder import TreeBuilder

logger = logging.getLogger(__name__)

TEMPLATE_EXTENSIONS = ('.liquid', '.haml')

# Maximum template size to prevent memory exhaustion
MAX_FILE_SIZE = 10 * 1024 * 1024

# Front matter keys stored on the page itself rather than per locale
PAGE_STRUCTURAL_ATTRIBUTES = (
    'handle', 'listed', 'published', 'redirect_url', 'response_type',
    'cache_strategy', 'position',
)


class SiteReader:
    """Builds a MountingPoint from a site directory.

    Example:
        >>> mounting_point = SiteReader('./my-site').read()
        >>> mounting_point.index.children
        [Page(fullpath='about-us', depth=1, position=100)]
    """

    def __init__(self, site_path: str):
        self.site_path = site_path
        self.pages_dir = os.path.join(site_path, 'app', 'views', 'pages')
        self.snippets_dir = os.path.join(site_path, 'app', 'views', 'snippets')
        self.content_types_dir = os.path.join(site_path, 'app', 'content_types')
        self.data_dir = os.path.join(site_path, 'data')

    def read(self, build_tree: bool = True) -> MountingPoint:
        """Read every resource of the site.

        Args:
            build_tree: Attach the pages to each other (disable to inspect
                the flat page collection)

        Raises:
            ConfigError: If the site configuration is missing or invalid
            FilesystemError: If a file cannot be read
            FrontmatterError: If a template header is malformed
            TreeBuildError: If index or 404 is missing
        """
        site_config = ConfigLoader.load_site(self.site_path)
        mounting_point = MountingPoint(site=site_config.site, path=self.site_path)

        logger.info(f"Reading site from {self.site_path} (locales: {', '.join(mounting_point.locales)})")

        mounting_point.content_types = self.read_content_types()
        for entry in self.read_content_entries(mounting_point):
            mounting_point.add_entry(entry)
        mounting_point.snippets = self.read_snippets(mounting_point.locales, mounting_point.default_locale)
        mounting_point.pages = self.read_pages(mounting_point)
        self._apply_pages_config(mounting_point, site_config.pages)
        mounting_point.translations = ConfigLoader.load_translations(self.site_path)

        if build_tree:
            result = TreeBuilder(mounting_point.locales, mounting_point.default_locale).build(mounting_point.pages)
            mounting_point.orphans = result.orphans

        logger.debug(
            f"Read {len(mounting_point.pages)} page(s), {len(mounting_point.snippets)} snippet(s), "
            f"{len(mounting_point.content_types)} content type(s), "
            f"{len(mounting_point.translations)} translation(s)"
        )
        return mounting_point

    # ------------------------------------------------------------------
    # files
    # ------------------------------------------------------------------

    def _read_file(self, file_path: str) -> str:
        try:
            if os.path.getsize(file_path) > MAX_FILE_SIZE:
                raise FilesystemError(
                    file_path,
                    'read',
                    f'File size exceeds maximum allowed size ({MAX_FILE_SIZE // (1024 * 1024)} MB)'
                )
            with open(file_path, 'r', encoding='utf-8') as f:
                return f.read()
        except FilesystemError:
            raise
        except OSError as e:
            raise FilesystemError(file_path, 'read', str(e))

    def _scan_pages_dir(self) -> List[str]:
        """Directories and templates below the pages directory, sorted by path."""
        entries = []
        for dirpath, dirnames, filenames in os.walk(self.pages_dir):
            for dirname in dirnames:
                entries.append(os.path.join(dirpath, dirname))
            for filename in filenames:
                if filename.endswith(TEMPLATE_EXTENSIONS):
                    entries.append(os.path.join(dirpath, filename))
        return sorted(entries)

    # ------------------------------------------------------------------
    # pages
    # ------------------------------------------------------------------

    def read_pages(self, mounting_point: MountingPoint) -> Dict[str, Page]:
        """Create one page per template (or directory) below app/views/pages.

        Sibling positions restart at DEFAULT_POSITION in each directory and
        follow the sorted file names.
        """
        if not os.path.isdir(self.pages_dir):
            raise FilesystemError(self.pages_dir, 'read', 'Pages directory not found')

        pages: Dict[str, Page] = {}
        position = DEFAULT_POSITION
        last_dirname: Optional[str] = None
        locales = mounting_point.locales
        default_locale = mounting_point.default_locale

        for file_path in self._scan_pages_dir():
            dirname = os.path.dirname(file_path)
            if dirname != last_dirname:
                position, last_dirname = DEFAULT_POSITION, dirname

            page = self._add_page(pages, file_path, position, default_locale)

            if os.path.isdir(file_path):
                continue

            locale = filepath_locale(file_path, locales, default_locale)
            if locale is None:
                logger.warning(f"Unknown locale in the '{os.path.basename(file_path)}' file, skipping it")
            else:
                self._set_attributes_from_header(page, file_path, locale, mounting_point)

            position += 1

        return pages

    def _add_page(self, pages: Dict[str, Page], file_path: str, position: int, default_locale: str) -> Page:
        fullpath = filepath_to_fullpath(file_path, self.pages_dir)

        if fullpath not in pages:
            page = Page(fullpath=fullpath, position=position, filepath=os.path.abspath(file_path))
            page.set('title', humanize(os.path.basename(fullpath)), default_locale)
            if os.path.isdir(file_path):
                page.set_template('', default_locale)
            pages[fullpath] = page

        return pages[fullpath]

    def _set_attributes_from_header(
        self,
        page: Page,
        file_path: str,
        locale: str,
        mounting_point: MountingPoint
    ) -> None:
        attributes, source = FrontmatterHandler.parse(file_path, self._read_file(file_path))

        editable_elements = attributes.pop('editable_elements', None)
        if editable_elements:
            page.set('editable_elements', editable_elements, locale)

        content_type = attributes.pop('content_type', None)
        if content_type:
            if str(content_type) not in mounting_point.content_types:
                logger.warning(f"Page '{page.fullpath}' is bound to unknown content type '{content_type}'")
            page.templatized = True
            page.content_type = str(content_type)

        layout = attributes.pop('layout', None)

        for name, value in attributes.items():
            if name in Page.LOCALIZED_FIELDS:
                page.set(name, value, locale)
            elif name in PAGE_STRUCTURAL_ATTRIBUTES:
                setattr(page, name, value)
            else:
                logger.debug(f"Ignoring unknown attribute '{name}' in {file_path}")

        page.set_template(source, locale, os.path.abspath(file_path))

        if layout:
            page.layout = str(layout)
        elif locale == mounting_point.default_locale and not page.layout:
            page.layout = FrontmatterHandler.extract_layout(source)

    def _apply_pages_config(self, mounting_point: MountingPoint, pages_config: List) -> None:
        """Apply the `pages` list of site.yml: list order becomes the position."""
        for position, (fullpath, attributes) in enumerate(pages_config):
            page = mounting_point.pages.get(fullpath)
            if page is None:
                logger.warning(f"Page '{fullpath}' listed in site.yml has no template, ignoring it")
                continue

            page.position = position
            for name, value in attributes.items():
                if name in Page.LOCALIZED_FIELDS:
                    ConfigLoader._assign_localized(page, name, value, mounting_point.default_locale)
                elif name in PAGE_STRUCTURAL_ATTRIBUTES:
                    setattr(page, name, value)
                elif name == 'layout':
                    page.layout = str(value)

    # ------------------------------------------------------------------
    # snippets
    # ------------------------------------------------------------------

    def read_snippets(self, locales: List[str], default_locale: str) -> Dict[str, Snippet]:
        snippets: Dict[str, Snippet] = {}
        if not os.path.isdir(self.snippets_dir):
            return snippets

        for filename in sorted(os.listdir(self.snippets_dir)):
            if not filename.endswith(TEMPLATE_EXTENSIONS):
                continue
            file_path = os.path.join(self.snippets_dir, filename)

            slug = permalink(filename.split('.')[0])
            snippet = snippets.setdefault(slug, Snippet(slug=slug, name=humanize(slug)))

            locale = filepath_locale(file_path, locales, default_locale)
            if locale is None:
                logger.warning(f"Unknown locale in the '{filename}' file, skipping it")
                continue

            _, source = FrontmatterHandler.parse(file_path, self._read_file(file_path))
            snippet.set('template', source, locale)
            snippet.set('template_filepath', os.path.abspath(file_path), locale)

        for snippet in snippets.values():
            snippet.set_default_template_for_each_locale(default_locale, locales)

        return snippets

    # ------------------------------------------------------------------
    # content types and entries
    # ------------------------------------------------------------------

    def read_content_types(self) -> Dict[str, ContentType]:
        content_types: Dict[str, ContentType] = {}
        if not os.path.isdir(self.content_types_dir):
            return content_types

        for filename in sorted(os.listdir(self.content_types_dir)):
            if not filename.endswith('.yml'):
                continue
            file_path = os.path.join(self.content_types_dir, filename)
            content_type = self._parse_content_type(file_path, ConfigLoader.read_yaml(file_path))
            content_types.setdefault(content_type.slug, content_type)

        return content_types

    def _parse_content_type(self, file_path: str, attributes: Any) -> ContentType:
        if not isinstance(attributes, dict):
            raise ConfigError(f"Content type file {file_path} must be a YAML dictionary")

        slug = str(attributes.get('slug') or os.path.splitext(os.path.basename(file_path))[0])
        fields_raw = attributes.get('fields') or []
        if not isinstance(fields_raw, list) or not fields_raw:
            raise ConfigError(f"Content type '{slug}' has no fields", f'{slug}.fields')

        fields = []
        for position, field_raw in enumerate(fields_raw):
            if not isinstance(field_raw, dict) or len(field_raw) != 1:
                raise ConfigError(
                    f"Field at index {position} must be a single-key mapping",
                    f'{slug}.fields[{position}]'
                )
            name, options = next(iter(field_raw.items()))
            options = options or {}
            try:
                kind = FieldKind.parse(options.get('type', 'string'))
            except ValueError as e:
                raise ConfigError(str(e), f'{slug}.fields.{name}')

            if kind.is_relationship and not options.get('class_name'):
                raise ConfigError(
                    f"Relationship field '{name}' needs a class_name",
                    f'{slug}.fields.{name}'
                )

            fields.append(ContentField(
                name=str(name),
                kind=kind,
                label=options.get('label'),
                class_name=options.get('class_name'),
                select_options=[str(option) for option in options.get('select_options') or []],
                required=bool(options.get('required', False)),
                localized=bool(options.get('localized', False)),
                position=position,
            ))

        return ContentType(
            slug=slug,
            name=str(attributes.get('name') or humanize(slug)),
            description=attributes.get('description'),
            label_field_name=attributes.get('label_field_name'),
            fields=fields,
        )

    def read_content_entries(self, mounting_point: MountingPoint) -> List[ContentEntry]:
        """Read data/<content type slug>.yml files.

        Each file is a list whose items are either a label or a mapping
        {label: {field: value}}. Localized fields may give a {locale: value}
        mapping.

        Raises:
            ConfigError: If a data file targets an unknown content type
        """
        entries: List[ContentEntry] = []
        if not os.path.isdir(self.data_dir):
            return entries

        for filename in sorted(os.listdir(self.data_dir)):
            if not filename.endswith('.yml'):
                continue
            file_path = os.path.join(self.data_dir, filename)
            slug = os.path.splitext(filename)[0]

            content_type = mounting_point.content_types.get(slug)
            if content_type is None:
                raise ConfigError(f"Unknown content type '{slug}' in {file_path}")

            items = ConfigLoader.read_yaml(file_path) or []
            if not isinstance(items, list):
                raise ConfigError(f"Data file {file_path} must be a YAML list")

            for position, item in enumerate(items):
                entries.append(self._build_entry(content_type, item, position, mounting_point))

        return entries

    def _build_entry(
        self,
        content_type: ContentType,
        item: Any,
        position: int,
        mounting_point: MountingPoint
    ) -> ContentEntry:
        if isinstance(item, dict) and len(item) == 1:
            label, attributes = next(iter(item.items()))
            attributes = dict(attributes or {})
        else:
            label, attributes = item, {}

        default_locale = mounting_point.default_locale
        label = str(label)
        entry = ContentEntry(
            content_type=content_type.slug,
            slug=str(attributes.pop('_slug', None) or permalink(label)),
            label=label,
            position=position,
            default_locale=default_locale,
        )

        label_field = content_type.label_field
        if label_field and label_field not in attributes:
            entry.set_value(label_field, label, default_locale)

        for name, value in attributes.items():
            content_field = content_type.find_field(name)
            is_localized_value = (
                content_field is not None and content_field.localized
                and isinstance(value, dict)
                and set(map(str, value.keys())) <= set(mounting_point.locales)
            )
            if is_localized_value:
                for locale, localized_value in value.items():
                    entry.set_value(name, localized_value, str(locale))
            else:
                entry.set_value(name, value, default_locale)

        return entry
