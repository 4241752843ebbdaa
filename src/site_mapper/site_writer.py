"""Writes a mounting point to a site directory.

All text files are staged in a temporary directory first and moved into
place once every file has been written, so a failed pull never leaves a
half-written site behind.
"""

import hashlib
import logging
import os
import shutil
import tempfile
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from src.models.content_type import ContentType
from src.models.mounting_point import MountingPoint
from src.models.page import Page
from .config_loader import ConfigLoader
from .errors import FilesystemError
from .frontmatter_handler import FrontmatterHandler
from .path_resolver import localized_filename

logger = logging.getLogger(__name__)

FileContent = Union[str, bytes]


class SiteWriter:
    """Serializes a mounting point into the directory layout read by SiteReader.

    Args:
        mounting_point: Resources to write
        site_path: Target directory (created when missing)
        downloader: Callable returning the bytes of a remote asset URL;
            content assets are not downloaded without one

    Example:
        >>> SiteWriter(mounting_point, './my-site', api.download).write()
    """

    def __init__(
        self,
        mounting_point: MountingPoint,
        site_path: str,
        downloader: Optional[Callable[[str], bytes]] = None
    ):
        self.mounting_point = mounting_point
        self.site_path = site_path
        self.downloader = downloader
        self.failed_assets: List[str] = []

    def write(self) -> List[str]:
        """Write every resource and return the written paths.

        Raises:
            FilesystemError: If a file cannot be written
        """
        files: List[Tuple[str, FileContent]] = []
        files.extend(self._site_files())
        files.extend(self._page_files())
        files.extend(self._snippet_files())
        files.extend(self._content_type_files())
        files.extend(self._content_entry_files())
        files.extend(self._content_asset_files())

        self._write_files_atomic(files)
        logger.info(f"Wrote {len(files)} file(s) to {self.site_path}")
        return [file_path for file_path, _ in files]

    def _path(self, *parts: str) -> str:
        return os.path.join(self.site_path, *parts)

    # ------------------------------------------------------------------
    # resources
    # ------------------------------------------------------------------

    def _site_files(self) -> List[Tuple[str, FileContent]]:
        mounting_point = self.mounting_point
        pages_order = [
            (page.fullpath, {}) for page in mounting_point.walk_pages()
            if not page.is_index_or_404
        ]
        files: List[Tuple[str, FileContent]] = [(
            self._path('config', 'site.yml'),
            ConfigLoader.dump_yaml(ConfigLoader.site_to_dict(mounting_point.site, pages_order))
        )]

        if mounting_point.translations:
            translations = {
                key: dict(translation.values)
                for key, translation in sorted(mounting_point.translations.items())
            }
            files.append((self._path('config', 'translations.yml'), ConfigLoader.dump_yaml(translations)))

        return files

    def _page_files(self) -> List[Tuple[str, FileContent]]:
        mounting_point = self.mounting_point
        default_locale = mounting_point.default_locale
        files: List[Tuple[str, FileContent]] = []

        pages = list(mounting_point.walk_pages())
        pages.extend(mounting_point.orphans)

        for page in pages:
            for locale in page.translated_in:
                if locale not in mounting_point.locales:
                    continue
                relative = localized_filename(page.fullpath, locale, default_locale)
                content = FrontmatterHandler.generate(
                    self._page_header(page, locale),
                    page.get('raw_template', locale) or ''
                )
                files.append((self._path('app', 'views', 'pages', *relative.split('/')), content))

        return files

    def _page_header(self, page: Page, locale: str) -> Dict[str, Any]:
        header: Dict[str, Any] = {
            'title': page.get('title', locale),
        }
        slug = page.get('slug', locale)
        if slug and not page.is_index_or_404 and slug != page.fullpath.split('/')[-1]:
            header['slug'] = slug

        if locale == self.mounting_point.default_locale:
            if page.handle:
                header['handle'] = page.handle
            if not page.listed:
                header['listed'] = False
            if not page.published:
                header['published'] = False
            if page.templatized and page.content_type:
                header['content_type'] = page.content_type
            if page.layout and FrontmatterHandler.extract_layout(page.get('raw_template', locale)) is None:
                header['layout'] = page.layout
            for name in ('redirect_url', 'response_type', 'cache_strategy'):
                if getattr(page, name):
                    header[name] = getattr(page, name)

        for name in ('seo_title', 'meta_keywords', 'meta_description', 'editable_elements'):
            header[name] = page.get(name, locale)

        return header

    def _snippet_files(self) -> List[Tuple[str, FileContent]]:
        mounting_point = self.mounting_point
        default_locale = mounting_point.default_locale
        default_sources = {}
        files: List[Tuple[str, FileContent]] = []

        for slug, snippet in sorted(mounting_point.snippets.items()):
            default_sources[slug] = snippet.get('template', default_locale)
            for locale in mounting_point.locales:
                source = snippet.get('template', locale)
                if source is None:
                    continue
                if locale != default_locale and source == default_sources[slug]:
                    continue
                relative = localized_filename(slug, locale, default_locale)
                files.append((self._path('app', 'views', 'snippets', relative), source))

        return files

    def _content_type_files(self) -> List[Tuple[str, FileContent]]:
        return [
            (self._path('app', 'content_types', f"{slug}.yml"), ConfigLoader.dump_yaml(self._content_type_to_dict(content_type)))
            for slug, content_type in sorted(self.mounting_point.content_types.items())
        ]

    @staticmethod
    def _content_type_to_dict(content_type: ContentType) -> Dict[str, Any]:
        fields = []
        for content_field in content_type.fields:
            options: Dict[str, Any] = {'type': content_field.kind.value}
            if content_field.label:
                options['label'] = content_field.label
            if content_field.class_name:
                options['class_name'] = content_field.class_name
            if content_field.select_options:
                options['select_options'] = list(content_field.select_options)
            if content_field.required:
                options['required'] = True
            if content_field.localized:
                options['localized'] = True
            fields.append({content_field.name: options})

        data: Dict[str, Any] = {'name': content_type.name, 'slug': content_type.slug}
        if content_type.description:
            data['description'] = content_type.description
        if content_type.label_field_name:
            data['label_field_name'] = content_type.label_field_name
        data['fields'] = fields
        return data

    def _content_entry_files(self) -> List[Tuple[str, FileContent]]:
        mounting_point = self.mounting_point
        files: List[Tuple[str, FileContent]] = []

        for slug, entries in sorted(mounting_point.content_entries.items()):
            content_type = mounting_point.content_types.get(slug)
            items = []
            for entry in sorted(entries.values(), key=lambda entry: entry.position):
                attributes: Dict[str, Any] = {'_slug': entry.slug}
                names = {name for values in entry.values.values() for name in values}
                for name in sorted(names):
                    translations = {
                        locale: values[name]
                        for locale, values in entry.values.items() if name in values
                    }
                    # the label already carries the label field unless it was translated
                    if content_type is not None and name == content_type.label_field \
                            and set(translations.values()) <= {entry.label}:
                        continue
                    content_field = content_type.find_field(name) if content_type else None
                    if content_field is not None and content_field.localized:
                        attributes[name] = translations
                    else:
                        attributes[name] = entry.value(name, mounting_point.default_locale)
                items.append({entry.label: attributes})
            files.append((self._path('data', f"{slug}.yml"), ConfigLoader.dump_yaml(items)))

        return files

    def _content_asset_files(self) -> List[Tuple[str, FileContent]]:
        if self.downloader is None:
            return []

        files: List[Tuple[str, FileContent]] = []
        for url, asset in sorted(self.mounting_point.content_assets.items()):
            target = asset.absolute_path(self.site_path)
            try:
                files.append((target, self.downloader(url)))
            except Exception as e:
                logger.error(f"Failed to download content asset {url}: {e}")
                self.failed_assets.append(url)
        return files

    # ------------------------------------------------------------------
    # atomic write
    # ------------------------------------------------------------------

    def _validate_path_safety(self, file_path: str) -> None:
        """Reject paths resolving outside of the site directory.

        Raises:
            FilesystemError: If the path escapes the site directory
        """
        real_base = os.path.realpath(self.site_path)
        real_path = os.path.realpath(file_path)
        if not real_path.startswith(real_base + os.sep) and real_path != real_base:
            raise FilesystemError(
                file_path,
                'validate',
                f'Path traversal detected: {file_path} is outside site directory {self.site_path}'
            )

    def _write_files_atomic(self, files_to_write: List[Tuple[str, FileContent]]) -> None:
        """Write files using a two-phase commit.

        Phase 1 writes every file to a temporary directory; phase 2 moves
        them to their final location. The temporary directory is removed on
        every exit path.

        Raises:
            FilesystemError: If any phase fails
        """
        if not files_to_write:
            logger.debug("No files to write")
            return

        try:
            os.makedirs(self.site_path, exist_ok=True)
            temp_dir = tempfile.mkdtemp(prefix='.mounter-', dir=self.site_path)
        except OSError as e:
            raise FilesystemError(self.site_path, 'create_directory', str(e))

        try:
            temp_files: List[Tuple[str, str]] = []
            file_path = self.site_path
            try:
                for file_path, content in files_to_write:
                    self._validate_path_safety(file_path)

                    path_hash = hashlib.md5(file_path.encode()).hexdigest()[:8]
                    temp_file_path = os.path.join(temp_dir, f"{path_hash}_{os.path.basename(file_path)}")

                    if isinstance(content, bytes):
                        with open(temp_file_path, 'wb') as f:
                            f.write(content)
                    else:
                        with open(temp_file_path, 'w', encoding='utf-8') as f:
                            f.write(content)

                    temp_files.append((temp_file_path, file_path))
            except FilesystemError:
                raise
            except OSError as e:
                logger.error(f"Phase 1 failed: {e} - rolling back")
                raise FilesystemError(file_path, 'write', f"Atomic write phase 1 failed: {str(e)}")

            final_file_path = self.site_path
            try:
                for temp_file_path, final_file_path in temp_files:
                    final_dir = os.path.dirname(final_file_path)
                    if final_dir:
                        os.makedirs(final_dir, exist_ok=True)
                    shutil.move(temp_file_path, final_file_path)
            except OSError as e:
                logger.error(f"Phase 2 failed: {e}")
                raise FilesystemError(final_file_path, 'move', f"Atomic write phase 2 failed: {str(e)}")

            logger.debug(f"Successfully wrote {len(temp_files)} file(s)")
        finally:
            try:
                if os.path.exists(temp_dir):
                    shutil.rmtree(temp_dir)
            except OSError as e:
                logger.warning(f"Failed to clean up temp directory {temp_dir}: {e}")
