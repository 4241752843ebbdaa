"""In-memory aggregate of every resource of one site."""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .content_asset import ContentAsset
from .content_entry import ContentEntry
from .content_type import ContentType
from .page import INDEX_FULLPATH, NOT_FOUND_FULLPATH, Page
from .site import Site
from .snippet import Snippet
from .translation import Translation


@dataclass
class MountingPoint:
    """Resources of a site for one sync run.

    A mounting point is filled by a reader (local directory or engine),
    handed to a writer, then discarded. Nothing is shared between runs.

    Attributes:
        site: Site metadata, source of the locale list
        path: Local site directory when read from or written to disk
        pages: Canonical fullpath -> Page
        snippets: Slug -> Snippet
        translations: Key -> Translation
        content_types: Slug -> ContentType
        content_entries: Content type slug -> {entry slug -> ContentEntry}
        content_assets: Remote path -> ContentAsset
        orphans: Pages the tree builder could not attach
    """
    site: Site
    path: Optional[str] = None
    pages: Dict[str, Page] = field(default_factory=dict)
    snippets: Dict[str, Snippet] = field(default_factory=dict)
    translations: Dict[str, Translation] = field(default_factory=dict)
    content_types: Dict[str, ContentType] = field(default_factory=dict)
    content_entries: Dict[str, Dict[str, ContentEntry]] = field(default_factory=dict)
    content_assets: Dict[str, ContentAsset] = field(default_factory=dict)
    orphans: List[Page] = field(default_factory=list)

    @property
    def locales(self) -> List[str]:
        return list(self.site.locales)

    @property
    def default_locale(self) -> Optional[str]:
        return self.site.default_locale

    @property
    def index(self) -> Optional[Page]:
        return self.pages.get(INDEX_FULLPATH)

    @property
    def not_found(self) -> Optional[Page]:
        return self.pages.get(NOT_FOUND_FULLPATH)

    def add_page(self, page: Page) -> Page:
        self.pages[page.fullpath] = page
        return page

    def add_entry(self, entry: ContentEntry) -> ContentEntry:
        self.content_entries.setdefault(entry.content_type, {})[entry.slug] = entry
        return entry

    def entries_of(self, content_type: str) -> List[ContentEntry]:
        return list(self.content_entries.get(content_type, {}).values())

    def all_entries(self) -> Iterator[ContentEntry]:
        for entries in self.content_entries.values():
            yield from entries.values()

    def find_entry(self, content_type: str, slug: str) -> Optional[ContentEntry]:
        return self.content_entries.get(content_type, {}).get(slug)

    def register_asset(self, asset: ContentAsset) -> ContentAsset:
        """Register an asset under its remote URL; an existing entry wins."""
        key = asset.url or asset.local_path
        return self.content_assets.setdefault(key, asset)

    def walk_pages(self) -> Iterator[Page]:
        """Pre-order walk of the tree from index, then 404."""
        for root in (self.index, self.not_found):
            if root is not None:
                yield from root.walk()
