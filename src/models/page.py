"""Page entity and page tree node."""

import weakref
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set

from .localized import Localized

INDEX_FULLPATH = 'index'
NOT_FOUND_FULLPATH = '404'
ROOT_FULLPATHS = (INDEX_FULLPATH, NOT_FOUND_FULLPATH)

# Sibling positions start at this value in each directory, leaving room
# for pages positioned explicitly before the scanned ones.
DEFAULT_POSITION = 100


@dataclass(eq=False)
class Page(Localized):
    """A page of the site and a node of the page tree.

    Structural attributes (position, parent, children, ...) are shared by
    all locales. Content attributes (title, slug, template, SEO fields,
    editable elements) and the displayed fullpath are stored per locale.

    The tree owns children through the `children` list; the back-edge to
    the parent is a weak reference.

    Attributes:
        fullpath: Canonical (default locale) identifier, e.g. "about-us/team"
        remote_id: Engine identifier once the page is persisted remotely
        parent_id: Engine identifier of the parent (API records only)
        position: Order among siblings
        depth: Distance from the root (0 for index and 404)
        layout: Fullpath of the page used as layout, or "parent"
        remote_translated_in: Locales the engine already holds for the page
        sync_errors: Locale -> error message recorded during a push
    """
    fullpath: str
    remote_id: Optional[str] = None
    parent_id: Optional[str] = None
    position: int = DEFAULT_POSITION
    depth: int = -1
    handle: Optional[str] = None
    listed: bool = True
    published: bool = True
    templatized: bool = False
    content_type: Optional[str] = None
    layout: Optional[str] = None
    redirect_url: Optional[str] = None
    response_type: Optional[str] = None
    cache_strategy: Optional[str] = None
    filepath: Optional[str] = None
    children: List['Page'] = field(default_factory=list, repr=False)
    remote_translated_in: Set[str] = field(default_factory=set, repr=False)
    sync_errors: Dict[str, str] = field(default_factory=dict, repr=False)

    LOCALIZED_FIELDS = (
        'title', 'slug', 'fullpath', 'seo_title', 'meta_keywords',
        'meta_description', 'raw_template', 'editable_elements',
        'template_filepath',
    )

    # Attributes whose presence means the page was written for a locale.
    CONTENT_FIELDS = (
        'title', 'slug', 'seo_title', 'meta_keywords', 'meta_description',
        'raw_template', 'editable_elements',
    )

    def __post_init__(self) -> None:
        self._init_translations()
        self._parent_ref: Optional[weakref.ref] = None
        self._translated_in: List[str] = []
        if self.depth < 0:
            self.depth = 0 if self.is_index_or_404 else len(self.fullpath.split('/'))

    def __repr__(self) -> str:
        return f"Page(fullpath={self.fullpath!r}, depth={self.depth}, position={self.position})"

    @property
    def parent(self) -> Optional['Page']:
        return self._parent_ref() if self._parent_ref is not None else None

    @parent.setter
    def parent(self, page: Optional['Page']) -> None:
        self._parent_ref = weakref.ref(page) if page is not None else None

    @property
    def is_index_or_404(self) -> bool:
        return self.fullpath in ROOT_FULLPATHS

    @property
    def translated_in(self) -> List[str]:
        """Locales for which the page has a template, in discovery order."""
        return list(self._translated_in)

    def mark_translated(self, locale: str) -> None:
        if locale not in self._translated_in:
            self._translated_in.append(str(locale))

    def is_translated_in(self, locale: str) -> bool:
        return str(locale) in self._translated_in

    def is_safely_translated(self, locale: str) -> bool:
        """True if both the page and its parent (if any) exist in the locale."""
        if not self.is_translated_in(locale):
            return False
        parent = self.parent
        return parent is None or parent.is_translated_in(locale)

    def has_content_in(self, locale: str) -> bool:
        return any(self.has(name, locale) for name in self.CONTENT_FIELDS)

    def set_template(self, raw_template: str, locale: str, filepath: Optional[str] = None) -> None:
        """Store the template source of a locale and flag the page as translated in it."""
        self.set('raw_template', raw_template, locale)
        if filepath is not None:
            self.set('template_filepath', filepath, locale)
        self.mark_translated(locale)

    def localized_fullpath(self, locale: Optional[str] = None) -> str:
        return self.get('fullpath', locale) or self.fullpath

    def add_child(self, page: 'Page') -> 'Page':
        """Attach a page below this one and keep children ordered."""
        self.children.append(page)
        page.parent = self
        page.depth = self.depth + 1
        self.children.sort(key=lambda child: (child.depth, child.position))
        return page

    def localize_fullpath(self, locales: Iterable[str]) -> None:
        """Compute the displayed fullpath of the page in every locale.

        The roots keep their identifier. Children of index use their own
        slug; deeper pages append their slug to the localized fullpath of
        their parent. A locale without a slug falls back to the last
        segment of the canonical fullpath.
        """
        parent = self.parent
        default_slug = self.fullpath.split('/')[-1]

        for locale in locales:
            if self.is_index_or_404:
                self.set('fullpath', self.fullpath, locale)
                self.set('slug', self.fullpath, locale)
                continue

            slug = self.get('slug', locale) or default_slug

            if parent is None or parent.fullpath == INDEX_FULLPATH:
                self.set('fullpath', slug, locale)
            else:
                self.set('fullpath', f"{parent.localized_fullpath(locale)}/{slug}", locale)

    def set_default_template_for_each_locale(self, default_locale: str, locales: Iterable[str]) -> None:
        """Reuse the default locale template where a translation has none.

        The roots receive it in every locale so that each locale has a home
        and a not-found page. Other pages only receive it in locales where
        they already carry some content (a localized title for instance).
        """
        default_template = self.get('raw_template', default_locale)
        if not default_template:
            return

        filepath = self.get('template_filepath', default_locale)

        for locale in locales:
            if locale == default_locale or self.is_translated_in(locale):
                continue
            if self.is_index_or_404 or self.has_content_in(locale):
                self.set_template(default_template, locale, filepath)

    def walk(self) -> Iterator['Page']:
        """Yield this page then its descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def attributes(self, locale: str) -> Dict[str, Any]:
        """Flatten the page in one locale (structural + localized attributes)."""
        values: Dict[str, Any] = {
            'title': self.get('title', locale),
            'slug': self.get('slug', locale),
            'fullpath': self.localized_fullpath(locale),
            'handle': self.handle,
            'position': self.position,
            'listed': self.listed,
            'published': self.published,
            'templatized': self.templatized,
            'content_type': self.content_type,
            'redirect_url': self.redirect_url,
            'response_type': self.response_type,
            'cache_strategy': self.cache_strategy,
            'seo_title': self.get('seo_title', locale),
            'meta_keywords': self.get('meta_keywords', locale),
            'meta_description': self.get('meta_description', locale),
            'editable_elements': self.get('editable_elements', locale),
        }
        return {name: value for name, value in values.items() if value is not None}
