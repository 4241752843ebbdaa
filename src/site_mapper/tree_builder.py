"""Page tree construction from a flat collection of pages.

The builder attaches every page below its parent, starting from `index`,
and localizes the fullpath of each attached page. Pages are matched either
by path (`about-us/team` below `about-us`) or, for records read from the
engine, by remote parent id.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Set, Union

from src.models.page import INDEX_FULLPATH, NOT_FOUND_FULLPATH, Page
from .errors import TreeBuildError
from .path_resolver import is_subpage_of

logger = logging.getLogger(__name__)

# Maximum nesting of pages below index
MAX_TREE_DEPTH = 50


@dataclass
class BuildResult:
    """Outcome of a tree build.

    Attributes:
        index: Root of the tree
        not_found: The 404 page (a second root, without children)
        pages: Every page given to the builder, by fullpath
        orphans: Pages that matched no parent and stay out of the tree
    """
    index: Page
    not_found: Page
    pages: Dict[str, Page]
    orphans: List[Page] = field(default_factory=list)

    def walk(self) -> Iterator[Page]:
        """Pre-order walk of the tree (index first, 404 last)."""
        yield from self.index.walk()
        yield from self.not_found.walk()

    def flatten(self) -> List[Page]:
        return list(self.walk())


class TreeBuilder:
    """Builds the page tree of a site.

    Args:
        locales: Registered locales, default first
        default_locale: Locale whose template fills untranslated roots
            (first of `locales` when omitted)
        use_parent_ids: Match pages carrying a `parent_id` by remote id
            instead of by path

    Example:
        >>> result = TreeBuilder(['en', 'fr']).build(pages)
        >>> [child.fullpath for child in result.index.children]
        ['about-us', 'contact']
    """

    def __init__(
        self,
        locales: Iterable[str],
        default_locale: Optional[str] = None,
        use_parent_ids: bool = False
    ):
        self.locales = [str(locale) for locale in locales]
        if not self.locales:
            raise TreeBuildError("no locale registered")
        self.default_locale = str(default_locale) if default_locale else self.locales[0]
        self.use_parent_ids = use_parent_ids

    def build(self, pages: Union[Dict[str, Page], Iterable[Page]]) -> BuildResult:
        """Attach the pages to each other and return the roots.

        Raises:
            TreeBuildError: If index or 404 is missing, or if the tree is
                deeper than MAX_TREE_DEPTH
        """
        if not isinstance(pages, dict):
            pages = {page.fullpath: page for page in pages}

        index = pages.get(INDEX_FULLPATH)
        not_found = pages.get(NOT_FOUND_FULLPATH)

        missing = [
            fullpath for fullpath, page in
            ((INDEX_FULLPATH, index), (NOT_FOUND_FULLPATH, not_found))
            if page is None
        ]
        if missing:
            raise TreeBuildError(f"missing root page(s): {', '.join(missing)}", missing)

        for page in pages.values():
            page.children = []
            page.parent = None

        for root in (index, not_found):
            root.depth = 0
            root.localize_fullpath(self.locales)

        candidates = self.pages_to_list(pages)
        attached: Set[str] = set()

        logger.debug(f"Building page tree from {len(pages)} page(s)")
        self._build_relationships(index, candidates, attached, 1)
        not_found.set_default_template_for_each_locale(self.default_locale, self.locales)

        orphans = [page for page in candidates if page.fullpath not in attached]
        for orphan in orphans:
            logger.warning(
                f"Page '{orphan.fullpath}' has no parent page and is left out of the tree"
            )

        return BuildResult(index=index, not_found=not_found, pages=pages, orphans=orphans)

    @staticmethod
    def pages_to_list(pages: Dict[str, Page]) -> List[Page]:
        """Non-root pages sorted by fullpath, then (stable) by depth."""
        candidates = sorted(
            (page for page in pages.values() if not page.is_index_or_404),
            key=lambda page: page.fullpath
        )
        return sorted(candidates, key=lambda page: page.depth)

    def _build_relationships(
        self,
        parent: Page,
        candidates: List[Page],
        attached: Set[str],
        level: int
    ) -> None:
        """Attach the candidates matching `parent`, depth first.

        `attached` is shared by every recursive call, so a page attached
        deeper in the recursion is skipped by the callers' loops. `level`
        is the depth of the pages attached by this call.
        """
        parent.set_default_template_for_each_locale(self.default_locale, self.locales)

        for page in candidates:
            if page.fullpath in attached or not self._is_subpage_of(page, parent):
                continue

            if level > MAX_TREE_DEPTH:
                raise TreeBuildError(
                    f"page tree exceeds maximum depth of {MAX_TREE_DEPTH} below '{parent.fullpath}'",
                    [page.fullpath]
                )

            parent.add_child(page)
            page.localize_fullpath(self.locales)
            attached.add(page.fullpath)

            self._build_relationships(page, candidates, attached, level + 1)

    def _is_subpage_of(self, page: Page, parent: Page) -> bool:
        if page.is_index_or_404:
            return False
        if self.use_parent_ids and page.parent_id:
            return page.parent_id == parent.remote_id
        return is_subpage_of(page.fullpath, parent.fullpath)
