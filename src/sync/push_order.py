"""Order in which the pages of a tree are pushed.

A page depends on its tree parent (the parent must exist remotely before
the child is created) and on its layout page (the layout must exist before
a page extending it is written). The order is a topological sort of those
edges (Kahn's algorithm) where, among the ready pages, the one coming
first in the depth-first walk of the tree is taken. Without layout edges
the result is exactly the depth-first walk.
"""

import heapq
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from src.models.page import Page
from src.site_mapper.path_resolver import dasherize_path

logger = logging.getLogger(__name__)

# Layout value meaning "the tree parent", which already precedes the page
PARENT_LAYOUT = 'parent'


@dataclass
class PushOrder:
    """Result of build_push_order.

    Attributes:
        pages: Pages in push order
        blocked: Pages that can never be ordered (layout cycle, or below a
            page caught in one)
    """
    pages: List[Page] = field(default_factory=list)
    blocked: List[Page] = field(default_factory=list)


def build_push_order(index: Page, pages: Optional[Dict[str, Page]] = None) -> PushOrder:
    """Order the tree rooted at `index` for a push.

    Args:
        index: Root of the tree
        pages: Optional fullpath -> Page lookup used to resolve layouts
            (defaults to the pages of the tree)
    """
    walk = list(index.walk())
    rank = {id(page): position for position, page in enumerate(walk)}
    by_fullpath = {page.fullpath: page for page in walk}

    successors: Dict[int, Set[int]] = {position: set() for position in range(len(walk))}
    indegree = [0] * len(walk)

    def add_edge(before: Page, after: Page) -> None:
        source, target = rank[id(before)], rank[id(after)]
        if target not in successors[source]:
            successors[source].add(target)
            indegree[target] += 1

    for page in walk:
        parent = page.parent
        if parent is not None and id(parent) in rank:
            add_edge(parent, page)

        layout_page = _resolve_layout(page, by_fullpath, pages)
        if layout_page is not None:
            add_edge(layout_page, page)

    ready = [position for position in range(len(walk)) if indegree[position] == 0]
    heapq.heapify(ready)

    order = PushOrder()
    while ready:
        position = heapq.heappop(ready)
        order.pages.append(walk[position])
        for successor in successors[position]:
            indegree[successor] -= 1
            if indegree[successor] == 0:
                heapq.heappush(ready, successor)

    emitted = {id(page) for page in order.pages}
    order.blocked = [page for page in walk if id(page) not in emitted]
    if order.blocked:
        logger.warning(
            f"Layout cycle: {', '.join(page.fullpath for page in order.blocked)} cannot be ordered"
        )
    return order


def _resolve_layout(
    page: Page,
    by_fullpath: Dict[str, Page],
    pages: Optional[Dict[str, Page]]
) -> Optional[Page]:
    """Page named by the layout of `page`, None when it adds no constraint."""
    layout = page.layout
    if not layout or layout == PARENT_LAYOUT:
        return None

    target = by_fullpath.get(layout) or by_fullpath.get(dasherize_path(layout))
    if target is None:
        if pages is None or (layout not in pages and dasherize_path(layout) not in pages):
            logger.warning(f"Page '{page.fullpath}' uses unknown layout '{layout}', ignoring it")
        else:
            logger.warning(f"Layout '{layout}' of page '{page.fullpath}' is not in the page tree, ignoring it")
        return None

    if target is page:
        logger.warning(f"Page '{page.fullpath}' uses itself as layout, ignoring it")
        return None

    return target
