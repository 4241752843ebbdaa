"""Push of the page tree, one locale at a time.

For each locale the pages are visited in push order (parents and layouts
first) with a fresh ledger:

- a page already in the ledger is not visited again
- a page not safely translated in the locale is skipped
- a page whose parent failed (or was blocked) is blocked, not attempted
- a page whose parent was skipped and has no remote id is blocked too
- otherwise the page is created (no remote id yet) or updated

Engine errors on a single page are recorded and the walk goes on. A page
about to be created below a parent that was pushed (or not visited) but
still has no remote id stops the run.
"""

import logging
from typing import Any, Dict, List, Optional

from src.engine_client.api_wrapper import APIWrapper
from src.engine_client.errors import EngineError
from src.models.mounting_point import MountingPoint
from src.models.page import Page
from .content_assets import ContentAssetsPusher
from .errors import PreconditionError
from .ledger import LedgerState, Status, SyncLedger, SyncReport
from .push_order import build_push_order

logger = logging.getLogger(__name__)

SEO_ATTRIBUTES = ('seo_title', 'meta_keywords', 'meta_description')

# Page attributes sent in every payload
SAFE_ATTRIBUTES = (
    'title', 'slug', 'handle', 'position', 'listed', 'published',
    'templatized', 'content_type', 'redirect_url', 'response_type',
    'cache_strategy',
)


def remote_id_of(record: Dict[str, Any]) -> Optional[str]:
    identifier = record.get('id') or record.get('_id')
    return str(identifier) if identifier else None


class PagesPusher:
    """Creates and updates the pages of a mounting point on the engine.

    Args:
        api: Engine client
        mounting_point: Local site, with its page tree built
        report: Status trail of the run
        assets: Resolver uploading the assets referenced by templates
        force: Send the full payload on every update
        data: Also push editable elements
    """

    def __init__(
        self,
        api: APIWrapper,
        mounting_point: MountingPoint,
        report: SyncReport,
        assets: ContentAssetsPusher,
        force: bool = False,
        data: bool = False
    ):
        self.api = api
        self.mounting_point = mounting_point
        self.report = report
        self.assets = assets
        self.force = force
        self.data = data
        self.ledgers: Dict[str, SyncLedger] = {}

    def prepare(self) -> None:
        """Copy remote ids and translated locales onto the local pages.

        Remote records are matched by id when the local page already has
        one, then by the fullpath the engine computes from the slugs of the
        default locale, then by the canonical fullpath.
        """
        default_locale = self.mounting_point.default_locale
        by_id = {page.remote_id: page for page in self.mounting_point.pages.values() if page.remote_id}
        by_fullpath = {page.localized_fullpath(default_locale): page for page in self.mounting_point.walk_pages()}
        for fullpath, page in self.mounting_point.pages.items():
            by_fullpath.setdefault(fullpath, page)

        for record in self.api.list_pages(default_locale):
            page = by_id.get(remote_id_of(record)) or by_fullpath.get(str(record.get('fullpath')))
            if page is None:
                continue
            page.remote_id = remote_id_of(record)
            page.remote_translated_in = {str(locale) for locale in record.get('translated_in') or [default_locale]}
            logger.debug(f"Page '{page.fullpath}' exists remotely ({page.remote_id})")

    def push(self) -> None:
        """Push every page in every locale.

        Raises:
            PreconditionError: If a page is created below a parent without remote id
        """
        index = self.mounting_point.index
        not_found = self.mounting_point.not_found
        order = build_push_order(index, self.mounting_point.pages)

        for locale in self.mounting_point.locales:
            logger.info(f"Pushing pages in locale '{locale}'")
            ledger = SyncLedger(locale)
            self.ledgers[locale] = ledger

            for page in order.pages:
                self.push_page(page, locale, ledger)

            self.push_page(not_found, locale, ledger)
            self._report_unsynced(locale, ledger)

    def push_page(self, page: Page, locale: str, ledger: SyncLedger) -> None:
        if page.fullpath in ledger:
            return

        if not page.is_safely_translated(locale):
            ledger.mark(page.fullpath, LedgerState.SKIPPED_UNTRANSLATED)
            logger.info(f"Page '{page.fullpath}' is not translated in '{locale}', skipping it")
            self.report.record('page', page.fullpath, locale, Status.SKIPPED, message='not translated')
            return

        parent = page.parent
        if parent is not None and self._parent_blocks(parent, ledger):
            message = f"parent page '{parent.fullpath}' was not pushed"
            ledger.mark(page.fullpath, LedgerState.BLOCKED)
            page.sync_errors[locale] = message
            logger.error(f"Page '{page.fullpath}' ({locale}) blocked: {message}")
            self.report.record('page', page.fullpath, locale, Status.BLOCKED, message=message)
            return

        operation = 'create' if page.remote_id is None else 'update'
        try:
            if operation == 'create':
                self.create_page(page, locale)
            else:
                self.update_page(page, locale)
        except EngineError as e:
            ledger.mark(page.fullpath, LedgerState.FAILED)
            page.sync_errors[locale] = str(e)
            logger.error(f"Failed to {operation} page '{page.fullpath}' ({locale}): {e}")
            self.report.record('page', page.fullpath, locale, Status.ERROR, operation, str(e))
            return

        ledger.mark(page.fullpath, LedgerState.DONE)
        self.report.record('page', page.fullpath, locale, Status.SUCCESS, operation)

    @staticmethod
    def _parent_blocks(parent: Page, ledger: SyncLedger) -> bool:
        """True if the parent failed or was blocked in this locale.

        A parent skipped in this locale also blocks its children while it
        has no remote id (it failed in an earlier locale).
        """
        state = ledger.state_of(parent.fullpath)
        if state in (LedgerState.FAILED, LedgerState.BLOCKED):
            return True
        return state is LedgerState.SKIPPED_UNTRANSLATED and parent.remote_id is None

    def create_page(self, page: Page, locale: str) -> None:
        """Create the page remotely in `locale`.

        Raises:
            PreconditionError: If the parent has no remote id
            EngineError: If the engine rejects the page
        """
        parent = page.parent
        params = self.page_params(page, locale, full=True)

        if not page.is_index_or_404:
            if parent is None or parent.remote_id is None:
                raise PreconditionError(page.fullpath, parent.fullpath if parent else None)
            params['parent_id'] = parent.remote_id

        response = self.api.create_page(params, locale)
        page.remote_id = remote_id_of(response)
        page.remote_translated_in.add(locale)
        logger.debug(f"Created page '{page.fullpath}' ({locale}) with id {page.remote_id}")

    def update_page(self, page: Page, locale: str) -> None:
        """Update the page in `locale`.

        The full payload is sent on the first translation of a locale or
        with `force`; otherwise the SEO fields and editable elements are
        left untouched remotely.
        """
        full = self.force or locale not in page.remote_translated_in
        self.api.update_page(page.remote_id, self.page_params(page, locale, full=full), locale)
        page.remote_translated_in.add(locale)
        logger.debug(f"Updated page '{page.fullpath}' ({locale}, {'full' if full else 'safe'} payload)")

    def page_params(self, page: Page, locale: str, full: bool) -> Dict[str, Any]:
        default_locale = self.mounting_point.default_locale
        attributes = page.attributes(locale)

        params = {name: attributes[name] for name in SAFE_ATTRIBUTES if name in attributes}
        params['title'] = page.get('title', locale) or page.get('title', default_locale) or page.fullpath
        params['slug'] = page.get('slug', locale) or page.fullpath.split('/')[-1]
        params['raw_template'] = self.assets.replace_content_assets(page.get('raw_template', locale)) or ''

        if full:
            for name in SEO_ATTRIBUTES:
                if name in attributes:
                    params[name] = attributes[name]
            if self.data and page.get('editable_elements', locale):
                params['editable_elements'] = self.editable_elements_params(page, locale)

        return params

    def editable_elements_params(self, page: Page, locale: str) -> List[Dict[str, Any]]:
        """Convert the {'block/slug': content} mapping to the engine list format."""
        elements = []
        for key, content in (page.get('editable_elements', locale) or {}).items():
            block, _, slug = str(key).rpartition('/')
            if isinstance(content, str):
                content = self.assets.replace_content_assets(content)
            elements.append({'block': block or None, 'slug': slug, 'content': content})
        return elements

    def _report_unsynced(self, locale: str, ledger: SyncLedger) -> None:
        tree_pages = list(self.mounting_point.walk_pages())
        unsynced = [page.fullpath for page in tree_pages if page.fullpath not in ledger]
        if unsynced:
            logger.warning(
                f"{len(unsynced)} page(s) not pushed in '{locale}': {', '.join(unsynced)} "
                f"(layout cycle or broken inheritance chain)"
            )
            for fullpath in unsynced:
                page = self.mounting_point.pages[fullpath]
                page.sync_errors.setdefault(locale, 'not pushed: layout cycle or broken inheritance chain')
            self.report.add_unsynced(locale, unsynced)
