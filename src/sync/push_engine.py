"""Push of a local mounting point to the engine."""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from src.engine_client.api_wrapper import APIWrapper
from src.models.mounting_point import MountingPoint
from .content_assets import ContentAssetsPusher
from .content_pusher import ContentEntriesPusher
from .ledger import SyncReport
from .pages_pusher import PagesPusher
from .resource_pushers import ContentTypesPusher, SitePusher, SnippetsPusher, TranslationsPusher

logger = logging.getLogger(__name__)

# Writers in run order; the site step always runs first
WRITERS = ('site', 'snippets', 'content_types', 'content_entries', 'translations', 'pages')


@dataclass
class PushOptions:
    """Switches of a push run.

    Attributes:
        force: Update the site in every locale and send full page payloads
        force_assets: Re-upload content assets whose size changed
        data: Also push content entries and editable elements
        translations: Push translation keys
        only: Restrict the run to these writers (site excepted)
    """
    force: bool = False
    force_assets: bool = False
    data: bool = False
    translations: bool = True
    only: Optional[Sequence[str]] = None


class PushEngine:
    """Runs every writer against the engine, in dependency order.

    Per-resource engine errors are recorded in the report and never stop
    the run. Site validation errors (locale mismatch) and page
    precondition errors abort it.

    Example:
        >>> report = PushEngine(api, mounting_point, PushOptions(data=True)).run()
        >>> report.has_errors
        False
    """

    def __init__(
        self,
        api: APIWrapper,
        mounting_point: MountingPoint,
        options: Optional[PushOptions] = None,
        report: Optional[SyncReport] = None
    ):
        self.api = api
        self.mounting_point = mounting_point
        self.options = options or PushOptions()
        self.report = report if report is not None else SyncReport()

        self.assets = ContentAssetsPusher(
            api, mounting_point.path or '.', self.report, self.options.force_assets
        )
        self.pages = PagesPusher(
            api, mounting_point, self.report, self.assets,
            force=self.options.force, data=self.options.data
        )
        self.content_entries = ContentEntriesPusher(api, mounting_point, self.report, self.assets)

    def selected_writers(self) -> List[str]:
        """Writers to run after the site step.

        Raises:
            ValueError: If `only` names an unknown writer
        """
        only = list(self.options.only or [])
        unknown = [name for name in only if name not in WRITERS]
        if unknown:
            raise ValueError(
                f"Unknown resource(s): {', '.join(unknown)} (expected: {', '.join(WRITERS)})"
            )

        selected = []
        for name in WRITERS[1:]:
            if only and name not in only:
                continue
            if name == 'content_entries' and not self.options.data:
                continue
            if name == 'translations' and not self.options.translations:
                continue
            selected.append(name)
        return selected

    def run(self) -> SyncReport:
        """Push the mounting point and return the report.

        Raises:
            LocaleMismatchError: If the remote site cannot receive the local locales
            PreconditionError: If a page would be created below a parent without remote id
            EngineError: If the site itself cannot be fetched or created
        """
        writers = self.selected_writers()
        steps: Dict[str, Callable[[], None]] = {
            'snippets': self._push_snippets,
            'content_types': self._push_content_types,
            'content_entries': self._push_content_entries,
            'translations': self._push_translations,
            'pages': self._push_pages,
        }

        logger.info(f"Pushing site '{self.mounting_point.site.name}'")
        SitePusher(self.api, self.mounting_point, self.report, force=self.options.force).push()

        for name in writers:
            logger.info(f"Pushing {name.replace('_', ' ')}")
            steps[name]()

        if len(self.content_entries.deferred):
            logger.info(f"Pushing relationships of {len(self.content_entries.deferred)} entry(ies)")
            self.content_entries.push_relationships()

        logger.info(
            f"Push finished with {len(self.report.errors)} error(s) "
            f"over {len(self.report.statuses)} operation(s)"
        )
        return self.report

    def _push_snippets(self) -> None:
        pusher = SnippetsPusher(self.api, self.mounting_point, self.report, self.assets)
        pusher.prepare()
        pusher.push()

    def _push_content_types(self) -> None:
        pusher = ContentTypesPusher(self.api, self.mounting_point, self.report, force=self.options.force)
        pusher.prepare()
        pusher.push()

    def _push_content_entries(self) -> None:
        self.content_entries.prepare()
        self.content_entries.push()

    def _push_translations(self) -> None:
        pusher = TranslationsPusher(self.api, self.mounting_point, self.report)
        pusher.prepare()
        pusher.push()

    def _push_pages(self) -> None:
        self.pages.prepare()
        self.pages.push()
