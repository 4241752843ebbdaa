"""Push of the site and of the resources pages depend on.

Every pusher follows the same two steps: `prepare()` matches local
resources with remote ones (by slug or key) to learn their remote ids,
then `push()` creates the resources without remote id and updates the
others. Engine errors on a single resource are recorded in the report.
"""

import logging
from typing import Any, Dict, List

from src.engine_client.api_wrapper import APIWrapper
from src.engine_client.errors import EngineError
from src.models.mounting_point import MountingPoint
from .content_assets import ContentAssetsPusher
from .errors import LocaleMismatchError
from .ledger import Status, SyncReport
from .pages_pusher import remote_id_of

logger = logging.getLogger(__name__)


class SitePusher:
    """Validates the remote site against the local one, then creates or updates it.

    Without `force`, an existing remote site is only checked: every local
    locale must exist remotely and both default locales must match.
    """

    def __init__(self, api: APIWrapper, mounting_point: MountingPoint, report: SyncReport, force: bool = False):
        self.api = api
        self.mounting_point = mounting_point
        self.report = report
        self.force = force

    def push(self) -> None:
        """Run the site step.

        Raises:
            LocaleMismatchError: If the locales differ and force is off
            EngineError: If the site cannot be fetched or created
        """
        site = self.mounting_point.site
        remote = self.api.get_current_site()

        if remote is None:
            self._create_site()
            return

        site.remote_id = remote_id_of(remote)

        if not self.force:
            self.check_locales([str(locale) for locale in remote.get('locales') or []])
            self.report.record('site', site.name, None, Status.SKIPPED, message='already exists')
            return

        self._update_site(self.mounting_point.locales)

    def check_locales(self, remote_locales: List[str]) -> None:
        """Ensure the remote site can receive the local content.

        Raises:
            LocaleMismatchError: If a local locale is missing remotely or
                the default locales differ
        """
        locales = self.mounting_point.locales
        default_locale = self.mounting_point.default_locale
        message = None

        if not all(locale in remote_locales for locale in locales):
            message = (
                f"Your site locales ({', '.join(locales)}) do not match exactly "
                f"the ones of your target ({', '.join(remote_locales)})"
            )

        remote_default_locale = remote_locales[0] if remote_locales else None
        if default_locale != remote_default_locale:
            message = (
                f"Your default site locale ({default_locale!r}) is not the same as "
                f"the one of your target ({remote_default_locale!r})"
            )

        if message:
            self.report.record('site', self.mounting_point.site.name, None, Status.ERROR, 'validate', message)
            raise LocaleMismatchError(message, locales, remote_locales)

    def _create_site(self) -> None:
        site = self.mounting_point.site
        default_locale = self.mounting_point.default_locale

        response = self.api.create_site(site.to_params(default_locale), default_locale)
        site.remote_id = remote_id_of(response)
        logger.info(f"Created site '{site.name}' ({site.remote_id})")
        self.report.record('site', site.name, default_locale, Status.SUCCESS, 'create')

        self._update_site([locale for locale in self.mounting_point.locales if locale != default_locale])

    def _update_site(self, locales: List[str]) -> None:
        site = self.mounting_point.site
        for locale in locales:
            try:
                self.api.update_site(site.remote_id, site.to_params(locale), locale)
            except EngineError as e:
                logger.error(f"Failed to update site in '{locale}': {e}")
                self.report.record('site', site.name, locale, Status.ERROR, 'update', str(e))
                continue
            self.report.record('site', site.name, locale, Status.SUCCESS, 'update')


class SnippetsPusher:
    """Creates or updates snippets in every locale they are translated in."""

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

    def prepare(self) -> None:
        for record in self.api.list_snippets():
            snippet = self.mounting_point.snippets.get(str(record.get('slug')))
            if snippet is not None:
                snippet.remote_id = remote_id_of(record)

    def push(self) -> None:
        for locale in self.mounting_point.locales:
            for slug, snippet in sorted(self.mounting_point.snippets.items()):
                if not snippet.is_translated_in(locale):
                    continue

                params = {
                    'name': snippet.name or slug,
                    'slug': slug,
                    'template': self.assets.replace_content_assets(snippet.get('template', locale)) or '',
                }
                operation = 'create' if snippet.remote_id is None else 'update'
                try:
                    if snippet.remote_id is None:
                        snippet.remote_id = remote_id_of(self.api.create_snippet(params, locale))
                    else:
                        self.api.update_snippet(snippet.remote_id, params, locale)
                except EngineError as e:
                    logger.error(f"Failed to {operation} snippet '{slug}' ({locale}): {e}")
                    self.report.record('snippet', slug, locale, Status.ERROR, operation, str(e))
                    continue
                self.report.record('snippet', slug, locale, Status.SUCCESS, operation)


class TranslationsPusher:
    """Creates or updates translation keys (all locales in one request)."""

    def __init__(self, api: APIWrapper, mounting_point: MountingPoint, report: SyncReport):
        self.api = api
        self.mounting_point = mounting_point
        self.report = report

    def prepare(self) -> None:
        for record in self.api.list_translations():
            translation = self.mounting_point.translations.get(str(record.get('key')))
            if translation is not None:
                translation.remote_id = remote_id_of(record)

    def push(self) -> None:
        for key, translation in sorted(self.mounting_point.translations.items()):
            operation = 'create' if translation.remote_id is None else 'update'
            try:
                if translation.remote_id is None:
                    translation.remote_id = remote_id_of(self.api.create_translation(translation.to_params()))
                else:
                    self.api.update_translation(translation.remote_id, translation.to_params())
            except EngineError as e:
                logger.error(f"Failed to {operation} translation '{key}': {e}")
                self.report.record('translation', key, None, Status.ERROR, operation, str(e))
                continue
            self.report.record('translation', key, None, Status.SUCCESS, operation)


class ContentTypesPusher:
    """Creates or updates content type schemas."""

    def __init__(self, api: APIWrapper, mounting_point: MountingPoint, report: SyncReport, force: bool = False):
        self.api = api
        self.mounting_point = mounting_point
        self.report = report
        self.force = force

    def prepare(self) -> None:
        for record in self.api.list_content_types():
            content_type = self.mounting_point.content_types.get(str(record.get('slug')))
            if content_type is not None:
                content_type.remote_id = remote_id_of(record)

    def push(self) -> None:
        for slug, content_type in sorted(self.mounting_point.content_types.items()):
            params: Dict[str, Any] = content_type.to_params()
            operation = 'create' if content_type.remote_id is None else 'update'

            if operation == 'update' and not self.force:
                # Fields are left untouched remotely unless forced
                params.pop('fields', None)

            try:
                if content_type.remote_id is None:
                    content_type.remote_id = remote_id_of(self.api.create_content_type(params))
                else:
                    self.api.update_content_type(content_type.remote_id, params)
            except EngineError as e:
                logger.error(f"Failed to {operation} content type '{slug}': {e}")
                self.report.record('content_type', slug, None, Status.ERROR, operation, str(e))
                continue
            self.report.record('content_type', slug, None, Status.SUCCESS, operation)
