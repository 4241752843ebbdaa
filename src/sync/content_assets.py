"""Content asset references in templates and text fields.

On push, references to local files (`/samples/...`) are uploaded and
replaced by the URL the engine serves them from. On pull, engine URLs are
replaced by local paths and registered so the site writer downloads them.
"""

import logging
import os
import re
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from src.engine_client.api_wrapper import APIWrapper
from src.engine_client.errors import EngineError
from src.models.content_asset import ContentAsset
from src.models.mounting_point import MountingPoint
from .ledger import Status, SyncReport

logger = logging.getLogger(__name__)

# Local asset reference: /samples/<path>.<ext>
LOCAL_ASSET_PATTERN = re.compile(r'/samples/[^\s"\'()<>]*\.[a-zA-Z0-9]+')

# Engine asset URL, optionally absolute: /sites/<site id>/assets/<folders>/<name>.<ext>
REMOTE_ASSET_PATTERN = re.compile(
    r'(?:https?://[^/\s"\'()<>]+)?/sites/[0-9a-f]{24}/assets/(?:[^;.\s"\'()<>]+/)*[a-zA-Z_\-0-9]+\.[a-zA-Z0-9]{2,4}'
)

_HOST_PREFIX = r'(?:https?://[^/\s"\'()<>]+)?'

# Local folder receiving pulled assets
PULLED_ASSETS_FOLDER = 'samples/assets'


class ContentAssetsPusher:
    """Uploads local content assets referenced by pushed content.

    An asset whose file name already exists remotely is not uploaded again,
    unless `force_assets` is set and the sizes differ.

    Args:
        api: Engine client
        site_path: Local site directory (assets live under public/)
        report: Status trail of the run
        force_assets: Re-upload assets whose size changed
    """

    def __init__(self, api: APIWrapper, site_path: str, report: SyncReport, force_assets: bool = False):
        self.api = api
        self.site_path = site_path
        self.report = report
        self.force_assets = force_assets
        self._remote: Optional[Dict[str, Dict[str, Any]]] = None
        self._resolved: Dict[str, Optional[str]] = {}

    def prepare(self) -> None:
        self._remote = {}
        for record in self.api.list_content_assets():
            filename = record.get('full_filename') or record.get('filename')
            if filename:
                self._remote[str(filename)] = record

    def resolve(self, local_ref: str) -> Optional[str]:
        """Return the remote URL of a local asset, uploading it when needed.

        Returns None when the asset cannot be uploaded (the failure is
        recorded in the report).
        """
        if local_ref in self._resolved:
            return self._resolved[local_ref]

        if self._remote is None:
            self.prepare()

        asset = ContentAsset(local_path=local_ref)
        url = self._upload(asset)
        self._resolved[local_ref] = url
        return url

    def _upload(self, asset: ContentAsset) -> Optional[str]:
        if not asset.exists(self.site_path):
            logger.error(f"Content asset {asset.local_path} not found in public/")
            self.report.record('content_asset', asset.local_path, None, Status.ERROR, 'upload', 'file not found')
            return None

        file_path = asset.absolute_path(self.site_path)
        asset.size = os.path.getsize(file_path)
        remote = self._remote.get(asset.filename) if self._remote is not None else None

        try:
            if remote is not None:
                asset.remote_id = remote.get('id') or remote.get('_id')
                remote_size = int(remote.get('size') or 0)
                if not (self.force_assets and remote_size != asset.size):
                    self.report.record('content_asset', asset.local_path, None, Status.SKIPPED, 'upload', 'already uploaded')
                    return remote.get('url')
                operation = 'update'
            else:
                operation = 'create'

            with open(file_path, 'rb') as source:
                response = self.api.upload_content_asset(asset.filename, source, asset.remote_id)
        except EngineError as e:
            logger.error(f"Failed to upload content asset {asset.local_path}: {e}")
            self.report.record('content_asset', asset.local_path, None, Status.ERROR, 'upload', str(e))
            return None

        if self._remote is not None:
            self._remote[asset.filename] = response
        self.report.record('content_asset', asset.local_path, None, Status.SUCCESS, operation)
        logger.debug(f"Uploaded content asset {asset.local_path}")
        return response.get('url')

    def replace_content_assets(self, text: Optional[str]) -> Optional[str]:
        """Rewrite every local asset reference of `text` to its remote URL."""
        if not text:
            return text
        return LOCAL_ASSET_PATTERN.sub(lambda match: self.resolve(match.group(0)) or match.group(0), str(text))


class ContentAssetsLocalizer:
    """Rewrites engine asset URLs found in pulled content to local paths.

    Every rewritten URL is registered in the content assets of the
    mounting point.
    """

    def __init__(self, mounting_point: MountingPoint, folder: str = PULLED_ASSETS_FOLDER):
        self.mounting_point = mounting_point
        self.folder = folder

    def register(self, url: str) -> str:
        """Register the asset served at `url` and return its local path."""
        for known_url, asset in self.mounting_point.content_assets.items():
            if _same_path(known_url, url):
                return asset.local_path
        asset = self.mounting_point.register_asset(ContentAsset.from_remote_url(url, self.folder))
        return asset.local_path

    def localize(self, text: Optional[str]) -> Optional[str]:
        """Replace known and engine-shaped asset URLs of `text` by local paths."""
        if not text:
            return text

        text = str(text)
        known = sorted(self.mounting_point.content_assets.items(), key=lambda item: -len(_path_of(item[0])))
        for url, asset in known:
            path = _path_of(url)
            if path and path in text:
                text = re.sub(_HOST_PREFIX + re.escape(path), asset.local_path, text)

        return REMOTE_ASSET_PATTERN.sub(lambda match: self.register(match.group(0)), text)


def _path_of(url: str) -> str:
    return urlparse(url).path if url.startswith(('http://', 'https://')) else url


def _same_path(left: str, right: str) -> bool:
    return _path_of(left) == _path_of(right)
