"""Content asset model (files referenced from text fields and templates)."""

import os
import posixpath
from dataclasses import dataclass
from typing import Optional

# Local content assets live under <site>/public/samples
SAMPLES_PREFIX = '/samples'


@dataclass(eq=False)
class ContentAsset:
    """A file uploaded to the engine and referenced by content.

    Attributes:
        local_path: Path relative to the public folder, e.g. "/samples/pages/photo.png"
        url: Remote URL (absolute or host-relative) once uploaded
        size: Size in bytes as reported by the engine or the filesystem
        remote_id: Engine identifier
    """
    local_path: str
    url: Optional[str] = None
    size: Optional[int] = None
    remote_id: Optional[str] = None

    @property
    def filename(self) -> str:
        return posixpath.basename(self.local_path)

    def absolute_path(self, site_path: str) -> str:
        return os.path.join(site_path, 'public', self.local_path.lstrip('/'))

    def exists(self, site_path: str) -> bool:
        return os.path.isfile(self.absolute_path(site_path))

    @classmethod
    def from_remote_url(cls, url: str, folder: str = 'samples/assets') -> 'ContentAsset':
        """Build the asset a remote URL is mirrored to locally."""
        filename = posixpath.basename(url.split('?', 1)[0])
        local_path = '/' + posixpath.join(folder.strip('/'), filename)
        return cls(local_path=local_path, url=url)
