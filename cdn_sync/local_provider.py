"""
Local filesystem storage provider.
Implements the S3StorageProvider interface by mirroring keys into a directory.
"""

import os
import shutil
from typing import Optional, Dict, Iterator
from pathlib import Path

from shared.models import UploadHeaders
from .errors import UploadError
from .storage_provider import S3StorageProvider


class LocalStorageProvider(S3StorageProvider):
    """
    Storage provider that uses the local filesystem.
    Useful for serving assets from a NAS mount or for staging a CDN origin.
    """

    def __init__(self):
        self.base_path: Optional[Path] = None
        self.bucket_name: Optional[str] = None

    def authenticate(self, credentials: Dict[str, str]) -> bool:
        """
        'Authenticate' by setting the base path.
        In local mode, 'base_path' or 'endpoint' is the root directory.
        """
        path = credentials.get('base_path') or credentials.get('endpoint')
        if not path:
            return False

        self.base_path = Path(path).expanduser().absolute()
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.bucket_name = credentials.get('bucket') or self.bucket_name
        return True

    @property
    def bucket_root(self) -> Path:
        if self.bucket_name in [None, ".", "", "default"]:
            return self.base_path
        return self.base_path / self.bucket_name

    def list_keys(self, prefix: Optional[str] = None) -> Iterator[str]:
        root = self.bucket_root
        if not root.exists():
            return

        for dirpath, _, filenames in os.walk(root):
            for filename in filenames:
                key = (Path(dirpath) / filename).relative_to(root).as_posix()
                if not prefix or key.startswith(prefix):
                    yield key

    def write_object(self, local_path: str, remote_key: str, headers: UploadHeaders) -> None:
        dest_path = self.bucket_root / remote_key
        try:
            dest_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(local_path, dest_path)
        except OSError as e:
            raise UploadError(f"Local write of {remote_key} failed: {e}", key=remote_key) from e
