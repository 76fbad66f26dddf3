"""
Abstract base class for object storage providers.

This module defines the narrow interface the upload engine consumes,
allowing assets to be published to AWS S3, Cloudflare R2, any other
S3-compatible service, or a local directory.
"""

from abc import ABC, abstractmethod
from typing import Optional, Dict, Iterator

from shared.models import UploadHeaders


class S3StorageProvider(ABC):
    """
    Abstract base class for storage providers.

    Providers raise ``UploadError`` on failure instead of returning a
    status flag: any failed listing or write aborts the run.
    """

    bucket_name: Optional[str] = None

    @abstractmethod
    def authenticate(self, credentials: Dict[str, str]) -> bool:
        """
        Authenticate with the storage provider.

        Args:
            credentials: Dictionary containing authentication credentials
                        (access_key_id, secret_access_key, endpoint, etc.)

        Returns:
            True if authentication successful, False otherwise
        """
        pass

    @abstractmethod
    def list_keys(self, prefix: Optional[str] = None) -> Iterator[str]:
        """
        List object keys in the bucket.

        Args:
            prefix: Optional prefix to filter keys

        Returns:
            Iterator over key strings
        """
        pass

    @abstractmethod
    def write_object(self, local_path: str, remote_key: str, headers: UploadHeaders) -> None:
        """
        Write a file to storage, replacing any existing object.

        Args:
            local_path: Path to the upload-ready local file
            remote_key: Key (path) for file in bucket
            headers: Content type, caching and encoding headers
        """
        pass
