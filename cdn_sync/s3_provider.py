"""
S3-compatible storage provider implementation.

Works against AWS S3 directly, or against Cloudflare R2 and other
S3-compatible services through a custom endpoint.
"""

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError
from typing import Optional, Dict, Iterator

from shared.models import UploadHeaders
from .errors import UploadError
from .storage_provider import S3StorageProvider


class S3Provider(S3StorageProvider):
    """
    S3 storage implementation using the boto3 S3 client.
    """

    def __init__(self, region_name: Optional[str] = None):
        self.s3_client = None
        self.bucket_name = None
        self.endpoint_url = None
        self.region_name = region_name

    def authenticate(self, credentials: Dict[str, str]) -> bool:
        """
        Create the S3 client and verify bucket access.

        Args:
            credentials: Must contain:
                - access_key_id: Access key ID
                - secret_access_key: Secret access key
                - bucket: Bucket name
                - endpoint: Custom endpoint URL (optional, R2/generic S3)
                - region: Region name (optional)
        """
        try:
            self.endpoint_url = credentials.get('endpoint')
            self.bucket_name = credentials.get('bucket')
            region = credentials.get('region') or self.region_name
            if self.endpoint_url and 'r2.cloudflarestorage.com' in self.endpoint_url:
                region = 'auto'  # R2 uses 'auto' region

            self.s3_client = boto3.client(
                's3',
                endpoint_url=self.endpoint_url,
                aws_access_key_id=credentials['access_key_id'],
                aws_secret_access_key=credentials['secret_access_key'],
                region_name=region
            )

            if self.bucket_name:
                self.s3_client.head_bucket(Bucket=self.bucket_name)
            return True

        except (ClientError, BotoCoreError, NoCredentialsError, KeyError) as e:
            print(f"S3 authentication failed: {e}")
            return False

    def list_keys(self, prefix: Optional[str] = None) -> Iterator[str]:
        """List keys in the bucket, following pagination."""
        kwargs = {'Bucket': self.bucket_name}
        if prefix:
            kwargs['Prefix'] = prefix

        try:
            paginator = self.s3_client.get_paginator('list_objects_v2')
            for page in paginator.paginate(**kwargs):
                for obj in page.get('Contents', []):
                    yield obj['Key']
        except (ClientError, BotoCoreError) as e:
            raise UploadError(f"Listing s3://{self.bucket_name}/{prefix or ''} failed: {e}") from e

    def write_object(self, local_path: str, remote_key: str, headers: UploadHeaders) -> None:
        """Upload file with its headers."""
        try:
            self.s3_client.upload_file(
                str(local_path), self.bucket_name, remote_key,
                ExtraArgs=headers.to_extra_args()
            )
        except (ClientError, BotoCoreError, FileNotFoundError) as e:
            raise UploadError(f"Upload of {remote_key} failed: {e}", key=remote_key) from e
