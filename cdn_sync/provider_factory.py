"""
Factory for creating storage provider instances.

Simplifies provider selection and initialization.
"""

from typing import Dict

from shared.models import StorageProvider as ProviderType
from .errors import ConfigurationError
from .storage_provider import S3StorageProvider
from .s3_provider import S3Provider
from .local_provider import LocalStorageProvider


class StorageProviderFactory:
    """Factory for creating storage provider instances."""

    @staticmethod
    def create(provider_type: ProviderType) -> S3StorageProvider:
        """
        Create a storage provider instance.

        Args:
            provider_type: Type of provider to create

        Returns:
            Storage provider instance

        Raises:
            ConfigurationError: If provider type is not supported
        """
        if provider_type in (ProviderType.AWS_S3, ProviderType.CLOUDFLARE_R2,
                             ProviderType.GENERIC_S3):
            return S3Provider()

        elif provider_type == ProviderType.LOCAL:
            return LocalStorageProvider()

        else:
            raise ConfigurationError(f"Unknown provider type: {provider_type}")

    @staticmethod
    def connect(provider_type: ProviderType, credentials: Dict[str, str]) -> S3StorageProvider:
        """Create a provider and authenticate it, failing before any upload."""
        provider = StorageProviderFactory.create(provider_type)
        if not provider.authenticate(credentials):
            raise ConfigurationError(
                f"Failed to authenticate {StorageProviderFactory.get_provider_name(provider_type)} provider")
        return provider

    @staticmethod
    def get_provider_name(provider_type: ProviderType) -> str:
        """Get human-readable provider name."""
        names = {
            ProviderType.AWS_S3: "Amazon S3",
            ProviderType.CLOUDFLARE_R2: "Cloudflare R2",
            ProviderType.GENERIC_S3: "Generic S3-Compatible",
            ProviderType.LOCAL: "Local Directory"
        }
        return names.get(provider_type, "Unknown")
