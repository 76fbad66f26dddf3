"""
Configuration loading.

Responsibilities:
- Load ``.env`` (python-dotenv) so credentials can live outside the repo.
- Read the asset host settings from ``asset_host.yml`` into AssetHostConfig.
- Read storage credentials from ``s3.yml``, optionally scoped per
  environment (``production:``, ``staging:`` ...), with environment
  variables taking precedence over file values.
"""

import os
from pathlib import Path
from typing import Optional, Dict, Any

import yaml
from dotenv import load_dotenv

from shared.constants import (
    DEFAULT_CONFIG_PATH, DEFAULT_ENVIRONMENT, CONFIG_PATH_ENV, ENVIRONMENT_ENV,
    ACCESS_KEY_ENV, SECRET_KEY_ENV, CLOUDFLARE_R2_ENDPOINT_TEMPLATE,
)
from shared.models import AssetHostConfig, StorageProvider
from .errors import ConfigurationError


def _read_yaml(path: Path, label: str) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"{label} not found: {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Malformed {label} {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Malformed {label} {path}: expected a mapping")
    return data


def resolve_environment(environment: Optional[str] = None) -> str:
    return environment or os.getenv(ENVIRONMENT_ENV) or DEFAULT_ENVIRONMENT


def _scoped(data: Dict[str, Any], environment: str) -> Dict[str, Any]:
    """Pick the section for ``environment`` when the file is environment-scoped."""
    section = data.get(environment)
    if isinstance(section, dict):
        return section
    return data


def load_settings(config_path: Optional[str] = None,
                  environment: Optional[str] = None) -> AssetHostConfig:
    """
    Load asset host configuration.

    Priority for the file location: explicit argument → CDN_SYNC_CONFIG →
    DEFAULT_CONFIG_PATH.

    Raises:
        ConfigurationError: If the file is missing, malformed or has no bucket
    """
    load_dotenv()
    path = Path(config_path or os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH).expanduser()
    data = _scoped(_read_yaml(path, "Asset host config"), resolve_environment(environment))

    if not data.get('bucket'):
        raise ConfigurationError(f"No bucket configured in {path}")

    try:
        return AssetHostConfig.from_dict(data)
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Invalid asset host config {path}: {e}") from e


def load_credentials(config: AssetHostConfig,
                     environment: Optional[str] = None) -> Dict[str, str]:
    """
    Build the credential map handed to the storage provider.

    Returns:
        Dictionary with access_key_id, secret_access_key, endpoint, region,
        bucket and (for R2) account_id, or base_path for local storage.
    """
    load_dotenv()

    if config.provider == StorageProvider.LOCAL:
        if not config.endpoint:
            raise ConfigurationError("Local storage requires 'endpoint' (target directory)")
        return {'base_path': config.endpoint, 'bucket': config.bucket}

    file_creds: Dict[str, Any] = {}
    s3_path = Path(config.s3_config).expanduser()
    if s3_path.exists():
        file_creds = _scoped(_read_yaml(s3_path, "Credentials file"), resolve_environment(environment))

    creds = {
        'access_key_id': os.getenv(ACCESS_KEY_ENV) or file_creds.get('access_key_id'),
        'secret_access_key': os.getenv(SECRET_KEY_ENV) or file_creds.get('secret_access_key'),
        'endpoint': config.endpoint or file_creds.get('endpoint'),
        'region': config.region or file_creds.get('region'),
        'bucket': config.bucket,
    }

    missing = [k for k in ('access_key_id', 'secret_access_key') if not creds[k]]
    if missing:
        raise ConfigurationError(
            f"Missing credentials ({', '.join(missing)}): set them in {s3_path} "
            f"or via {ACCESS_KEY_ENV}/{SECRET_KEY_ENV}")

    if config.provider == StorageProvider.CLOUDFLARE_R2:
        account_id = file_creds.get('account_id')
        if not account_id and creds['endpoint']:
            # Endpoint format: https://<account_id>.r2.cloudflarestorage.com
            try:
                account_id = creds['endpoint'].split('//')[1].split('.')[0]
            except IndexError:
                account_id = None
        if not account_id:
            raise ConfigurationError("Cloudflare R2 requires 'account_id' or an R2 endpoint")
        creds['account_id'] = account_id
        creds['endpoint'] = CLOUDFLARE_R2_ENDPOINT_TEMPLATE.format(account_id=account_id)

    return {k: v for k, v in creds.items() if v is not None}
