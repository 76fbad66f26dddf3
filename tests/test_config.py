import pytest

from shared.models import StorageProvider
from cdn_sync.config import load_credentials, load_settings
from cdn_sync.errors import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "CDN_SYNC_CONFIG", "CDN_SYNC_ENV"):
        monkeypatch.delenv(name, raising=False)


def write_yaml(path, text):
    path.write_text(text)
    return path


def test_load_settings(tmp_path):
    path = write_yaml(tmp_path / "asset_host.yml", """
bucket: assets-bucket
provider: r2
key_prefix: static
gzip: true
gzip_extensions: [.JS, css]
disable_cdn_for: [assets/admin/*]
unknown_option: ignored
""")
    config = load_settings(str(path))
    assert config.bucket == "assets-bucket"
    assert config.provider == StorageProvider.CLOUDFLARE_R2
    assert config.gzip is True
    assert config.gzip_extensions == ["js", "css"]
    assert config.disable_cdn_for == ["assets/admin/*"]
    assert config.package_path == "assets"


def test_load_settings_from_env_scoped_file(tmp_path, monkeypatch):
    path = write_yaml(tmp_path / "asset_host.yml", """
production:
  bucket: prod-assets
staging:
  bucket: staging-assets
""")
    monkeypatch.setenv("CDN_SYNC_CONFIG", str(path))
    assert load_settings().bucket == "prod-assets"
    assert load_settings(environment="staging").bucket == "staging-assets"


@pytest.mark.parametrize("text", ["bucket: [unclosed", "- just\n- a list\n", "gzip: true\n"])
def test_bad_settings_raise(tmp_path, text):
    path = write_yaml(tmp_path / "asset_host.yml", text)
    with pytest.raises(ConfigurationError):
        load_settings(str(path))


def test_missing_settings_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_settings(str(tmp_path / "nope.yml"))


def test_unknown_provider_is_config_error(tmp_path):
    path = write_yaml(tmp_path / "asset_host.yml", "bucket: b\nprovider: ftp\n")
    with pytest.raises(ConfigurationError):
        load_settings(str(path))


def test_credentials_scoped_by_environment(tmp_path, make_config):
    s3 = write_yaml(tmp_path / "s3.yml", """
production:
  access_key_id: PROD_ID
  secret_access_key: PROD_SECRET
staging:
  access_key_id: STAGE_ID
  secret_access_key: STAGE_SECRET
""")
    config = make_config(s3_config=str(s3), region="eu-west-1")
    creds = load_credentials(config, "staging")
    assert creds == {
        'access_key_id': 'STAGE_ID',
        'secret_access_key': 'STAGE_SECRET',
        'region': 'eu-west-1',
        'bucket': 'test-bucket',
    }


def test_environment_variables_override_file(tmp_path, make_config, monkeypatch):
    s3 = write_yaml(tmp_path / "s3.yml", "access_key_id: FILE_ID\nsecret_access_key: FILE_SECRET\n")
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "ENV_ID")
    creds = load_credentials(make_config(s3_config=str(s3)))
    assert creds['access_key_id'] == "ENV_ID"
    assert creds['secret_access_key'] == "FILE_SECRET"


def test_missing_credentials(tmp_path, make_config):
    with pytest.raises(ConfigurationError):
        load_credentials(make_config(s3_config=str(tmp_path / "missing.yml")))


def test_r2_account_from_endpoint(tmp_path, make_config, monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "ID")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "SECRET")
    config = make_config(provider=StorageProvider.CLOUDFLARE_R2,
                         endpoint="https://abc123.r2.cloudflarestorage.com",
                         s3_config=str(tmp_path / "missing.yml"))
    creds = load_credentials(config)
    assert creds['account_id'] == "abc123"
    assert creds['endpoint'] == "https://abc123.r2.cloudflarestorage.com"


def test_local_provider_needs_endpoint(tmp_path, make_config):
    with pytest.raises(ConfigurationError):
        load_credentials(make_config(provider=StorageProvider.LOCAL))
    creds = load_credentials(make_config(provider=StorageProvider.LOCAL, endpoint=str(tmp_path)))
    assert creds == {'base_path': str(tmp_path), 'bucket': 'test-bucket'}
