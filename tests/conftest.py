import tempfile
from pathlib import Path

import pytest

from shared.models import AssetHostConfig
from cdn_sync.storage_provider import S3StorageProvider


class InMemoryStorage(S3StorageProvider):
    """Bucket double that records listings and writes."""

    def __init__(self, keys=()):
        self.bucket_name = "test-bucket"
        self.objects = {k: b"" for k in keys}
        self.writes = []
        self.list_calls = []

    def authenticate(self, credentials):
        return True

    def list_keys(self, prefix=None):
        self.list_calls.append(prefix)
        return [k for k in list(self.objects) if not prefix or k.startswith(prefix)]

    def write_object(self, local_path, remote_key, headers):
        data = Path(local_path).read_bytes()
        self.objects[remote_key] = data
        self.writes.append((remote_key, data, headers))

    @property
    def written_keys(self):
        return [w[0] for w in self.writes]


@pytest.fixture
def public(tmp_path):
    root = tmp_path / "public"
    root.mkdir()
    return root


@pytest.fixture
def add_asset(public):
    def _add(rel, content="body {}"):
        path = public / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
        return path.resolve()
    return _add


@pytest.fixture
def make_config(public):
    def _make(**overrides):
        values = dict(
            bucket="test-bucket",
            public_path=str(public),
            key_prefix="static",
            key_digest=False,
            package_path="assets",
            plain_prefix="plain",
            gzip=False,
            gzip_prefix="gz",
            rewrite_css_path=False,
        )
        values.update(overrides)
        return AssetHostConfig(**values)
    return _make


@pytest.fixture
def temp_dir(tmp_path, monkeypatch):
    """Redirect temporary files so tests can check nothing is left behind."""
    path = tmp_path / "tmp"
    path.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(path))
    return path
