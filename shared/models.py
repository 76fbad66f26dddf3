"""
Data models for asset keys, upload headers, options and run reports.

This module defines the core data structures shared by the key mapper,
upload policy, content preparer and upload engine.
"""

from dataclasses import dataclass, asdict, field
from typing import List, Dict, Optional, Any, Tuple
from enum import Enum
from datetime import datetime, timedelta, timezone
from fnmatch import fnmatch
from pathlib import Path
import threading

from shared.constants import (
    DEFAULT_ASSET_DIRS, DEFAULT_PACKAGE_PATH, DEFAULT_PLAIN_PREFIX,
    DEFAULT_GZIP_PREFIX, DEFAULT_PUBLIC_PATH, DEFAULT_S3_CONFIG_PATH,
    IMAGE_EXTENSIONS, CSS_EXTENSIONS, GZIP_EXTENSIONS, COMPRESSED_EXTENSIONS,
    CACHE_CONTROL, PUBLIC_READ_ACL, ONE_YEAR_SECONDS, GZIP_CONTENT_ENCODING,
    DEFAULT_PARALLEL_UPLOADS,
)


class StorageProvider(Enum):
    """Supported object storage backends."""
    AWS_S3 = "s3"
    CLOUDFLARE_R2 = "r2"
    GENERIC_S3 = "generic"
    LOCAL = "local"


class Variant(Enum):
    """Form in which an asset is delivered."""
    PLAIN = "plain"
    GZIP = "gzip"


def _extension(path) -> str:
    return Path(path).suffix.lstrip(".").lower()


def split_segments(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(part for part in str(value).strip("/").split("/") if part)


@dataclass(frozen=True)
class ObjectKey:
    """
    Structured address of an object in the bucket.

    Attributes:
        prefix: Output of the key-prefix function (static prefix, digest)
        namespace: Segments of the package path plus any variant sub-prefix
        relative: Remaining path segments of the asset
        variant: Plain or gzip delivery form
    """
    prefix: Tuple[str, ...]
    namespace: Tuple[str, ...]
    relative: Tuple[str, ...]
    variant: Variant = Variant.PLAIN

    @property
    def segments(self) -> Tuple[str, ...]:
        return self.prefix + self.namespace + self.relative

    def __str__(self) -> str:
        return "/".join(s for s in self.segments if s)


@dataclass
class AssetHostConfig:
    """
    Asset host configuration loaded from asset_host.yml.

    Holds the naming rules used to build object keys and the predicates
    that classify asset paths.
    """
    bucket: str
    provider: StorageProvider = StorageProvider.AWS_S3
    public_path: str = DEFAULT_PUBLIC_PATH
    asset_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_ASSET_DIRS))
    key_prefix: str = ""
    key_digest: bool = True
    package_path: str = DEFAULT_PACKAGE_PATH
    plain_prefix: str = DEFAULT_PLAIN_PREFIX
    gzip: bool = False
    gzip_prefix: str = DEFAULT_GZIP_PREFIX
    gzip_extensions: List[str] = field(default_factory=lambda: list(GZIP_EXTENSIONS))
    gzip_exclude: List[str] = field(default_factory=list)
    image_extensions: List[str] = field(default_factory=lambda: list(IMAGE_EXTENSIONS))
    css_extensions: List[str] = field(default_factory=lambda: list(CSS_EXTENSIONS))
    rewrite_css_path: bool = True
    asset_host: Optional[str] = None
    disable_cdn_for: List[str] = field(default_factory=list)
    s3_config: str = DEFAULT_S3_CONFIG_PATH
    endpoint: Optional[str] = None
    region: Optional[str] = None

    @property
    def public_root(self) -> Path:
        return Path(self.public_path).expanduser().resolve()

    def relative_path(self, path) -> str:
        """POSIX path of an asset relative to the public root."""
        path = Path(path)
        try:
            return path.resolve().relative_to(self.public_root).as_posix()
        except ValueError:
            return path.as_posix().lstrip("/")

    def is_image(self, path) -> bool:
        return _extension(path) in self.image_extensions

    def is_css(self, path) -> bool:
        return _extension(path) in self.css_extensions

    def is_compressed(self, path) -> bool:
        """Already-compressed build byproducts are never synced."""
        return _extension(path) in COMPRESSED_EXTENSIONS

    def cdn_disabled_for(self, path) -> bool:
        rel = self.relative_path(path)
        return any(fnmatch(rel, pattern.lstrip("/")) for pattern in self.disable_cdn_for)

    def gzip_allowed_for(self, path) -> bool:
        if not self.gzip or self.is_compressed(path):
            return False
        if _extension(path) not in self.gzip_extensions:
            return False
        rel = self.relative_path(path)
        return not any(fnmatch(rel, pattern.lstrip("/")) for pattern in self.gzip_exclude)

    @property
    def package_segments(self) -> Tuple[str, ...]:
        return split_segments(self.package_path)

    @property
    def prefix_segments(self) -> Tuple[str, ...]:
        return split_segments(self.key_prefix)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['provider'] = self.provider.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AssetHostConfig':
        """Create config from dictionary, filtering unknown keys."""
        import dataclasses
        field_names = {f.name for f in dataclasses.fields(cls)}
        filtered_data = {k: v for k, v in data.items() if k in field_names}

        if 'provider' in filtered_data:
            filtered_data['provider'] = StorageProvider(filtered_data['provider'])

        # Extensions are compared lower-case without the leading dot
        for name in ('gzip_extensions', 'image_extensions', 'css_extensions'):
            if name in filtered_data:
                filtered_data[name] = [str(e).lstrip(".").lower() for e in filtered_data[name]]

        return cls(**filtered_data)


@dataclass
class UploadHeaders:
    """Metadata attached to an uploaded object."""
    content_type: str
    cache_control: str = CACHE_CONTROL
    expires: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc) + timedelta(seconds=ONE_YEAR_SECONDS))
    acl: str = PUBLIC_READ_ACL
    content_encoding: Optional[str] = None

    @property
    def gzip(self) -> bool:
        return self.content_encoding == GZIP_CONTENT_ENCODING

    def to_extra_args(self) -> Dict[str, Any]:
        """Convert to boto3 ``ExtraArgs``."""
        extra_args = {
            'ContentType': self.content_type,
            'CacheControl': self.cache_control,
            'Expires': self.expires,
            'ACL': self.acl,
        }
        if self.content_encoding:
            extra_args['ContentEncoding'] = self.content_encoding
        return extra_args


@dataclass
class SyncOptions:
    """Per-run flags accepted by the upload action."""
    verbose: bool = False
    dryrun: bool = False
    force_write: bool = False
    parallel: int = DEFAULT_PARALLEL_UPLOADS
    cancel_event: Optional[threading.Event] = None

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()


@dataclass(frozen=True)
class SyncDecision:
    """Outcome of the upload policy for one key."""
    key: str
    path: Path
    variant: Variant
    upload: bool

    @property
    def marker(self) -> str:
        return "+" if self.upload else "="

    def __str__(self) -> str:
        return f"{self.marker} {self.key}"


@dataclass
class SyncReport:
    """Decisions taken during one run, in the order they were made."""
    decisions: List[SyncDecision] = field(default_factory=list)
    dryrun: bool = False

    @property
    def uploaded(self) -> List[SyncDecision]:
        return [d for d in self.decisions if d.upload]

    @property
    def unchanged(self) -> List[SyncDecision]:
        return [d for d in self.decisions if not d.upload]

    def for_variant(self, variant: Variant) -> List[SyncDecision]:
        return [d for d in self.decisions if d.variant == variant]

    def decision_for(self, key: str) -> Optional[SyncDecision]:
        for decision in self.decisions:
            if decision.key == key:
                return decision
        return None
