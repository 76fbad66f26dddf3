"""
Key mapper: derives the bucket key of a local asset.

A key is built from explicit fields instead of string substitution:

    <key prefix>/<digest>  /  <package path>/<variant prefix>  /  <rest of path>
    \\_____ prefix ______/    \\________ namespace __________/    \\_ relative _/

- Images drop the package path entirely so they live at a flatter address.
- Other plain assets get the plain prefix after the package path.
- Gzip variants get the gzip prefix after the package path.
- Paths outside the package directory keep their relative path unchanged.
"""

import hashlib
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from shared.constants import KEY_DIGEST_LENGTH
from shared.models import AssetHostConfig, ObjectKey, Variant, split_segments
from .errors import ConfigurationError, UploadError


def file_digest(path, length: int = KEY_DIGEST_LENGTH) -> str:
    """Short MD5 hex digest of a file's content."""
    digest = hashlib.md5()
    try:
        with open(path, 'rb') as f:
            for chunk in iter(lambda: f.read(65536), b""):
                digest.update(chunk)
    except OSError as e:
        raise UploadError(f"Cannot read {path}: {e}") from e
    return digest.hexdigest()[:length]


class KeyMapper:
    """Maps asset paths to object keys for a given configuration."""

    def __init__(self, config: AssetHostConfig):
        self.config = config
        self._digests: Dict[Path, str] = {}

    def prefix_for(self, path: Path) -> Tuple[str, ...]:
        """Key-prefix function: static prefix plus optional content digest."""
        prefix = self.config.prefix_segments
        if not self.config.key_digest:
            return prefix
        if path not in self._digests:
            self._digests[path] = file_digest(path)
        return prefix + (self._digests[path],)

    def _variant_prefix(self, variant: Variant) -> Tuple[str, ...]:
        if variant == Variant.GZIP:
            return split_segments(self.config.gzip_prefix)
        return split_segments(self.config.plain_prefix)

    def key_for(self, path, variant: Variant = Variant.PLAIN) -> Optional[ObjectKey]:
        """
        Compute the object key of ``path`` for ``variant``.

        Returns:
            ObjectKey, or None when the path is a compressed artifact or the
            gzip variant is requested for a path that is not gzip-eligible.
        """
        path = Path(path)
        if self.config.is_compressed(path):
            return None
        if variant == Variant.GZIP and not self.config.gzip_allowed_for(path):
            return None

        relative = tuple(self.config.relative_path(path).split("/"))
        package = self.config.package_segments
        prefix = self.prefix_for(path)

        if not package or relative[:len(package)] != package:
            return ObjectKey(prefix=prefix, namespace=(), relative=relative, variant=variant)

        rest = relative[len(package):]
        if variant == Variant.PLAIN and self.config.is_image(path):
            return ObjectKey(prefix=prefix, namespace=(), relative=rest, variant=variant)

        return ObjectKey(prefix=prefix, namespace=package + self._variant_prefix(variant),
                         relative=rest, variant=variant)

    def key_map(self, paths: Iterable[Path], variant: Variant = Variant.PLAIN) -> Dict[str, Path]:
        """
        Build the ordered ``key -> path`` map of one phase.

        Raises:
            ConfigurationError: If two distinct paths map to the same key
        """
        result: Dict[str, Path] = {}
        for path in paths:
            key = self.key_for(path, variant)
            if key is None:
                continue
            key_str = str(key)
            if key_str in result and result[key_str] != path:
                raise ConfigurationError(
                    f"Key collision: {result[key_str]} and {path} both map to {key_str}")
            result[key_str] = path
        return result

    def listing_prefixes(self) -> List[str]:
        """Remote prefixes covering every key this mapper can produce."""
        prefix = "/".join(self.config.prefix_segments)
        return [prefix + "/"] if prefix else [""]
