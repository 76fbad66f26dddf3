"""
Stylesheet rewriter.

Replaces ``url(...)`` references that point at assets synced by the run
with the CDN address of their plain object key, so a stylesheet served
from the CDN loads its images from the CDN as well. Files the run never
uploads keep their original reference.
"""

import re
import tempfile
from pathlib import Path
from typing import Dict

from shared.models import AssetHostConfig
from .errors import UploadError

URL_PATTERN = re.compile(r"""url\(\s*(['"]?)([^'")]+?)\1\s*\)""", re.IGNORECASE)
SKIPPED_SCHEMES = ("data:", "http:", "https:", "//", "#", "about:")


class CssRewriter:
    """Rewrites internal references of stylesheets into temporary copies."""

    def __init__(self, config: AssetHostConfig, plain_keys: Dict[str, Path]):
        """
        Args:
            config: Asset host configuration
            plain_keys: The run's plain ``key -> path`` map
        """
        self.config = config
        # CDN-disabled assets are never uploaded, so they are not targets
        self.targets: Dict[Path, str] = {
            Path(path).resolve(): key
            for key, path in plain_keys.items()
            if not config.cdn_disabled_for(path)
        }

    def _resolve(self, stylesheet: Path, target: str) -> Path:
        if target.startswith("/"):
            candidate = self.config.public_root / target.lstrip("/")
        else:
            candidate = stylesheet.parent / target
        return candidate.resolve()

    def rewrite_url(self, stylesheet: Path, reference: str) -> str:
        """Return the CDN form of ``reference``, or the reference unchanged."""
        if reference.lower().startswith(SKIPPED_SCHEMES):
            return reference

        target, suffix = reference, ""
        for sep in ("?", "#"):
            if sep in target:
                target, rest = target.split(sep, 1)
                suffix = sep + rest + suffix
                break

        key = self.targets.get(self._resolve(stylesheet, target))
        if key is None:
            return reference

        host = (self.config.asset_host or "").rstrip("/")
        return f"{host}/{key}{suffix}"

    def rewrite_text(self, stylesheet: Path, css: str) -> str:
        def replace(match):
            quote, reference = match.group(1), match.group(2).strip()
            return f"url({quote}{self.rewrite_url(stylesheet, reference)}{quote})"

        return URL_PATTERN.sub(replace, css)

    def rewrite(self, stylesheet) -> Path:
        """
        Rewrite ``stylesheet`` into a temporary file.

        Returns:
            Path of the temporary file. The caller owns it and must delete it.
        """
        stylesheet = Path(stylesheet).resolve()
        try:
            css = stylesheet.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise UploadError(f"Cannot read stylesheet {stylesheet}: {e}") from e

        with tempfile.NamedTemporaryFile("w", encoding="utf-8", suffix=".css",
                                         prefix="cdn-sync-css-", delete=False) as tmp:
            tmp.write(self.rewrite_text(stylesheet, css))
        return Path(tmp.name)
