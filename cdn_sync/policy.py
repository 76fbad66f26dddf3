"""
Upload policy: decides whether a key has to be (re)uploaded.

Rules are evaluated in order and the first match wins:

1. CDN delivery disabled for the source       -> skip
2. Gzip variant of a gzip-eligible source     -> upload
3. Stylesheet, CSS rewriting on, and some
   image of the asset set not yet remote      -> upload
4. force_write, or key missing remotely       -> upload
"""

from pathlib import Path
from typing import Dict, TYPE_CHECKING

from shared.models import AssetHostConfig, Variant
from .remote_index import RemoteKeyIndex

if TYPE_CHECKING:
    from .uploader import SyncContext


def images_pending(plain_keys: Dict[str, Path], index: RemoteKeyIndex,
                   config: AssetHostConfig) -> bool:
    """
    True when at least one uploadable image of the full plain key map is
    not remote yet. CDN-disabled images are never uploaded and never count.

    Computed once per run, before any upload, so that stylesheet decisions
    never depend on uploads made earlier in the same run.
    """
    return any(
        config.is_image(path) and not config.cdn_disabled_for(path) and key not in index
        for key, path in plain_keys.items()
    )


def should_upload(key: str, path: Path, variant: Variant, context: 'SyncContext') -> bool:
    config = context.config

    if config.cdn_disabled_for(path):
        return False

    if variant == Variant.GZIP and config.gzip_allowed_for(path):
        return True

    # Any pending image forces every stylesheet, not only those referencing it
    if config.is_css(path) and config.rewrite_css_path and context.images_pending:
        return True

    return context.options.force_write or key not in context.index
