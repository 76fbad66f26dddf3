"""
Content preparation for uploads.

Produces the upload-ready file of a key (stylesheet rewrite, then gzip) and
the headers that go with it. Every temporary artifact is scoped to the
``prepared_content`` block and removed on exit, whatever the outcome.
"""

import gzip
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterator, List, Optional, TYPE_CHECKING

import yaml

import shared
from shared.constants import (
    MIME_TYPES_FILENAME, DEFAULT_CONTENT_TYPE, GZIP_CONTENT_ENCODING, GZIP_COMPRESS_LEVEL,
)
from shared.models import UploadHeaders, Variant
from .errors import UploadError

if TYPE_CHECKING:
    from .uploader import SyncContext


@lru_cache(maxsize=None)
def ext_to_mime() -> Dict[str, str]:
    """Extension -> content type, inverted from ``mime_types.yml``."""
    table_path = Path(shared.__file__).parent / MIME_TYPES_FILENAME
    with open(table_path, 'r', encoding='utf-8') as f:
        table = yaml.safe_load(f) or {}
    return {str(ext).lower(): mime for mime, exts in table.items() for ext in exts}


def headers_for(extension: Optional[str], gzip_variant: bool = False) -> UploadHeaders:
    mime = ext_to_mime().get((extension or "").lstrip(".").lower(), DEFAULT_CONTENT_TYPE)
    headers = UploadHeaders(content_type=mime)
    if gzip_variant:
        headers.content_encoding = GZIP_CONTENT_ENCODING
    return headers


def gzip_file(source: Path) -> Path:
    """Compress ``source`` into a new temporary file and return its path."""
    dst = tempfile.NamedTemporaryFile(prefix="cdn-sync-gz-", suffix=".gz", delete=False)
    tmp_path = Path(dst.name)
    try:
        with dst, open(source, 'rb') as src:
            # mtime=0 keeps the output stable for identical input
            with gzip.GzipFile(filename="", mode='wb', fileobj=dst,
                               compresslevel=GZIP_COMPRESS_LEVEL, mtime=0) as gz:
                shutil.copyfileobj(src, gz)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise UploadError(f"Cannot compress {source}: {e}") from e
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return tmp_path


@dataclass
class PreparedContent:
    path: Path
    headers: UploadHeaders


@contextmanager
def prepared_content(path: Path, variant: Variant,
                     context: 'SyncContext') -> Iterator[PreparedContent]:
    """
    Yield the upload-ready file and headers for ``path``.

    The source file is never modified; rewritten and compressed copies are
    deleted when the block exits.
    """
    config = context.config
    temporaries: List[Path] = []
    data_path = Path(path)
    try:
        if config.rewrite_css_path and config.is_css(path):
            data_path = context.css_rewriter.rewrite(path)
            temporaries.append(data_path)

        gzip_variant = variant == Variant.GZIP
        if gzip_variant:
            data_path = gzip_file(data_path)
            temporaries.append(data_path)

        yield PreparedContent(path=data_path, headers=headers_for(Path(path).suffix, gzip_variant))
    finally:
        for tmp in temporaries:
            try:
                tmp.unlink()
            except FileNotFoundError:
                pass
