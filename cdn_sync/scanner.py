"""
Asset scanner.
Recursively enumerates the files under the configured asset directories
of the public root. Directories are skipped; missing asset dirs are ignored.
"""

import os
from pathlib import Path
from typing import Iterator, Iterable

from shared.models import AssetHostConfig


def iter_asset_paths(public_path, asset_dirs: Iterable[str]) -> Iterator[Path]:
    """
    Lazily yield absolute paths of every file under ``public_path/<asset_dir>``.

    Order is deterministic: asset dirs in configured order, then sorted
    directory walk.
    """
    root = Path(public_path).expanduser().resolve()
    seen = set()

    for asset_dir in asset_dirs:
        dir_path = root / asset_dir.strip("/")
        if not dir_path.is_dir():
            continue

        for dirpath, dirnames, filenames in os.walk(dir_path):
            dirnames.sort()
            for filename in sorted(filenames):
                file_path = Path(dirpath) / filename
                # Nested or repeated asset dirs must not yield a file twice
                if file_path in seen:
                    continue
                seen.add(file_path)
                yield file_path


def scan_assets(config: AssetHostConfig) -> Iterator[Path]:
    return iter_asset_paths(config.public_root, config.asset_dirs)
