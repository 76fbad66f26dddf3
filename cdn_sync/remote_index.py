"""
Snapshot of the keys already present in the bucket.

The index lists the store once, on first query, and then answers every
membership question of the run from that snapshot. Uploads made during the
run are never added to it; ``reset()`` drops it so the next run lists again.
"""

import threading
from typing import FrozenSet, Iterable, Optional

from .storage_provider import S3StorageProvider


class RemoteKeyIndex:
    """Lazy, read-only set of remote object keys."""

    def __init__(self, storage: S3StorageProvider, prefixes: Iterable[str]):
        self.storage = storage
        self.prefixes = list(prefixes)
        self._keys: Optional[FrozenSet[str]] = None
        self._lock = threading.Lock()

    def _load(self) -> FrozenSet[str]:
        keys = set()
        for prefix in self.prefixes:
            keys.update(self.storage.list_keys(prefix))
        return frozenset(keys)

    def keys(self) -> FrozenSet[str]:
        """Return the snapshot, listing the store on first use."""
        if self._keys is None:
            with self._lock:
                if self._keys is None:
                    self._keys = self._load()
        return self._keys

    def contains(self, key: str) -> bool:
        return key in self.keys()

    def __contains__(self, key: str) -> bool:
        return self.contains(key)

    @property
    def loaded(self) -> bool:
        return self._keys is not None

    def reset(self) -> None:
        with self._lock:
            self._keys = None
