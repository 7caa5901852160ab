"""
Durable snapshot storage.

A snapshot is an opaque blob (the serialized sqlite database) kept under a
fixed key. ``SnapshotStore`` keeps one file per key in the application
directory; ``MemorySnapshotStore`` keeps them in a dict for tests and
throwaway sessions.
"""

import logging
import os
import tempfile

from visitor_log.errors import PersistenceFailure

logger = logging.getLogger(__name__)


class SnapshotStore:
    """File-backed blob store. One ``<key>.snapshot`` file per key."""

    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.snapshot")

    def load(self, key: str):
        """Return the stored bytes, or None when nothing was saved yet."""
        path = self._path(key)
        if not os.path.exists(path):
            return None
        with open(path, "rb") as f:
            return f.read()

    def save(self, key: str, data: bytes):
        """Atomically replace the blob stored under key."""
        tmp_path = None
        try:
            os.makedirs(self.directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, self._path(key))
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise PersistenceFailure(f"Could not save snapshot '{key}': {e}") from e
        logger.debug("Saved snapshot %s (%d bytes)", key, len(data))

    def delete(self, key: str):
        path = self._path(key)
        if os.path.exists(path):
            os.remove(path)


class MemorySnapshotStore:
    """Keeps snapshots in memory. Nothing survives the process."""

    def __init__(self):
        self.blobs = {}

    def load(self, key: str):
        return self.blobs.get(key)

    def save(self, key: str, data: bytes):
        self.blobs[key] = bytes(data)

    def delete(self, key: str):
        self.blobs.pop(key, None)
