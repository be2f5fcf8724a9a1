"""L2: on-disk image store split into ``images`` and ``thumbnails`` namespaces."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path

from imagelink.errors import DecodeError
from imagelink.models.types import CachedImage, CacheNamespace

LOGGER = logging.getLogger(__name__)


class DiskImageStore:
    """L2: persists encoded image bytes under ``<root>/<namespace>/<key>``.

    Entries never expire; :meth:`clear_all` is the only way to reclaim space.
    I/O failures never reach the caller: reads report a miss and writes are
    logged and dropped.
    """

    def __init__(self, root: Path):
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, namespace: CacheNamespace, key: str) -> Path:
        return self._root / CacheNamespace(namespace).value / key

    def load(self, namespace: CacheNamespace, key: str) -> bytes | None:
        path = self.path_for(namespace, key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            LOGGER.warning("Failed to read cache entry %s: %s", path, exc)
            return None

    def load_image(self, namespace: CacheNamespace, key: str) -> CachedImage | None:
        """Return the decoded entry, or ``None`` when absent or undecodable."""
        data = self.load(namespace, key)
        if data is None:
            return None
        try:
            return CachedImage.decode(key, data)
        except DecodeError as exc:
            LOGGER.warning("Ignoring corrupt cache entry %s/%s: %s", namespace.value, key, exc)
            return None

    def save(self, namespace: CacheNamespace, key: str, data: bytes) -> bool:
        """Write *data* atomically; returns ``False`` if the write failed."""
        path = self.path_for(namespace, key)
        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=path.parent)
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(tmp_name, path)
            tmp_name = None
            return True
        except OSError as exc:
            LOGGER.warning("Failed to write cache entry %s: %s", path, exc)
            return False
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

    def clear_all(self) -> None:
        """Remove every namespace directory and recreate it empty."""
        for namespace in CacheNamespace:
            directory = self._root / namespace.value
            try:
                shutil.rmtree(directory)
            except FileNotFoundError:
                pass
            except OSError as exc:
                LOGGER.warning("Failed to remove %s: %s", directory, exc)
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for namespace in CacheNamespace:
            directory = self._root / namespace.value
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                LOGGER.warning("Failed to create %s: %s", directory, exc)

    def disk_usage_bytes(self, namespace: CacheNamespace | None = None) -> int:
        """Total size of stored entries; a hook for external reclamation policies."""
        namespaces = [namespace] if namespace is not None else list(CacheNamespace)
        total = 0
        for ns in namespaces:
            directory = self._root / CacheNamespace(ns).value
            if not directory.is_dir():
                continue
            for entry in directory.iterdir():
                try:
                    if entry.is_file():
                        total += entry.stat().st_size
                except OSError:
                    continue
        return total
