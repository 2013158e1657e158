"""Caches for artifacts derived from files on disk.

Both caches are keyed on the source file's mtime: any change to the source
turns the entry into a miss. Neither ever raises on a bad entry.
"""

import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generic, Optional, TypeVar, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

from claude_dashboard import config

logger = logging.getLogger(__name__)

CACHE_VERSION = 1

T = TypeVar("T")


def atomic_write_text(path: Path, text: str) -> None:
    """Write to a sibling .tmp file, then rename it over the target."""
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


class DiskCache:
    """JSON blob cache stored as one file per key."""

    def __init__(self, cache_dir: Optional[Path] = None):
        if cache_dir is None:
            cache_dir = config.CACHE_DIR
        self.cache_dir = Path(cache_dir)

    def cache_path(self, cache_key: str) -> Path:
        return self.cache_dir / f"{cache_key}.cache.json"

    def read(
        self,
        cache_key: str,
        source_mtime_ms: float,
        schema: Union[type[T], TypeAdapter],
    ) -> Optional[T]:
        """Return the cached value, or None if absent, stale or invalid.

        Args:
            cache_key: Name of the cache entry.
            source_mtime_ms: Current mtime of the file the value was derived from.
            schema: Pydantic model class (or TypeAdapter) validating the payload.
        """
        cache_path = self.cache_path(cache_key)
        if not cache_path.exists():
            return None

        try:
            with open(cache_path, encoding="utf-8") as f:
                entry = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Cache read failed for %r: %s", cache_key, e)
            return None

        if not isinstance(entry, dict) or entry.get("version") != CACHE_VERSION:
            logger.debug("Cache miss for %r: version mismatch", cache_key)
            return None
        if entry.get("sourceMtimeMs") != source_mtime_ms:
            logger.debug("Cache miss for %r: source changed", cache_key)
            return None

        adapter = schema if isinstance(schema, TypeAdapter) else TypeAdapter(schema)
        try:
            return adapter.validate_python(entry.get("data"))
        except ValidationError as e:
            logger.warning("Cache validation failed for %r: %s", cache_key, e)
            return None

    def write(
        self,
        cache_key: str,
        source_file: Union[str, Path],
        source_mtime_ms: float,
        data: Any,
    ) -> None:
        """Store a value. Failures are logged and otherwise ignored."""
        if isinstance(data, BaseModel):
            data = data.model_dump(mode="json")

        entry = {
            "version": CACHE_VERSION,
            "sourceFile": str(source_file),
            "sourceMtimeMs": source_mtime_ms,
            "cachedAt": datetime.now(timezone.utc).isoformat(),
            "data": data,
        }

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            atomic_write_text(self.cache_path(cache_key), json.dumps(entry))
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Cache write failed for %r: %s", cache_key, e)

    def invalidate(self, cache_key: str) -> None:
        try:
            self.cache_path(cache_key).unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Cache invalidate failed for %r: %s", cache_key, e)


class MtimeCache(Generic[T]):
    """In-memory key -> (mtime, value) map shared across requests."""

    def __init__(self):
        self._entries: dict[str, tuple[float, T]] = {}
        self._lock = threading.Lock()

    def get(self, key: str, mtime: float) -> Optional[T]:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None or entry[0] != mtime:
            return None
        return entry[1]

    def set(self, key: str, mtime: float, value: T) -> None:
        with self._lock:
            self._entries[key] = (mtime, value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
