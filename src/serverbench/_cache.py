"""
Durable benchmark result cache

The cache is a single JSON object mapping benchmark names to metrics
records. Every save rewrites the whole file through a temporary file and
``os.replace`` so an interrupted write never leaves a truncated cache.
"""

import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Mapping, Union

import filelock

from ._errors import CacheCorruptError, CacheError, CacheLockError, CacheWriteError
from ._metrics import MetricsRecord

logger = logging.getLogger(__name__)

DEFAULT_CACHE_FILE = "benchmark_cache.json"


def lock_path_for(path: Union[str, Path]) -> Path:
    """Lock file for a cache, kept in the temp dir so it never lands next to the cache"""
    key = hashlib.sha1(str(Path(path).resolve()).encode("utf-8")).hexdigest()[:16]
    return Path(tempfile.gettempdir()) / f"serverbench-{key}.lock"


class ResultCache:
    """Benchmark name -> metrics record mapping stored in a JSON file"""

    def __init__(self, path: Union[str, Path] = DEFAULT_CACHE_FILE, lock_timeout: float = 10):
        """
        Args:
            path: Location of the cache file
            lock_timeout: Seconds to wait for the cache lock in ``update``
        """
        self.path = Path(path)
        self.lock_timeout = lock_timeout
        self.lock_path = lock_path_for(self.path)
        self._lock = filelock.FileLock(str(self.lock_path), timeout=lock_timeout)

    def __repr__(self):
        return f"ResultCache({str(self.path)!r})"

    def load(self) -> Dict[str, MetricsRecord]:
        """Read every cached entry.

        A missing file is an empty cache. Entries are returned as stored;
        validating individual records is left to the caller.

        Raises:
            CacheCorruptError: If the file is not a JSON object
            CacheError: If the file cannot be read
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No cache at %s, starting empty", self.path)
            return {}
        except OSError as e:
            raise CacheError(f"could not read cache {self.path}: {e}", path=self.path) from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CacheCorruptError(
                f"cache {self.path} is not valid JSON: {e}", path=self.path
            ) from e

        if not isinstance(data, dict):
            raise CacheCorruptError(
                f"cache {self.path} holds {type(data).__name__}, expected an object",
                path=self.path,
            )

        logger.debug("Loaded %d cached result(s) from %s", len(data), self.path)
        return data

    def save(self, results: Mapping[str, MetricsRecord]):
        """Atomically replace the cache file with ``results``.

        Raises:
            CacheWriteError: If the file could not be written
        """
        payload = json.dumps(dict(results), indent=2) + "\n"
        directory = self.path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(directory)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            raise CacheWriteError(
                f"could not write cache {self.path}: {e}", path=self.path
            ) from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.warning("Could not remove temporary file %s", tmp_name)

        logger.debug("Wrote %d result(s) to %s", len(results), self.path)

    def update(self, name: str, record: MetricsRecord) -> Dict[str, MetricsRecord]:
        """Insert or overwrite one entry and save, holding the cache lock.

        Returns:
            The mapping that was written

        Raises:
            CacheLockError: If another process holds the lock too long or the
                lock file cannot be opened
            CacheCorruptError: If the existing file is corrupt; it is left
                untouched
            CacheWriteError: If the file could not be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheWriteError(
                f"could not create cache directory {self.path.parent}: {e}", path=self.path
            ) from e

        try:
            with self._lock:
                results = self.load()
                results[name] = record
                self.save(results)
        except filelock.Timeout as e:
            raise CacheLockError(
                f"timed out after {self.lock_timeout}s waiting for {e.lock_file}",
                path=self.path,
            ) from e
        except CacheError:
            raise
        except OSError as e:
            raise CacheLockError(
                f"could not use lock file {self.lock_path}: {e}", path=self.path
            ) from e
        return results
