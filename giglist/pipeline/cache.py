import json
import os
import re
from pathlib import Path

from giglist import config

VALID_NAME = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9._-]*$")
_MISSING = object()


class CacheStore:
    """
    Memoizes task results on disk, one JSON file per task name.

    Entries are never evicted; the operator invalidates them with the
    per-stage refresh flags. There is no locking, so two runs must not share
    a cache directory at the same time.
    """

    def __init__(self, directory=None, log_func=None):
        self.directory = Path(directory or config.CACHE_DIR)
        self.log = log_func or print
        self.hits = 0
        self.misses = 0

    def path_for(self, name):
        if not isinstance(name, str) or not VALID_NAME.match(name):
            raise ValueError(f"Invalid cache entry name: {name!r}")
        return self.directory / f"{name}.json"

    def __contains__(self, name):
        return self.path_for(name).exists()

    def load(self, name):
        """Return the stored value, or _MISSING when absent or unreadable."""
        path = self.path_for(name)
        if not path.exists():
            return _MISSING
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            self.log(f"  Warning: ignoring unreadable cache entry {path.name}: {e}")
            return _MISSING

    def save(self, name, value):
        path = self.path_for(name)
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(value, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

    def cached(self, name, refresh, producer):
        """
        Return the value stored under name, or compute it with producer(),
        store it and return it. refresh=True always recomputes and overwrites.
        """
        if not refresh:
            value = self.load(name)
            if value is not _MISSING:
                self.hits += 1
                return value

        self.misses += 1
        value = producer()
        self.save(name, value)
        return value
