"""Local key-value substrates for the cache store.

Values are text (serialized JSON records) keyed by string. Two
implementations are provided:

1. **MemoryStore**: A dict in process memory. Lives as long as the
   process, which matches a single browsing session.
2. **JsonFileStore**: All keys in one JSON document on disk. Survives
   restarts of the command-line front end.

Both apply a batch of changes atomically through ``apply()``: either
every key in the batch is written/removed or, on failure, none is and
StorageError is raised.

Example:
    >>> store = JsonFileStore(Path.home() / ".cache" / "weatherwise" / "storage.json")
    >>> store.apply({"weatherwise_units": "fahrenheit"})
    >>> store.get_item("weatherwise_units")
    'fahrenheit'
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Mapping, Optional

from .exceptions import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Abstract text key-value store with atomic batch updates."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the value for ``key`` or None if absent.

        Raises:
            StorageError: If the backing medium cannot be read.
        """

    @abstractmethod
    def apply(self, changes: Mapping[str, Optional[str]]) -> None:
        """Apply a batch of changes atomically.

        Args:
            changes: Mapping of key to new value; None removes the key.

        Raises:
            StorageError: If the batch could not be committed. Nothing
                from the batch is visible afterwards.
        """

    def set_item(self, key: str, value: str) -> None:
        self.apply({key: value})

    def remove_item(self, key: str) -> None:
        self.apply({key: None})


def _merged(
    current: Mapping[str, str], changes: Mapping[str, Optional[str]]
) -> dict[str, str]:
    merged = dict(current)
    for key, value in changes.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    return merged


class MemoryStore(KeyValueStore):
    """In-memory store.

    Args:
        initial: Optional starting contents.
    """

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def apply(self, changes: Mapping[str, Optional[str]]) -> None:
        self._data = _merged(self._data, changes)


class JsonFileStore(KeyValueStore):
    """Store backed by a single JSON file.

    The whole document is rewritten on every batch: the new content is
    written to a temporary file in the same directory and moved over
    the old one with ``os.replace``, so a reader never sees a partial
    write.

    A missing file is an empty store. An unreadable or corrupt file is
    logged and also treated as empty; the next successful write
    replaces it.

    Args:
        path: Location of the JSON document. Parent directories are
            created on first write.

    Attributes:
        path: Path to the JSON document.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError
            logger.warning(f"Ignoring corrupt store {self.path}: {e}")
            return {}
        except OSError as e:
            raise StorageError(f"Failed to read {self.path}: {e}") from e

        if not isinstance(data, dict):
            logger.warning(f"Ignoring store {self.path}: top level is not an object")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def apply(self, changes: Mapping[str, Optional[str]]) -> None:
        merged = _merged(self._load(), changes)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(merged, f, ensure_ascii=False)
            os.replace(tmp_name, self.path)
            tmp_name = None
            logger.debug(f"Wrote {len(changes)} key(s) to {self.path}")
        except OSError as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
