"""
Key-value persistence for serialized documents.
Values are strings; keys map to whole documents.
"""
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional

from utils.errors import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore:
    """
    Minimal string key-value store interface.
    """

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str):
        raise NotImplementedError

    def remove(self, key: str):
        raise NotImplementedError

    def keys(self) -> List[str]:
        raise NotImplementedError

    def size_of(self, key: str) -> int:
        """Serialized byte length of a stored value, 0 when absent."""
        value = self.get(key)
        return len(value.encode("utf-8")) if value is not None else 0


class InMemoryKeyValueStore(KeyValueStore):
    """
    Dictionary-backed store with an optional byte quota.
    """

    def __init__(self, quota_bytes: Optional[int] = None):
        self._data: Dict[str, str] = {}
        self.quota_bytes = quota_bytes

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str):
        if self.quota_bytes is not None:
            others = sum(self.size_of(k) for k in self._data if k != key)
            if others + len(value.encode("utf-8")) > self.quota_bytes:
                raise StorageError(f"Storage quota exceeded while writing '{key}'")
        self._data[key] = value

    def remove(self, key: str):
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data)


class FileKeyValueStore(KeyValueStore):
    """
    Stores each key as a JSON file inside a directory.
    """

    _SAFE_KEY = re.compile(r"^[A-Za-z0-9._-]+$")

    def __init__(self, directory: str, quota_bytes: Optional[int] = None):
        self.storage_path = Path(directory)
        self.quota_bytes = quota_bytes
        try:
            self.storage_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create storage directory {directory}: {e}") from e

    def _get_file_path(self, key: str) -> Path:
        if not self._SAFE_KEY.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self.storage_path / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        file_path = self._get_file_path(key)
        try:
            return file_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading {file_path}: {e}")
            raise StorageError(f"Failed to read '{key}': {e}") from e

    def set(self, key: str, value: str):
        file_path = self._get_file_path(key)
        if self.quota_bytes is not None:
            others = sum(self.size_of(k) for k in self.keys() if k != key)
            if others + len(value.encode("utf-8")) > self.quota_bytes:
                raise StorageError(f"Storage quota exceeded while writing '{key}'")

        tmp_path = file_path.with_suffix(".json.tmp")
        try:
            tmp_path.write_text(value, encoding="utf-8")
            tmp_path.replace(file_path)
        except OSError as e:
            logger.error(f"Error writing {file_path}: {e}")
            raise StorageError(f"Failed to write '{key}': {e}") from e

    def remove(self, key: str):
        try:
            self._get_file_path(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Failed to remove '{key}': {e}") from e

    def keys(self) -> List[str]:
        return sorted(p.stem for p in self.storage_path.glob("*.json"))
