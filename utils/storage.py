import json
import logging
import os
import platform
from pathlib import Path
from typing import Dict, Optional, Protocol


logger = logging.getLogger(__name__)


class StorageError(Exception):
    """A storage file exists but cannot be safely read or written"""


class Storage(Protocol):
    """Key/value string storage with Web Storage semantics"""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Process-local storage; contents vanish with the process"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items


class FileStorage:
    """Durable storage in a JSON file with owner-only permissions"""

    def __init__(self, path: os.PathLike):
        self.path = Path(path)
        self._ensure_secure_directory()

    def _ensure_secure_directory(self):
        """Create parent directory with secure permissions"""
        parent_dir = self.path.parent
        if not parent_dir.exists():
            parent_dir.mkdir(parents=True, exist_ok=True)
            # Set directory permissions to 700 on Unix-like systems
            if platform.system() != "Windows":
                os.chmod(parent_dir, 0o700)

    def _load(self, for_write: bool = False) -> Dict[str, str]:
        """Read the file; an unreadable file reads as empty but is never overwritten"""
        if not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            problem = f"unreadable ({e})"
        else:
            if isinstance(data, dict):
                return data
            problem = "not a JSON object"

        logger.error(f"Storage file {self.path} is {problem}")
        if for_write:
            raise StorageError(
                f"Refusing to overwrite {self.path}: file is {problem}; fix or remove it"
            )
        return {}

    def _save(self, data: Dict[str, str]) -> None:
        if not data:
            if self.path.exists():
                self.path.unlink()
            return

        self._ensure_secure_directory()
        self.path.write_text(json.dumps(data, indent=2))

        # Set file permissions to 600 on Unix-like systems
        if platform.system() != "Windows":
            os.chmod(self.path, 0o600)

    def get_item(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._load(for_write=True)
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load(for_write=True)
        if key in data:
            del data[key]
            self._save(data)
