"""
Configuration sources and the process-wide definition cache.

A source maps a key (``ifza_company_formation_form``) to a YAML document and
reports when that document last changed. The cache keeps one parsed
definition per key and reloads it only when the modification time moves.
"""

import logging
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Tuple, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")

Document = Union[str, Mapping[str, Any]]

_EXTENSIONS = (".yml", ".yaml")


class ConfigSource(Protocol):
    def keys(self) -> List[str]:
        ...

    def exists(self, key: str) -> bool:
        ...

    def read(self, key: str) -> Document:
        ...

    def modified_at(self, key: str) -> float:
        ...


class DirectoryConfigSource:
    """ YAML files named ``<key>.yml`` (or ``.yaml``) under one directory. """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def _path(self, key: str) -> Optional[Path]:
        for ext in _EXTENSIONS:
            path = self.root / f"{key}{ext}"
            if path.is_file():
                return path
        return None

    def keys(self) -> List[str]:
        if not self.root.is_dir():
            return []
        found = {p.stem for ext in _EXTENSIONS for p in self.root.glob(f"*{ext}")}
        return sorted(found)

    def exists(self, key: str) -> bool:
        return self._path(key) is not None

    def read(self, key: str) -> str:
        path = self._path(key)
        if path is None:
            raise FileNotFoundError(f"Configuration file not found: {self.root / key}")
        return path.read_text(encoding="utf-8")

    def modified_at(self, key: str) -> float:
        path = self._path(key)
        if path is None:
            raise FileNotFoundError(f"Configuration file not found: {self.root / key}")
        return path.stat().st_mtime


class InMemoryConfigSource:
    """ Documents held in memory; ``put`` stamps a new modification time. """

    def __init__(self, documents: Optional[Mapping[str, Document]] = None):
        self._documents: Dict[str, Document] = {}
        self._modified: Dict[str, float] = {}
        for key, document in (documents or {}).items():
            self.put(key, document)

    def put(self, key: str, document: Document, modified_at: Optional[float] = None) -> None:
        if modified_at is None:
            modified_at = max(time.time(), self._modified.get(key, 0.0) + 1.0)
        self._documents[key] = document
        self._modified[key] = modified_at

    def remove(self, key: str) -> None:
        self._documents.pop(key, None)
        self._modified.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._documents)

    def exists(self, key: str) -> bool:
        return key in self._documents

    def read(self, key: str) -> Document:
        if key not in self._documents:
            raise KeyError(key)
        return self._documents[key]

    def modified_at(self, key: str) -> float:
        if key not in self._modified:
            raise KeyError(key)
        return self._modified[key]


def version_marker(modified_at: float) -> str:
    return str(int(modified_at))


class ConfigCache:
    """
    Parsed definitions keyed by source key, invalidated by modification time.

    Failed loads are never cached, so a fixed document is picked up on the
    next request.
    """

    def __init__(self):
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get_or_load(self, source: ConfigSource, key: str, loader: Callable[[Document, float], T]) -> T:
        modified = source.modified_at(key)
        with self._lock:
            entry = self._entries.get(key)
        if entry is not None and entry[0] == modified:
            return entry[1]

        if entry is not None:
            logger.info("Configuration %s changed on disk, reloading", key)
        value = loader(source.read(key), modified)
        with self._lock:
            self._entries[key] = (modified, value)
        return value

    def invalidate(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
