"""
JSON-file document store.

One file per collection under the data directory, written atomically
(temp file in the same directory, then move). Read-modify-write cycles
hold a per-file lock, so a single process is safe with any number of
threads. Run several workers against the mongo backend instead.
"""

import json
import shutil
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..utils.exceptions import DuplicateKeyError, StorageError
from ..utils.logger import get_logger
from .base import Collection, Database, Document, Filter, SortSpec

logger = get_logger(__name__)

_locks: Dict[str, threading.RLock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    key = str(path.resolve())
    with _locks_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = _locks[key] = threading.RLock()
        return lock


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        # fixed width keeps lexical order equal to chronological order
        return value.isoformat(timespec="microseconds")
    return str(value)


def _normalize(document: Document) -> Document:
    """Round-trip through JSON so callers see exactly what a later read returns."""
    return json.loads(json.dumps(document, default=_json_default))


def _matches(document: Document, query: Filter) -> bool:
    return all(document.get(field) == value for field, value in query.items())


class JsonCollection(Collection):
    """A collection persisted as {"documents": [...]} in a single file"""

    def __init__(self, path: Path, name: str, unique: Sequence[str] = ()):
        self.path = path
        self.name = name
        self.unique = tuple(unique)
        self._lock = _lock_for(path)

    def _load(self) -> List[Document]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error("Failed to read collection", collection=self.name, error=str(e))
            raise StorageError(f"Failed to load collection '{self.name}'")
        return list(data.get("documents", []))

    def _save(self, documents: List[Document]) -> None:
        payload = {"documents": documents}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path: Optional[Path] = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w", dir=str(self.path.parent), delete=False, encoding="utf-8"
            ) as tf:
                temp_path = Path(tf.name)
                json.dump(payload, tf, indent=2, ensure_ascii=False, default=_json_default)
        except OSError as e:
            if temp_path is not None and temp_path.exists():
                temp_path.unlink()
            logger.error("Failed to write collection", collection=self.name, error=str(e))
            raise StorageError(f"Failed to save collection '{self.name}': {e}")

        try:
            shutil.move(str(temp_path), str(self.path))
        except Exception as e:
            if temp_path.exists():
                temp_path.unlink()
            raise StorageError(f"Failed to save collection '{self.name}': {e}")

    def _check_unique(self, documents: List[Document], candidate: Document) -> None:
        for field in self.unique:
            value = candidate.get(field)
            if value is None:
                continue
            for existing in documents:
                if existing.get("_id") != candidate.get("_id") and existing.get(field) == value:
                    raise DuplicateKeyError(field, value)

    def insert_one(self, document: Document) -> Document:
        document = _normalize(document)
        with self._lock:
            documents = self._load()
            if any(d.get("_id") == document.get("_id") for d in documents):
                raise DuplicateKeyError("_id", document.get("_id"))
            self._check_unique(documents, document)
            documents.append(document)
            self._save(documents)
        return document

    def find_one(self, query: Filter) -> Optional[Document]:
        with self._lock:
            documents = self._load()
        return next((d for d in documents if _matches(d, query)), None)

    def find(
        self,
        query: Filter,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[Document]:
        with self._lock:
            documents = self._load()
        results = [d for d in documents if _matches(d, query)]
        # stable sorts applied from the least significant key up
        for field, direction in reversed(list(sort or [])):
            results.sort(key=lambda d: (d.get(field) is not None, d.get(field) or ""), reverse=direction < 0)
        if skip:
            results = results[skip:]
        if limit:
            results = results[:limit]
        return results

    def count(self, query: Filter) -> int:
        with self._lock:
            documents = self._load()
        return sum(1 for d in documents if _matches(d, query))

    def update_one(self, doc_id: str, fields: Document) -> Optional[Document]:
        fields = _normalize(fields)
        fields.pop("_id", None)
        with self._lock:
            documents = self._load()
            for i, existing in enumerate(documents):
                if existing.get("_id") == doc_id:
                    updated = {**existing, **fields}
                    self._check_unique(documents, updated)
                    documents[i] = updated
                    self._save(documents)
                    return updated
        return None

    def delete_one(self, doc_id: str) -> bool:
        with self._lock:
            documents = self._load()
            remaining = [d for d in documents if d.get("_id") != doc_id]
            if len(remaining) == len(documents):
                return False
            self._save(remaining)
        return True


class JsonDatabase(Database):
    """Directory of JSON collection files"""

    backend = "json"

    def __init__(self, data_dir: str = "data"):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._collections: Dict[str, JsonCollection] = {}
        logger.info("JSON document store ready", data_dir=str(self.data_dir))

    def collection(self, name: str, unique: Sequence[str] = ()) -> JsonCollection:
        coll = self._collections.get(name)
        if coll is None:
            coll = JsonCollection(self.data_dir / f"{name}.json", name, unique)
            self._collections[name] = coll
        return coll

    def ping(self) -> bool:
        return self.data_dir.is_dir()
