"""
Document store interface.

A collection stores plain dict documents keyed by a string "_id". Filters
are equality-only mappings of field name to value; every query the
service needs fits that shape.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bson import ObjectId

Document = Dict[str, Any]
Filter = Dict[str, Any]
SortSpec = Sequence[Tuple[str, int]]

ASCENDING = 1
DESCENDING = -1


def new_object_id() -> str:
    """Generate an opaque 24-hex-char identifier, increasing within a process."""
    return str(ObjectId())


class Collection(ABC):
    """Abstract collection of documents"""

    name: str

    @abstractmethod
    def insert_one(self, document: Document) -> Document:
        """Insert a document and return it.

        Raises:
            DuplicateKeyError: a unique field already holds the same value.
        """

    @abstractmethod
    def find_one(self, query: Filter) -> Optional[Document]:
        """Return the first document matching the filter, or None."""

    @abstractmethod
    def find(
        self,
        query: Filter,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[Document]:
        """Return matching documents. limit=0 means no limit."""

    @abstractmethod
    def count(self, query: Filter) -> int:
        """Count matching documents."""

    @abstractmethod
    def update_one(self, doc_id: str, fields: Document) -> Optional[Document]:
        """Set fields on one document; return it after the update, or None if absent.

        Raises:
            DuplicateKeyError: the update would duplicate a unique field.
        """

    @abstractmethod
    def delete_one(self, doc_id: str) -> bool:
        """Delete one document; return True when something was removed."""

    def create_index(self, keys: SortSpec) -> None:
        """Create a secondary index. Backends without indexes ignore it."""
        return


class Database(ABC):
    """A set of named collections"""

    backend: str

    @abstractmethod
    def collection(self, name: str, unique: Sequence[str] = ()) -> Collection:
        """Return (creating if needed) a collection with the given unique fields."""

    @abstractmethod
    def ping(self) -> bool:
        """Return True when the store is reachable."""

    def close(self) -> None:
        """Release connections. No-op by default."""
        return
