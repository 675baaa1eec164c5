"""
MongoDB document store backed by pymongo.

Unique fields become unique indexes, so uniqueness is enforced by the
server at write time. Driver errors are re-raised as StorageError; the
core never retries.
"""

from typing import Dict, List, Optional, Sequence

from pymongo import MongoClient, ReturnDocument
from pymongo.collection import Collection as PyMongoCollection
from pymongo.errors import DuplicateKeyError as PyMongoDuplicateKeyError
from pymongo.errors import PyMongoError

from ..utils.exceptions import DuplicateKeyError, StorageError
from ..utils.logger import get_logger
from .base import Collection, Database, Document, Filter, SortSpec

logger = get_logger(__name__)

# largest skip/limit BSON can carry (signed 64-bit)
MAX_BSON_INT = 2**63 - 1


def _duplicate_field(error: PyMongoDuplicateKeyError, unique: Sequence[str]) -> str:
    details = error.details or {}
    key_pattern = details.get("keyPattern") or details.get("keyValue") or {}
    for field in key_pattern:
        return field
    return unique[0] if unique else "_id"


class MongoCollection(Collection):
    """Thin adapter from the collection interface onto a pymongo collection"""

    def __init__(self, collection: PyMongoCollection, unique: Sequence[str] = ()):
        self._collection = collection
        self.name = collection.name
        self.unique = tuple(unique)
        for field in self.unique:
            self._collection.create_index(field, unique=True)

    def create_index(self, keys: SortSpec) -> None:
        try:
            self._collection.create_index(list(keys))
        except PyMongoError as e:
            logger.error("Index creation failed", collection=self.name, error=str(e))
            raise StorageError(f"Failed to index '{self.name}'")

    def insert_one(self, document: Document) -> Document:
        document = dict(document)
        try:
            self._collection.insert_one(document)
        except PyMongoDuplicateKeyError as e:
            raise DuplicateKeyError(_duplicate_field(e, self.unique))
        except PyMongoError as e:
            logger.error("Insert failed", collection=self.name, error=str(e))
            raise StorageError(f"Failed to insert into '{self.name}'")
        return document

    def find_one(self, query: Filter) -> Optional[Document]:
        try:
            return self._collection.find_one(query)
        except PyMongoError as e:
            logger.error("Query failed", collection=self.name, error=str(e))
            raise StorageError(f"Failed to query '{self.name}'")

    def find(
        self,
        query: Filter,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[Document]:
        if skip > MAX_BSON_INT:
            return []
        if limit > MAX_BSON_INT:
            limit = 0
        try:
            cursor = self._collection.find(query)
            if sort:
                cursor = cursor.sort(list(sort))
            if skip:
                cursor = cursor.skip(skip)
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)
        except PyMongoError as e:
            logger.error("Query failed", collection=self.name, error=str(e))
            raise StorageError(f"Failed to query '{self.name}'")

    def count(self, query: Filter) -> int:
        try:
            return self._collection.count_documents(query)
        except PyMongoError as e:
            logger.error("Count failed", collection=self.name, error=str(e))
            raise StorageError(f"Failed to count '{self.name}'")

    def update_one(self, doc_id: str, fields: Document) -> Optional[Document]:
        fields = {k: v for k, v in fields.items() if k != "_id"}
        try:
            return self._collection.find_one_and_update(
                {"_id": doc_id},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoDuplicateKeyError as e:
            raise DuplicateKeyError(_duplicate_field(e, self.unique))
        except PyMongoError as e:
            logger.error("Update failed", collection=self.name, error=str(e))
            raise StorageError(f"Failed to update '{self.name}'")

    def delete_one(self, doc_id: str) -> bool:
        try:
            result = self._collection.delete_one({"_id": doc_id})
        except PyMongoError as e:
            logger.error("Delete failed", collection=self.name, error=str(e))
            raise StorageError(f"Failed to delete from '{self.name}'")
        return result.deleted_count > 0


class MongoDatabase(Database):
    """MongoDB database holding the service's collections"""

    backend = "mongo"

    def __init__(self, uri: str = "mongodb://localhost:27017", db_name: str = "taskboard", client=None):
        """
        Args:
            uri: MongoDB connection URI.
            db_name: Database name.
            client: Pre-built client (any pymongo-compatible object); when
                given, uri is ignored.
        """
        self.client = client if client is not None else MongoClient(uri, tz_aware=True)
        self.db = self.client[db_name]
        self._collections: Dict[str, MongoCollection] = {}
        logger.info("MongoDB document store ready", database=db_name)

    def collection(self, name: str, unique: Sequence[str] = ()) -> MongoCollection:
        coll = self._collections.get(name)
        if coll is None:
            try:
                coll = MongoCollection(self.db[name], unique)
            except PyMongoError as e:
                logger.error("Collection setup failed", collection=name, error=str(e))
                raise StorageError(f"Failed to open collection '{name}'")
            self._collections[name] = coll
        return coll

    def ping(self) -> bool:
        try:
            self.client.admin.command("ping")
        except PyMongoError:
            return False
        return True

    def close(self) -> None:
        self.client.close()
