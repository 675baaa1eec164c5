"""Document store backends"""

from .base import ASCENDING, DESCENDING, Collection, Database, new_object_id
from .json_store import JsonDatabase
from .mongo_store import MongoDatabase

__all__ = [
    "ASCENDING",
    "DESCENDING",
    "Collection",
    "Database",
    "JsonDatabase",
    "MongoDatabase",
    "new_object_id",
    "open_database",
]


def open_database(storage_settings) -> Database:
    """Build the configured backend from StorageSettings."""
    if storage_settings.backend == "mongo":
        return MongoDatabase(storage_settings.mongo_uri, storage_settings.mongo_db)
    return JsonDatabase(storage_settings.data_dir)
