"""
MongoDB adapter for the CMS Agent system.

This adapter implements the DataStorageProvider interface for MongoDB.
Keys map onto ``_id``.
"""
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, MongoClient, ReturnDocument

from cms_agent.interfaces.providers.data_storage import DataStorageProvider


class MongoDBAdapter(DataStorageProvider):
    """MongoDB implementation of DataStorageProvider."""

    def __init__(self, connection_string: str, database_name: str):
        self.client = MongoClient(connection_string)
        self.db = self.client[database_name]

    def ensure_collection(self, name: str, indexes: Optional[List[str]] = None) -> None:
        if name not in self.db.list_collection_names():
            self.db.create_collection(name)
        for field in indexes or []:
            self.db[name].create_index([(field, ASCENDING)])

    def get(self, collection: str, key: str, **match: Any) -> Optional[Dict[str, Any]]:
        return self.db[collection].find_one({"_id": key, **match})

    def upsert(self, collection: str, key: str, fields: Dict[str, Any]) -> None:
        self.db[collection].update_one({"_id": key}, {"$set": fields}, upsert=True)

    def increment(self, collection: str, key: str, field: str = "seq") -> int:
        document = self.db[collection].find_one_and_update(
            {"_id": key},
            {"$inc": {field: 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return document[field]

    def count(self, collection: str, **match: Any) -> int:
        return self.db[collection].count_documents(match)
