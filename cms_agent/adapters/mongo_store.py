"""
MongoDB-backed record storage and vocabularies.
"""
import logging
from typing import Any, Dict, Optional

from cms_agent.domains.records import Record, Reference
from cms_agent.interfaces.providers.data_storage import DataStorageProvider
from cms_agent.interfaces.providers.records import RecordAccessor, ReferenceResolver

logger = logging.getLogger(__name__)


class MongoRecordAccessor(RecordAccessor):
    """Stores records as documents, with sequential ids from a counter."""

    def __init__(
        self,
        db_adapter: DataStorageProvider,
        base_url: str = "http://localhost",
        collection: str = "records",
        counters_collection: str = "counters",
    ):
        self.db = db_adapter
        self.base_url = base_url.rstrip("/")
        self.collection = collection
        self.counters_collection = counters_collection

        self.db.ensure_collection(self.collection, indexes=["bundle"])

    def create(self, kind: str, fields: Dict[str, Any]) -> Record:
        return Record.from_fields(kind, fields)

    def load(self, kind: str, record_id: str) -> Optional[Record]:
        document = self.db.get(self.collection, str(record_id), bundle=kind)
        if not document:
            return None
        document["id"] = document.pop("_id")
        return Record.model_validate(document)

    def save(self, record: Record) -> Record:
        if record.is_new:
            record.id = str(self.db.increment(self.counters_collection, self.collection))
        self.db.upsert(self.collection, record.id, record.model_dump(exclude={"id"}))
        logger.debug(f"Stored {record.bundle} {record.id}")
        return record

    def canonical_url(self, record: Record) -> str:
        return f"{self.base_url}/node/{record.id}"

    def count(self, kind: Optional[str] = None) -> int:
        """Number of stored records, optionally of one kind."""
        if kind is None:
            return self.db.count(self.collection)
        return self.db.count(self.collection, bundle=kind)


class MongoReferenceResolver(ReferenceResolver):
    """Resolves taxonomy terms stored in a collection."""

    def __init__(self, db_adapter: DataStorageProvider, collection: str = "taxonomy_terms"):
        self.db = db_adapter
        self.collection = collection
        self.db.ensure_collection(self.collection, indexes=["vocabulary"])

    def add_term(self, term: Reference) -> None:
        self.db.upsert(
            self.collection, term.id, {"vocabulary": term.vocabulary, "name": term.name}
        )

    def resolve(self, reference_id: str, vocabulary: str) -> Optional[Reference]:
        document = self.db.get(self.collection, str(reference_id), vocabulary=vocabulary)
        if not document:
            return None
        return Reference(
            id=document["_id"],
            vocabulary=document["vocabulary"],
            name=document.get("name", ""),
        )
