from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class DataStorageProvider(ABC):
    """Interface for the document store behind records and vocabularies.

    Documents are addressed by a string key; extra keyword arguments on
    lookups are field values the document must also match.
    """

    @abstractmethod
    def ensure_collection(self, name: str, indexes: Optional[List[str]] = None) -> None:
        """Create a collection if missing, with ascending single-field indexes."""
        pass

    @abstractmethod
    def get(self, collection: str, key: str, **match: Any) -> Optional[Dict[str, Any]]:
        """Fetch the document stored under key."""
        pass

    @abstractmethod
    def upsert(self, collection: str, key: str, fields: Dict[str, Any]) -> None:
        """Set fields on the document under key, creating it if needed."""
        pass

    @abstractmethod
    def increment(self, collection: str, key: str, field: str = "seq") -> int:
        """Atomically increment a counter document and return the new value."""
        pass

    @abstractmethod
    def count(self, collection: str, **match: Any) -> int:
        """Count the documents matching the given field values."""
        pass
