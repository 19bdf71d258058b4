from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from cms_agent.domains.records import Record, Reference


class RecordAccessor(ABC):
    """Interface for the host storage of records."""

    @abstractmethod
    def create(self, kind: str, fields: Dict[str, Any]) -> Record:
        """Build a new, unsaved record of the given kind."""
        pass

    @abstractmethod
    def load(self, kind: str, record_id: str) -> Optional[Record]:
        """Load a record by id, or None if it does not exist."""
        pass

    @abstractmethod
    def save(self, record: Record) -> Record:
        """Persist a record, assigning an id if it is new."""
        pass

    @abstractmethod
    def canonical_url(self, record: Record) -> str:
        """Get the absolute canonical address of a saved record."""
        pass

    def get_field(self, record: Record, name: str) -> Any:
        """Read a field of a record."""
        return record.get(name)

    def set_field(self, record: Record, name: str, value: Any) -> None:
        """Write a field of a record."""
        record.set(name, value)


class ReferenceResolver(ABC):
    """Interface for vocabulary lookups."""

    @abstractmethod
    def resolve(self, reference_id: str, vocabulary: str) -> Optional[Reference]:
        """Resolve an id into a reference of the given vocabulary."""
        pass
