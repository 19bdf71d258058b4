"""
In-memory record storage and vocabularies.

Used by tests and local runs where no host CMS or database is available.
"""
import itertools
import logging
from typing import Any, Dict, Iterable, Optional

from cms_agent.domains.records import Record, Reference
from cms_agent.interfaces.providers.records import RecordAccessor, ReferenceResolver

logger = logging.getLogger(__name__)


class InMemoryRecordAccessor(RecordAccessor):
    """Dict-backed record storage with sequential ids."""

    def __init__(self, base_url: str = "http://localhost"):
        self.base_url = base_url.rstrip("/")
        self._records: Dict[str, Record] = {}
        self._ids = itertools.count(1)

    def create(self, kind: str, fields: Dict[str, Any]) -> Record:
        return Record.from_fields(kind, fields)

    def load(self, kind: str, record_id: str) -> Optional[Record]:
        record = self._records.get(str(record_id))
        if record is None or record.bundle != kind:
            return None
        return record.model_copy(deep=True)

    def save(self, record: Record) -> Record:
        if record.is_new:
            record.id = str(next(self._ids))
        self._records[record.id] = record.model_copy(deep=True)
        return record

    def canonical_url(self, record: Record) -> str:
        return f"{self.base_url}/node/{record.id}"

    def count(self, kind: Optional[str] = None) -> int:
        """Number of stored records, optionally of one kind."""
        return sum(1 for r in self._records.values() if kind is None or r.bundle == kind)


class InMemoryReferenceResolver(ReferenceResolver):
    """Dict-backed vocabulary lookups."""

    def __init__(self, terms: Optional[Iterable[Reference]] = None):
        self._terms: Dict[str, Reference] = {}
        for term in terms or []:
            self.add_term(term)

    def add_term(self, term: Reference) -> None:
        self._terms[term.id] = term

    def resolve(self, reference_id: str, vocabulary: str) -> Optional[Reference]:
        term = self._terms.get(str(reference_id))
        if term is None or term.vocabulary != vocabulary:
            logger.debug(f"Term {reference_id} not found in vocabulary {vocabulary}")
            return None
        return term
