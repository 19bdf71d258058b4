"""
Record service implementation.

Wraps the host record storage and runs the registered pre-save hooks
before every save, so field changes made by a hook land in the same save.
"""
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from cms_agent.domains.records import Record
from cms_agent.interfaces.providers.records import RecordAccessor, ReferenceResolver

logger = logging.getLogger(__name__)

PresaveCallback = Callable[[Record], Awaitable[None]]


class RecordService:
    """Create, load and save records through a RecordAccessor."""

    def __init__(
        self,
        accessor: RecordAccessor,
        references: Optional[ReferenceResolver] = None,
    ):
        self.accessor = accessor
        self.references = references
        self._presave_hooks: List[PresaveCallback] = []

    def add_presave_hook(self, hook: PresaveCallback) -> None:
        """Register a coroutine run before every save."""
        self._presave_hooks.append(hook)

    def create(self, kind: str, fields: Dict[str, Any]) -> Record:
        return self.accessor.create(kind, fields)

    def load(self, kind: str, record_id: str) -> Optional[Record]:
        return self.accessor.load(kind, record_id)

    def canonical_url(self, record: Record) -> str:
        return self.accessor.canonical_url(record)

    def get_field(self, record: Record, name: str) -> Any:
        return self.accessor.get_field(record, name)

    def set_field(self, record: Record, name: str, value: Any) -> None:
        self.accessor.set_field(record, name, value)

    async def save(self, record: Record) -> Record:
        """Run the pre-save hooks, then persist the record.

        Args:
            record: Record to save

        Returns:
            The saved record, with its id assigned
        """
        for hook in self._presave_hooks:
            await hook(record)

        saved = self.accessor.save(record)
        logger.info(f"Saved {saved.bundle} {saved.id}")
        return saved
