from abc import ABC, abstractmethod

from cms_agent.domains.records import Record


class PresaveHook(ABC):
    """Interface for callbacks run before a record is persisted."""

    @abstractmethod
    async def entity_presave(self, record: Record) -> None:
        """React to a record about to be saved.

        Field changes made here are persisted by the same save.
        """
        pass
