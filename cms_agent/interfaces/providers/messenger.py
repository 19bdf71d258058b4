from abc import ABC, abstractmethod
from typing import List

from cms_agent.domains.records import Notice, NoticeLevel


class Messenger(ABC):
    """Interface for user-visible notices."""

    @abstractmethod
    def add_message(self, message: str, level: NoticeLevel = NoticeLevel.STATUS) -> None:
        """Queue a notice for the current user."""
        pass

    @abstractmethod
    def messages(self) -> List[Notice]:
        """Get all queued notices."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Drop all queued notices."""
        pass
