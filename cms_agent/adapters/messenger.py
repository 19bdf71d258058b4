"""
Messenger adapter collecting user-visible notices.
"""
import logging
from typing import List

from cms_agent.domains.records import Notice, NoticeLevel
from cms_agent.interfaces.providers.messenger import Messenger

logger = logging.getLogger(__name__)


class MessengerAdapter(Messenger):
    """Keeps the notices of the current request and logs them."""

    def __init__(self):
        self._messages: List[Notice] = []

    def add_message(self, message: str, level: NoticeLevel = NoticeLevel.STATUS) -> None:
        notice = Notice(message=message, level=level)
        self._messages.append(notice)
        if level == NoticeLevel.ERROR:
            logger.error(f"Notice: {message}")
        else:
            logger.info(f"Notice ({level.value}): {message}")

    def messages(self) -> List[Notice]:
        return list(self._messages)

    def clear(self) -> None:
        self._messages = []
