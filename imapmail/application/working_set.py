# imapmail/application/working_set.py
from __future__ import annotations
import logging

from imapmail.domain.errors import EmptyQueueError
from imapmail.domain.models import MailMessage

logger = logging.getLogger(__name__)


class WorkingSet:
    """
    The last full fetch, the subset tests currently work on, and a read
    cursor over that subset acting as the unread queue.

    Every fetch or filter resets the cursor over the new subset, so the
    unread queue is always a suffix of `current`.
    """

    def __init__(self) -> None:
        self.fetched: list[MailMessage] = []
        self.current: list[MailMessage] = []
        self._cursor = 0

    def replace(self, messages: list[MailMessage]) -> None:
        self.fetched = list(messages)
        self._set_current(self.fetched)

    def clear(self) -> None:
        self.replace([])

    def filter_by_recipient(self, address: str) -> list[MailMessage]:
        matching = [m for m in self.fetched if m.has_recipient(address)]
        logger.debug("%s of %s emails addressed to %s", len(matching), len(self.fetched), address)
        self._set_current(matching)
        return matching

    def _set_current(self, messages: list[MailMessage]) -> None:
        self.current = messages
        self._cursor = 0

    def unread(self) -> list[MailMessage]:
        return self.current[self._cursor:]

    def pop_next(self) -> MailMessage:
        # oldest first, in mailbox order
        if self._cursor >= len(self.current):
            raise EmptyQueueError()
        message = self.current[self._cursor]
        self._cursor += 1
        return message

    def count(self) -> int:
        return len(self.current)
