# imapmail/domain/errors.py
from __future__ import annotations


class ImapMailError(Exception):
    pass


class ConfigurationError(ImapMailError):
    pass


class MailConnectionError(ImapMailError, ConnectionError):
    """Login or INBOX selection failed; no test step can run without a session."""


class FetchError(ImapMailError):
    pass


class DeleteError(ImapMailError):
    pass


class EmptyQueueError(ImapMailError):
    def __init__(self, message: str = "Unread Inbox is Empty") -> None:
        super().__init__(message)
