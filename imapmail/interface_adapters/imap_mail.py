# imapmail/interface_adapters/imap_mail.py
from __future__ import annotations
import logging
import re

import pytest

from imapmail.application import extractors
from imapmail.application.spam_check import spam_status_problem
from imapmail.application.working_set import WorkingSet
from imapmail.config.settings import Settings
from imapmail.domain.errors import DeleteError, EmptyQueueError, FetchError
from imapmail.domain.models import MailMessage
from imapmail.infrastructure.email.imap_client import CONNECTED, IMAPInbox

logger = logging.getLogger(__name__)


class ImapMail:
    """
    Per-test mailbox context handed out by the ``imap_mail`` fixture.

    Typical flow inside a test::

        imap_mail.fetch_emails()
        imap_mail.access_inbox_for("customer@example.test")
        imap_mail.open_next_unread_email()
        imap_mail.see_in_opened_email_subject("Your order")
        imap_mail.see_no_relevant_spam_score()

    Mismatches and an empty inbox are reported through ``pytest.fail``;
    connection problems raise ``MailConnectionError``.
    """

    def __init__(self, settings: Settings, inbox: IMAPInbox | None = None) -> None:
        self.settings = settings
        self.inbox = inbox if inbox is not None else IMAPInbox.from_settings(settings)
        self.working_set = WorkingSet()
        self.opened_email: MailMessage | None = None

    # ───────── lifecycle ─────────
    def before(self) -> None:
        self.inbox.connect()

    def after(self) -> None:
        try:
            if self.settings.DELETE_EMAILS_AFTER_SCENARIO and self.inbox.state == CONNECTED:
                self.delete_all_emails()
        finally:
            self.inbox.close()

    # ───────── mailbox ─────────
    def delete_all_emails(self) -> None:
        try:
            self.inbox.delete_all()
        except DeleteError as e:
            pytest.fail(f"Exception: {e}")

    def fetch_emails(self) -> None:
        self.working_set.clear()
        try:
            messages = self.inbox.fetch_all()
        except FetchError as e:
            pytest.fail(f"Exception: {e}")
        self.working_set.replace(messages)

    def access_inbox_for(self, address: str) -> None:
        self.working_set.filter_by_recipient(address)

    def get_current_inbox(self) -> list[MailMessage]:
        return self.working_set.current

    def open_next_unread_email(self) -> None:
        try:
            self.opened_email = self.working_set.pop_next()
        except EmptyQueueError as e:
            pytest.fail(str(e))
        logger.debug("Opened email uid=%s subject=%r", self.opened_email.uid, self.opened_email.subject)

    def get_opened_email(self) -> MailMessage:
        if self.opened_email is None:
            pytest.fail("No email has been opened")
        return self.opened_email

    def _email(self, email: MailMessage | None) -> MailMessage:
        return email if email is not None else self.get_opened_email()

    # ───────── extractors ─────────
    def get_email_subject(self, email: MailMessage | None = None) -> str:
        return extractors.email_subject(self._email(email))

    def get_email_body(self, email: MailMessage | None = None) -> str:
        return extractors.email_body(self._email(email))

    def get_email_sender(self, email: MailMessage | None = None) -> str:
        return extractors.email_sender(self._email(email))

    def get_email_to(self, email: MailMessage | None = None) -> str:
        return extractors.email_to(self._email(email))

    def get_email_cc(self, email: MailMessage | None = None) -> str:
        return extractors.email_cc(self._email(email))

    def get_email_bcc(self, email: MailMessage | None = None) -> str:
        return extractors.email_bcc(self._email(email))

    def get_email_reply_to(self, email: MailMessage | None = None) -> str:
        return extractors.email_reply_to(self._email(email))

    def get_email_recipients(self, email: MailMessage | None = None) -> str:
        return extractors.email_recipients(self._email(email))

    def grab_body_from_email(self) -> str:
        return self.get_email_body()

    # ───────── assertions ─────────
    def see_no_relevant_spam_score(self) -> None:
        problem = spam_status_problem(self.get_opened_email().raw_headers)
        if problem:
            pytest.fail(problem)

    def see_email_count(self, expected: int) -> None:
        actual = self.working_set.count()
        if actual != expected:
            pytest.fail(f"Expected {expected} emails in the current inbox, found {actual}")

    def _see(self, field: str, actual: str, expected: str) -> None:
        if expected not in actual:
            pytest.fail(f"Opened email {field} does not contain {expected!r}: {actual!r}")

    def _dont_see(self, field: str, actual: str, unexpected: str) -> None:
        if unexpected in actual:
            pytest.fail(f"Opened email {field} contains {unexpected!r}: {actual!r}")

    def see_in_opened_email_subject(self, expected: str) -> None:
        self._see("subject", self.get_email_subject(), expected)

    def dont_see_in_opened_email_subject(self, unexpected: str) -> None:
        self._dont_see("subject", self.get_email_subject(), unexpected)

    def see_in_opened_email_body(self, expected: str) -> None:
        self._see("body", self.get_email_body(), expected)

    def dont_see_in_opened_email_body(self, unexpected: str) -> None:
        self._dont_see("body", self.get_email_body(), unexpected)

    def see_in_opened_email_sender(self, expected: str) -> None:
        self._see("sender", self.get_email_sender(), expected)

    def dont_see_in_opened_email_sender(self, unexpected: str) -> None:
        self._dont_see("sender", self.get_email_sender(), unexpected)

    def see_in_opened_email_reply_to(self, expected: str) -> None:
        self._see("Reply-To", self.get_email_reply_to(), expected)

    def dont_see_in_opened_email_reply_to(self, unexpected: str) -> None:
        self._dont_see("Reply-To", self.get_email_reply_to(), unexpected)

    def see_in_opened_email_recipients(self, expected: str) -> None:
        self._see("recipients", self.get_email_recipients(), expected)

    def dont_see_in_opened_email_recipients(self, unexpected: str) -> None:
        self._dont_see("recipients", self.get_email_recipients(), unexpected)

    def see_in_opened_email_to_field(self, expected: str) -> None:
        self._see("To", self.get_email_to(), expected)

    def dont_see_in_opened_email_to_field(self, unexpected: str) -> None:
        self._dont_see("To", self.get_email_to(), unexpected)

    def see_in_opened_email_cc_field(self, expected: str) -> None:
        self._see("Cc", self.get_email_cc(), expected)

    def dont_see_in_opened_email_cc_field(self, unexpected: str) -> None:
        self._dont_see("Cc", self.get_email_cc(), unexpected)

    def see_in_opened_email_bcc_field(self, expected: str) -> None:
        self._see("Bcc", self.get_email_bcc(), expected)

    def dont_see_in_opened_email_bcc_field(self, unexpected: str) -> None:
        self._dont_see("Bcc", self.get_email_bcc(), unexpected)

    def grab_matches_from_opened_email_body(self, pattern: str) -> tuple[str, ...]:
        match = re.search(pattern, self.get_email_body())
        if match is None:
            pytest.fail(f"No match for {pattern!r} in opened email body")
        return match.groups()

    def grab_from_opened_email_body(self, pattern: str) -> str:
        match = re.search(pattern, self.get_email_body())
        if match is None:
            pytest.fail(f"No match for {pattern!r} in opened email body")
        return match.group(0)
