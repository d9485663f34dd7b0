from __future__ import annotations

from imapclient.exceptions import IMAPClientError, LoginError

from imapmail.config.settings import Settings
from imapmail.domain.errors import DeleteError, FetchError
from imapmail.domain.models import MailMessage, ResolvedAddress
from imapmail.infrastructure.email.imap_client import CLOSED, CONNECTED, UNCONNECTED


def addr(address: str, name: str = "") -> ResolvedAddress:
    return ResolvedAddress(name=name, address=address)


def make_message(
    uid: int = 1,
    *,
    subject: str = "Test message",
    sender: list | None = None,
    from_: list | None = None,
    to: list | None = None,
    cc: list | None = None,
    bcc: list | None = None,
    reply_to: list | None = None,
    html_body: str = "",
    text_body: str = "",
    raw_headers: str = "",
) -> MailMessage:
    return MailMessage(
        uid=uid,
        subject=subject,
        sender=sender or [],
        from_=from_ if from_ is not None else [addr("sender@example.test", "Sender")],
        to=to or [],
        cc=cc or [],
        bcc=bcc or [],
        reply_to=reply_to or [],
        html_body=html_body,
        text_body=text_body,
        raw_headers=raw_headers,
    )


def make_settings(**overrides) -> Settings:
    values = {
        "IMAP_SERVER": "imap.example.test",
        "IMAP_USER": "qa@example.test",
        "IMAP_PASSWORD": "secret",
    }
    values.update(overrides)
    return Settings(**values)


def make_rfc822(
    *,
    subject: str = "Test message",
    from_header: str = "Jane Sender <jane.sender@example.test>",
    to_header: str = "Bob <bob@example.test>",
    extra_headers: str = "",
    text: str | None = "plain body",
    html: str | None = None,
) -> bytes:
    head = (
        f"From: {from_header}\r\n"
        f"To: {to_header}\r\n"
        f"Subject: {subject}\r\n"
        "Date: Mon, 16 Feb 2026 10:00:00 -0500\r\n"
        "Message-ID: <msg-100@example.test>\r\n"
        f"{extra_headers}"
        "MIME-Version: 1.0\r\n"
    )
    if html is None:
        return (
            head
            + 'Content-Type: text/plain; charset="utf-8"\r\n'
            + "Content-Transfer-Encoding: 8bit\r\n\r\n"
            + (text or "")
        ).encode("utf-8")
    body = (
        'Content-Type: multipart/alternative; boundary="BOUNDARY"\r\n\r\n'
        "--BOUNDARY\r\n"
        'Content-Type: text/plain; charset="utf-8"\r\n\r\n'
        f"{text or ''}\r\n"
        "--BOUNDARY\r\n"
        'Content-Type: text/html; charset="utf-8"\r\n\r\n'
        f"{html}\r\n"
        "--BOUNDARY--\r\n"
    )
    return (head + body).encode("utf-8")


class FakeIMAPClient:
    """Stands in for imapclient.IMAPClient; keeps messages by UID."""

    def __init__(
        self,
        host: str = "imap.example.test",
        port: int | None = None,
        ssl: bool = True,
        ssl_context=None,
        *,
        messages: dict[int, bytes] | None = None,
        login_error: bool = False,
        select_error: bool = False,
        fetch_error: bool = False,
        expunge_error: bool = False,
    ) -> None:
        self.host = host
        self.port = port
        self.ssl = ssl
        self.ssl_context = ssl_context
        self.messages = dict(messages or {})
        self.login_error = login_error
        self.select_error = select_error
        self.fetch_error = fetch_error
        self.expunge_error = expunge_error
        self.deleted: set[int] = set()
        self.calls: list[str] = []

    def starttls(self, ssl_context=None):
        self.calls.append("starttls")

    def login(self, user: str, password: str):
        self.calls.append("login")
        if self.login_error:
            raise LoginError("[AUTHENTICATIONFAILED] Invalid credentials")

    def select_folder(self, folder: str, readonly: bool = False):
        self.calls.append(f"select:{folder}")
        if self.select_error:
            raise IMAPClientError(f"select failed: {folder}")
        return {b"EXISTS": len(self.messages)}

    def search(self, criteria):
        self.calls.append("search")
        if self.fetch_error:
            raise IMAPClientError("SEARCH failed")
        return list(self.messages)

    def fetch(self, uids, data):
        self.calls.append("fetch")
        return {uid: {b"SEQ": i + 1, b"RFC822": self.messages[uid]} for i, uid in enumerate(uids)}

    def delete_messages(self, uids):
        self.calls.append("delete")
        self.deleted.update(uids)

    def expunge(self):
        self.calls.append("expunge")
        if self.expunge_error:
            raise IMAPClientError("EXPUNGE failed")
        for uid in self.deleted:
            self.messages.pop(uid, None)
        self.deleted.clear()

    def logout(self):
        self.calls.append("logout")

    def shutdown(self):
        self.calls.append("shutdown")


class FakeInbox:
    """Stands in for IMAPInbox at the ImapMail seam."""

    def __init__(
        self,
        messages: list[MailMessage] | None = None,
        *,
        fetch_error: bool = False,
        delete_error: bool = False,
    ) -> None:
        self.messages = list(messages or [])
        self.fetch_error = fetch_error
        self.delete_error = delete_error
        self.state = UNCONNECTED
        self.delete_all_calls = 0

    def connect(self) -> None:
        self.state = CONNECTED

    def close(self) -> None:
        self.state = CLOSED

    def fetch_all(self) -> list[MailMessage]:
        if self.fetch_error:
            raise FetchError("Could not fetch emails from INBOX: connection reset")
        return list(self.messages)

    def delete_all(self) -> None:
        self.delete_all_calls += 1
        if self.delete_error:
            raise DeleteError("Could not delete emails from INBOX: EXPUNGE failed")
        self.messages = []
