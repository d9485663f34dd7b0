# imapmail/infrastructure/email/imap_client.py
from __future__ import annotations
import logging
import ssl
from typing import TYPE_CHECKING

from imapclient import IMAPClient
from imapclient.exceptions import IMAPClientError

from imapmail.config.settings import ConnectionFlags
from imapmail.domain.errors import DeleteError, FetchError, MailConnectionError
from imapmail.domain.models import MailMessage
from imapmail.infrastructure.email.mapper import rfc822_to_mail_message

if TYPE_CHECKING:
    from imapmail.config.settings import Settings

logger = logging.getLogger(__name__)

# session states
UNCONNECTED = "unconnected"
CONNECTED = "connected"
CLOSED = "closed"


def build_ssl_context(flags: ConnectionFlags) -> ssl.SSLContext:
    ctx = ssl.create_default_context()
    if not flags.verify_cert:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    return ctx


class IMAPInbox:
    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        flags: ConnectionFlags | None = None,
        folder: str = "INBOX",
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.flags = flags or ConnectionFlags()
        self.folder = folder
        self.client: IMAPClient | None = None
        self.state = UNCONNECTED

    @classmethod
    def from_settings(cls, settings: "Settings") -> "IMAPInbox":
        return cls(
            host=settings.IMAP_SERVER,
            port=settings.IMAP_PORT,
            user=settings.IMAP_USER,
            password=settings.IMAP_PASSWORD,
            flags=settings.connection_flags(),
        )

    def __enter__(self) -> "IMAPInbox":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ───────── session ─────────
    def connect(self) -> None:
        if self.state != UNCONNECTED:
            raise MailConnectionError(f"IMAP session to {self.host} is already {self.state}")
        ctx = build_ssl_context(self.flags) if (self.flags.ssl or self.flags.starttls) else None
        client: IMAPClient | None = None
        try:
            client = IMAPClient(self.host, port=self.port, ssl=self.flags.ssl, ssl_context=ctx)
            if self.flags.starttls:
                client.starttls(ctx)
            client.login(self.user, self.password)
            client.select_folder(self.folder)
        except (IMAPClientError, OSError) as e:
            if client is not None:
                try:
                    client.shutdown()
                except OSError:
                    logger.debug("Socket already gone for %s:%s", self.host, self.port)
            raise MailConnectionError(
                f"Could not open {self.folder} on {self.host}:{self.port} as {self.user}: {e}"
            ) from e
        self.client = client
        self.state = CONNECTED
        logger.info("IMAP connected host=%s port=%s folder=%s", self.host, self.port, self.folder)

    def close(self) -> None:
        if self.state != CONNECTED:
            self.state = CLOSED
            return
        try:
            assert self.client
            self.client.logout()
        except (IMAPClientError, OSError):
            logger.exception("Error closing IMAP session to %s", self.host)
        finally:
            self.client = None
            self.state = CLOSED
        logger.info("IMAP session closed host=%s", self.host)

    def _require_client(self) -> IMAPClient:
        if self.state != CONNECTED or self.client is None:
            raise MailConnectionError(f"IMAP session to {self.host} is {self.state}")
        return self.client

    # ───────── mailbox ─────────
    def refresh(self) -> None:
        # re-SELECT drops whatever view of the folder the server handed out before
        self._require_client().select_folder(self.folder)

    def fetch_all(self) -> list[MailMessage]:
        client = self._require_client()
        try:
            self.refresh()
            uids = sorted(client.search(["ALL"]))
            if not uids:
                logger.info("Fetched 0 emails from %s", self.folder)
                return []
            resp = client.fetch(uids, ["RFC822"])
        except (IMAPClientError, OSError) as e:
            raise FetchError(f"Could not fetch emails from {self.folder}: {e}") from e

        messages: list[MailMessage] = []
        for uid in uids:
            data = resp.get(uid)
            if not data or b"RFC822" not in data:
                # expunged between SEARCH and FETCH
                logger.debug("UID %s vanished before fetch", uid)
                continue
            messages.append(rfc822_to_mail_message(uid, data[b"RFC822"]))
        logger.info("Fetched %s emails from %s", len(messages), self.folder)
        return messages

    def delete(self, message: MailMessage) -> None:
        client = self._require_client()
        try:
            client.delete_messages([message.uid])
        except (IMAPClientError, OSError) as e:
            raise DeleteError(f"Could not delete UID {message.uid} from {self.folder}: {e}") from e
        logger.debug("Flagged UID %s as deleted", message.uid)

    def delete_all(self) -> None:
        client = self._require_client()
        try:
            uids = client.search(["ALL"])
            if uids:
                client.delete_messages(uids)
            client.expunge()
            self.refresh()
        except (IMAPClientError, OSError) as e:
            raise DeleteError(f"Could not delete emails from {self.folder}: {e}") from e
        logger.info("Deleted %s emails from %s", len(uids), self.folder)
