# imapmail/interface_adapters/pytest_plugin.py
# pytest11 entry point: ini options plus the imap_mail fixture
from __future__ import annotations
import logging
from typing import Iterator

import pytest

from imapmail.config.settings import Settings
from imapmail.interface_adapters.imap_mail import ImapMail

logger = logging.getLogger(__name__)

INI_OPTIONS: list[tuple[str, str, str | None, object]] = [
    ("imap_server", "IMAP host the imap_mail fixture connects to (env IMAP_SERVER)", None, ""),
    ("imap_user", "IMAP login user (env IMAP_USER)", None, ""),
    ("imap_password", "IMAP login password, prefer env IMAP_PASSWORD", None, ""),
    ("imap_port", "IMAP port, default 143 (env IMAP_PORT)", None, ""),
    ("imap_flags", "connection flags such as /imap/ssl/novalidate-cert (env IMAP_FLAGS)", None, ""),
    (
        "delete_emails_after_scenario",
        "purge the whole mailbox after every test using imap_mail (env IMAP_DELETE_EMAILS_AFTER_SCENARIO)",
        "bool",
        False,
    ),
    ("mailbox_mapping", "alias=folder pairs, one per line (env IMAP_MAILBOX_MAPPING)", "linelist", []),
]


def pytest_addoption(parser: pytest.Parser) -> None:
    for name, help_text, ini_type, default in INI_OPTIONS:
        parser.addini(name, help_text, type=ini_type, default=default)


@pytest.fixture(scope="session")
def imap_mail_settings(pytestconfig: pytest.Config) -> Settings:
    return Settings.load(pytestconfig.getini)


@pytest.fixture
def imap_mail(imap_mail_settings: Settings) -> Iterator[ImapMail]:
    mail = ImapMail(imap_mail_settings)
    mail.before()
    try:
        yield mail
    finally:
        logger.debug("Tearing down imap_mail (purge=%s)", imap_mail_settings.DELETE_EMAILS_AFTER_SCENARIO)
        mail.after()
