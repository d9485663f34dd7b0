# imapmail/config/settings.py
from __future__ import annotations
import os
import re
from dataclasses import dataclass, field
from typing import Any, Callable

from dotenv import load_dotenv

from imapmail.domain.errors import ConfigurationError

load_dotenv()

# setting -> (env var, ini key)
SOURCES: dict[str, tuple[str, str]] = {
    "IMAP_SERVER": ("IMAP_SERVER", "imap_server"),
    "IMAP_USER": ("IMAP_USER", "imap_user"),
    "IMAP_PASSWORD": ("IMAP_PASSWORD", "imap_password"),
    "IMAP_PORT": ("IMAP_PORT", "imap_port"),
    "IMAP_FLAGS": ("IMAP_FLAGS", "imap_flags"),
    "DELETE_EMAILS_AFTER_SCENARIO": ("IMAP_DELETE_EMAILS_AFTER_SCENARIO", "delete_emails_after_scenario"),
    "MAILBOX_MAPPING": ("IMAP_MAILBOX_MAPPING", "mailbox_mapping"),
}
REQUIRED = ("IMAP_SERVER", "IMAP_USER", "IMAP_PASSWORD")
DEFAULT_IMAP_PORT = 143
TRUTHY = {"true", "1", "yes", "on"}

# c-client style flags, e.g. "/imap/ssl/novalidate-cert"
IGNORED_FLAGS = {"imap", "imap4", "imap4rev1", "secure", "readonly", "debug", "norsh"}


@dataclass(frozen=True)
class ConnectionFlags:
    ssl: bool = False
    starttls: bool = False
    verify_cert: bool = True


def parse_connection_flags(raw: str) -> ConnectionFlags:
    ssl = starttls = False
    verify_cert = True
    for flag in (f.strip().lower() for f in (raw or "").split("/")):
        if not flag or flag in IGNORED_FLAGS:
            continue
        if flag == "ssl":
            ssl = True
        elif flag == "tls":
            starttls = True
        elif flag == "notls":
            starttls = False
        elif flag == "novalidate-cert":
            verify_cert = False
        elif flag == "validate-cert":
            verify_cert = True
        else:
            raise ConfigurationError(f"Unsupported IMAP flag {flag!r} in {raw!r}")
    if ssl and starttls:
        raise ConfigurationError(f"IMAP flags {raw!r} ask for both /ssl and /tls")
    return ConnectionFlags(ssl=ssl, starttls=starttls, verify_cert=verify_cert)


def parse_mailbox_mapping(raw: Any) -> dict[str, str]:
    if isinstance(raw, dict):
        return {str(k): str(v) for k, v in raw.items()}
    if isinstance(raw, (list, tuple)):
        raw = "\n".join(str(x) for x in raw)
    mapping: dict[str, str] = {}
    for item in re.split(r"[,\n]", raw or ""):
        item = item.strip()
        if not item:
            continue
        alias, sep, folder = item.partition("=")
        if not sep or not alias.strip() or not folder.strip():
            raise ConfigurationError(f"mailbox_mapping entry {item!r} is not alias=folder")
        mapping[alias.strip()] = folder.strip()
    return mapping


def _as_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw or "").strip().lower() in TRUTHY


@dataclass(frozen=True)
class Settings:
    IMAP_SERVER: str
    IMAP_USER: str
    IMAP_PASSWORD: str
    IMAP_PORT: int = DEFAULT_IMAP_PORT
    IMAP_FLAGS: str = ""
    DELETE_EMAILS_AFTER_SCENARIO: bool = False
    # reserved: parsed and carried, nothing routes on it yet
    MAILBOX_MAPPING: dict[str, str] = field(default_factory=dict)

    @classmethod
    def load(cls, ini: Callable[[str], Any] | None = None) -> "Settings":
        """
        Environment variables win over ini keys, so CI can override a
        checked-in pytest.ini. Raises ConfigurationError listing every
        missing required option.
        """
        raw: dict[str, Any] = {}
        for name, (env_name, ini_name) in SOURCES.items():
            value: Any = os.getenv(env_name)
            if value in (None, "") and ini is not None:
                value = ini(ini_name)
            if value not in (None, "", []):
                raw[name] = value

        missing = [SOURCES[name][1] for name in REQUIRED if not str(raw.get(name, "")).strip()]
        if missing:
            raise ConfigurationError("Missing required IMAP option(s): " + ", ".join(missing))

        try:
            port = int(raw.get("IMAP_PORT", DEFAULT_IMAP_PORT))
        except (TypeError, ValueError):
            raise ConfigurationError(f"imap_port must be an integer, got {raw['IMAP_PORT']!r}") from None

        settings = cls(
            IMAP_SERVER=str(raw["IMAP_SERVER"]).strip(),
            IMAP_USER=str(raw["IMAP_USER"]).strip(),
            IMAP_PASSWORD=str(raw["IMAP_PASSWORD"]),
            IMAP_PORT=port,
            IMAP_FLAGS=str(raw.get("IMAP_FLAGS", "")).strip(),
            DELETE_EMAILS_AFTER_SCENARIO=_as_bool(raw.get("DELETE_EMAILS_AFTER_SCENARIO")),
            MAILBOX_MAPPING=parse_mailbox_mapping(raw.get("MAILBOX_MAPPING")),
        )
        # fail at setup, not at the first connect
        settings.connection_flags()
        return settings

    # ───────── helpers ─────────
    def connection_flags(self) -> ConnectionFlags:
        return parse_connection_flags(self.IMAP_FLAGS)
