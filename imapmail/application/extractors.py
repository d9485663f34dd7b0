# imapmail/application/extractors.py
from __future__ import annotations
import json
from typing import Iterable

from imapmail.domain.models import AddressEntry, MailMessage, ResolvedAddress


def extract_addresses(entries: Iterable[AddressEntry]) -> list[str]:
    return [e.full_address for e in entries if isinstance(e, ResolvedAddress)]


def _to_json(addresses: list[str]) -> str:
    # same bytes as PHP's json_encode() defaults, so existing fixtures still compare equal
    return json.dumps(addresses, separators=(",", ":")).replace("/", "\\/")


def email_subject(message: MailMessage) -> str:
    return message.subject


def email_body(message: MailMessage) -> str:
    """
    HTML body, a blank line, then the text body. The separator and text are
    appended even when there is no HTML part: an HTML-less mail gives
    "\\n\\n<text>".
    """
    return (message.html_body or "") + "\n\n" + (message.text_body or "")


def email_sender(message: MailMessage) -> str:
    # most mail carries no Sender header; From is who sent it then
    entries = message.sender or message.from_
    if entries and isinstance(entries[0], ResolvedAddress):
        return entries[0].address
    return ""


def email_to(message: MailMessage) -> str:
    return _to_json(extract_addresses(message.to))


def email_cc(message: MailMessage) -> str:
    return _to_json(extract_addresses(message.cc))


def email_bcc(message: MailMessage) -> str:
    return _to_json(extract_addresses(message.bcc))


def email_reply_to(message: MailMessage) -> str:
    return _to_json(extract_addresses(message.reply_to))


def email_recipients(message: MailMessage) -> str:
    return _to_json(extract_addresses(message.recipients()))
