# imapmail/infrastructure/email/mapper.py
from __future__ import annotations
import re
from email import policy
from email.message import EmailMessage
from email.parser import BytesParser

import pyzmail

from imapmail.domain.models import AddressEntry, MailMessage, ResolvedAddress, UnresolvedAddress

HEADER_END = re.compile(rb"\r?\n\r?\n")


def _clean(value: str | None) -> str:
    # raw 8-bit header bytes (RFC 6532) arrive surrogate-escaped; they are utf-8
    return (value or "").encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def _addresses(headers: EmailMessage, name: str) -> list[AddressEntry]:
    # pyzmail's get_addresses() lowercases the address; recipient matching is case-sensitive
    entries: list[AddressEntry] = []
    for header in headers.get_all(name) or []:
        for group in header.groups:
            if group.display_name is not None and not group.addresses:
                # empty group, e.g. "undisclosed-recipients:;"
                entries.append(UnresolvedAddress(raw=_clean(group.display_name)))
            for address in group.addresses:
                if not address.username or not address.domain:
                    entries.append(UnresolvedAddress(raw=_clean(str(address))))
                    continue
                entries.append(
                    ResolvedAddress(name=_clean(address.display_name), address=_clean(address.addr_spec))
                )
    return entries


def _part_text(part) -> str:
    if part is None:
        return ""
    payload = part.get_payload()
    if payload is None:
        return ""
    if isinstance(payload, str):
        return payload
    try:
        return payload.decode(part.charset or "utf-8", errors="replace")
    except LookupError:
        # unknown charset label
        return payload.decode("utf-8", errors="replace")


def raw_header_block(rfc822_bytes: bytes) -> str:
    m = HEADER_END.search(rfc822_bytes)
    head = rfc822_bytes[: m.start()] if m else rfc822_bytes
    return head.decode("utf-8", errors="replace")


def rfc822_to_mail_message(uid: int, rfc822_bytes: bytes) -> MailMessage:
    msg = pyzmail.PyzMessage.factory(rfc822_bytes)
    # header values through the modern policy: raw utf-8 and RFC 2047 both decode
    headers = BytesParser(policy=policy.default).parsebytes(rfc822_bytes, headersonly=True)
    return MailMessage(
        uid=uid,
        subject=_clean(headers.get("Subject")),
        sender=_addresses(headers, "sender"),
        from_=_addresses(headers, "from"),
        to=_addresses(headers, "to"),
        cc=_addresses(headers, "cc"),
        bcc=_addresses(headers, "bcc"),
        reply_to=_addresses(headers, "reply-to"),
        html_body=_part_text(msg.html_part),
        text_body=_part_text(msg.text_part),
        raw_headers=raw_header_block(rfc822_bytes),
    )
