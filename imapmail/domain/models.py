# imapmail/domain/models.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class ResolvedAddress:
    name: str
    address: str

    @property
    def full_address(self) -> str:
        if self.name:
            return f"{self.name} <{self.address}>"
        return self.address


@dataclass(frozen=True)
class UnresolvedAddress:
    # group syntax ("undisclosed-recipients:;") or anything without an address part
    raw: str


AddressEntry = Union[ResolvedAddress, UnresolvedAddress]


@dataclass(frozen=True)
class MailMessage:
    uid: int
    subject: str
    sender: list[AddressEntry] = field(default_factory=list)
    from_: list[AddressEntry] = field(default_factory=list)
    to: list[AddressEntry] = field(default_factory=list)
    cc: list[AddressEntry] = field(default_factory=list)
    bcc: list[AddressEntry] = field(default_factory=list)
    reply_to: list[AddressEntry] = field(default_factory=list)
    html_body: str = ""
    text_body: str = ""
    raw_headers: str = ""

    def recipients(self) -> list[AddressEntry]:
        return [*self.to, *self.cc, *self.bcc]

    def has_recipient(self, address: str) -> bool:
        """Exact, case-sensitive match on the address part of To/Cc/Bcc."""
        return any(
            isinstance(entry, ResolvedAddress) and entry.address == address
            for entry in self.recipients()
        )
