# imapmail/application/spam_check.py
from __future__ import annotations
import re

SPAM_STATUS_HEADER = "X-Spam-Status"
# name: value, with folded continuation lines (leading space/tab) kept in the value
HEADER_PATTERN = re.compile(r"^([^\r\n:]+)\s*[:]\s*([^\r\n:]+(?:\r?\n[ \t][^\r\n]+)*)", re.MULTILINE)


def parse_raw_headers(raw_headers: str) -> list[tuple[str, str]]:
    return HEADER_PATTERN.findall(raw_headers or "")


def find_header(raw_headers: str, name: str) -> str | None:
    for key, value in parse_raw_headers(raw_headers):
        if key == name:
            return value
    return None


def spam_status_problem(raw_headers: str) -> str | None:
    """
    SpamAssassin writes "X-Spam-Status: Yes, score=..." on mail it rates as
    spam. Returns a failure message when the header is there and does not
    start with "No"; None when it is fine or missing.
    """
    value = find_header(raw_headers, SPAM_STATUS_HEADER)
    if value is None or value.startswith("No"):
        return None
    return (
        "Your mail is liable to end up in spam folder, since "
        f"{SPAM_STATUS_HEADER} contains the following: {value}"
    )
