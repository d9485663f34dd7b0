from __future__ import annotations

import json

from imapmail.application import extractors
from imapmail.domain.models import UnresolvedAddress
from tests.helpers import addr, make_message


def test_body_concatenates_html_and_text() -> None:
    message = make_message(html_body="<p>hi</p>", text_body="hi")

    assert extractors.email_body(message) == "<p>hi</p>\n\nhi"


def test_body_keeps_separator_without_html() -> None:
    message = make_message(html_body="", text_body="hi")

    assert extractors.email_body(message) == "\n\nhi"


def test_subject_is_returned_as_stored() -> None:
    assert extractors.email_subject(make_message(subject="  Re: Order #42 ")) == "  Re: Order #42 "


def test_to_renders_name_and_address() -> None:
    message = make_message(to=[addr("a@x.com", "A")])

    assert extractors.email_to(message) == '["A <a@x.com>"]'
    assert json.loads(extractors.email_to(message)) == ["A <a@x.com>"]


def test_address_without_name_is_bare() -> None:
    message = make_message(cc=[addr("b@x.com")])

    assert extractors.email_cc(message) == '["b@x.com"]'


def test_unresolved_entries_are_dropped() -> None:
    message = make_message(bcc=[UnresolvedAddress(raw="undisclosed-recipients"), addr("c@x.com", "C")])

    assert extractors.email_bcc(message) == '["C <c@x.com>"]'


def test_recipients_are_to_then_cc_then_bcc() -> None:
    message = make_message(
        to=[addr("a@x.com", "A")],
        cc=[addr("b@x.com")],
        bcc=[addr("c@x.com", "C")],
    )

    assert json.loads(extractors.email_recipients(message)) == ["A <a@x.com>", "b@x.com", "C <c@x.com>"]


def test_json_matches_php_escaping() -> None:
    message = make_message(to=[addr("ops/alerts@x.com", "Zoë")], reply_to=[addr("r@x.com"), addr("s@x.com")])

    assert extractors.email_to(message) == '["Zo\\u00eb <ops\\/alerts@x.com>"]'
    assert extractors.email_reply_to(message) == '["r@x.com","s@x.com"]'


def test_empty_list_is_empty_json_array() -> None:
    assert extractors.email_cc(make_message()) == "[]"


def test_sender_prefers_sender_header() -> None:
    message = make_message(sender=[addr("relay@example.test")], from_=[addr("jane@example.test", "Jane")])

    assert extractors.email_sender(message) == "relay@example.test"


def test_sender_falls_back_to_from() -> None:
    message = make_message(from_=[addr("jane@example.test", "Jane"), addr("other@example.test")])

    assert extractors.email_sender(message) == "jane@example.test"


def test_sender_empty_when_missing() -> None:
    assert extractors.email_sender(make_message(from_=[])) == ""
