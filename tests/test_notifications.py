import asyncio

import pytest

from gigplanner.email_service import EmailNotConfiguredError, is_email_configured, send_email
from gigplanner.email_templates import contract_response_template, contract_sent_template

LINES = [
    {
        "date": "Fri 07 Mar 2025",
        "venueName": "Rhythm & Brews",
        "startTime": "20:00",
        "endTime": "23:00",
        "fee": 240.0,
    }
]


def test_contract_email_lists_dates_and_link() -> None:
    mjml = contract_sent_template(
        "Ella Thompson",
        "March 2025",
        LINES,
        240.0,
        "http://localhost:5173/contracts/respond/abc",
        "March 21, 2025",
        message="<script>hi</script>",
    )

    assert "http://localhost:5173/contracts/respond/abc" in mjml
    assert "Rhythm &amp; Brews" in mjml
    assert "<script>" not in mjml
    assert mjml.strip().startswith("<mjml")


def test_response_email_mentions_signature() -> None:
    mjml = contract_response_template("Ella Thompson", "March 2025", "signed", signature="E.T.")
    assert "E.T." in mjml


def test_sending_without_provider_raises() -> None:
    assert is_email_configured() is False
    with pytest.raises(EmailNotConfiguredError):
        asyncio.run(send_email("ella@example.com", "Hello", "<mjml></mjml>"))
