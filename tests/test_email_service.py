from datetime import date
from unittest.mock import patch

from portal.core.config import settings
from portal.core.db import to_async_url
from portal.models import Appointment
from portal.services.email_service import build_appointment_request_html, send_appointment_request_email


def _appointment(**overrides) -> Appointment:
    fields = dict(
        nom="Durand",
        prenom="Alice",
        email="alice@example.com",
        telephone="0601020304",
        date=date(2025, 3, 10),
        heure="09:30",
        motif="Consultation",
        description="<b>bail</b> & loyers",
    )
    fields.update(overrides)
    return Appointment(**fields)


def test_html_shows_slot_and_escapes_user_text() -> None:
    html = build_appointment_request_html(_appointment())
    assert "10/03/2025 à 09:30" in html
    assert "Alice Durand" in html
    assert "&lt;b&gt;bail&lt;/b&gt; &amp; loyers" in html
    assert "<b>bail</b>" not in html


def test_html_without_description_has_no_message_block() -> None:
    html = build_appointment_request_html(_appointment(description=""))
    assert "Votre message" not in html


def test_send_is_skipped_without_smtp() -> None:
    with patch("portal.services.email_service.smtplib.SMTP") as smtp:
        send_appointment_request_email(_appointment())
    smtp.assert_not_called()


def test_send_uses_smtp_when_configured(monkeypatch) -> None:
    monkeypatch.setattr(settings, "smtp_host", "smtp.example.com")
    monkeypatch.setattr(settings, "smtp_user", "user")
    monkeypatch.setattr(settings, "smtp_password", "pw")
    monkeypatch.setattr(settings, "from_email", "cabinet@example.com")
    with patch("portal.services.email_service.smtplib.SMTP") as smtp:
        send_appointment_request_email(_appointment())
    server = smtp.return_value.__enter__.return_value
    server.login.assert_called_once_with("user", "pw")
    from_addr, to_addrs, _ = server.sendmail.call_args.args
    assert from_addr == "cabinet@example.com"
    assert to_addrs == ["alice@example.com"]


def test_smtp_errors_are_logged_not_raised(monkeypatch) -> None:
    monkeypatch.setattr(settings, "smtp_host", "smtp.example.com")
    monkeypatch.setattr(settings, "smtp_user", "user")
    monkeypatch.setattr(settings, "smtp_password", "pw")
    monkeypatch.setattr(settings, "from_email", "cabinet@example.com")
    with patch("portal.services.email_service.smtplib.SMTP", side_effect=OSError("unreachable")):
        send_appointment_request_email(_appointment())


def test_async_url_mapping() -> None:
    assert (
        to_async_url("postgresql://u:p@host/db?sslmode=require&channel_binding=require&application_name=portal")
        == "postgresql+asyncpg://u:p@host/db?application_name=portal"
    )
    assert to_async_url("sqlite+aiosqlite:///portal.db") == "sqlite+aiosqlite:///portal.db"
