import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

from portal.core.config import settings
from portal.core.dates import format_fr
from portal.models.appointment import Appointment

logger = logging.getLogger(__name__)


def _send_email_sync(to_email: str, subject: str, html_body: str) -> None:
    """Send email via SMTP (blocking). Use from background task."""
    if not settings.email_enabled:
        logger.debug("Email disabled (SMTP not configured), skipping send")
        return
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.from_name} <{settings.from_email}>"
    msg["To"] = to_email
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
            server.starttls()
            server.login(settings.smtp_user, settings.smtp_password)
            server.sendmail(settings.from_email, [to_email], msg.as_string())
        logger.info("Email sent to %s", to_email)
    except Exception as e:
        logger.exception("Failed to send email to %s: %s", to_email, e)


def build_appointment_request_html(appointment: Appointment) -> str:
    """HTML body acknowledging a booking request (status en_attente)."""
    name = escape(f"{appointment.prenom} {appointment.nom}".strip())
    description_section = ""
    if appointment.description:
        description_section = f"""
        <p style="margin:0 0 8px 0;color:#374151;"><strong>Votre message :</strong></p>
        <p style="margin:0 0 24px 0;color:#6b7280;font-size:14px;">{escape(appointment.description)}</p>
        """
    contact = " &nbsp;·&nbsp; ".join(
        escape(part) for part in (settings.contact_email, settings.contact_phone) if part
    )
    return f"""
<!DOCTYPE html>
<html lang="fr">
<head>
  <meta charset="utf-8">
  <title>Demande de rendez-vous</title>
</head>
<body style="margin:0;padding:0;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,sans-serif;background-color:#f3f4f6;">
  <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="background-color:#f3f4f6;">
    <tr>
      <td align="center" style="padding:40px 16px;">
        <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="max-width:560px;background:#ffffff;border-radius:12px;">
          <tr>
            <td style="padding:32px;">
              <h1 style="margin:0 0 8px 0;font-size:22px;color:#111827;">Demande de rendez-vous enregistrée</h1>
              <p style="margin:0 0 24px 0;font-size:15px;color:#6b7280;">Bonjour {name or 'Madame, Monsieur'}, nous avons bien reçu votre demande. Nous vous confirmerons rapidement ce rendez-vous.</p>
              <p style="margin:0;font-size:16px;font-weight:600;color:#111827;">{format_fr(appointment.date)} à {escape(appointment.heure)}</p>
              <p style="margin:4px 0 24px 0;font-size:14px;color:#6b7280;">Motif : {escape(appointment.motif)}</p>
              {description_section}
            </td>
          </tr>
          <tr>
            <td style="padding:24px 32px;background:#f9fafb;border-top:1px solid #e5e7eb;">
              <p style="margin:0 0 4px 0;font-size:13px;font-weight:600;color:#111827;">{escape(settings.site_name)}</p>
              <p style="margin:0;font-size:13px;color:#6b7280;">{contact}<br>{escape(settings.contact_address)}</p>
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>
"""


def send_appointment_request_email(appointment: Appointment) -> None:
    """Compose and send the booking acknowledgement (call from background task)."""
    subject = f"{settings.site_name} – Demande de rendez-vous du {format_fr(appointment.date)}"
    _send_email_sync(appointment.email, subject, build_appointment_request_html(appointment))
