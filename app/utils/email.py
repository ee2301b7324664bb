"""
Outbound email over SMTP.

Messages go out as multipart/alternative so clients that cannot render
HTML fall back to the text part. Port 465 uses implicit TLS, anything
else is upgraded with STARTTLS.
"""

import logging
import smtplib
from email.message import EmailMessage
from typing import List, Optional
from urllib.parse import urlencode

from app.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_SMTP_PORT = 587
SMTP_SSL_PORT = 465
SMTP_TIMEOUT_SECONDS = 10


def smtp_configured() -> bool:
    return bool(settings.SMTP_SERVER and settings.SMTP_EMAIL)


def build_message(
    recipients: List[str],
    subject: str,
    text_body: str,
    html_body: Optional[str] = None,
) -> EmailMessage:
    """Assemble a message from the configured sender."""
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = str(settings.SMTP_EMAIL)
    msg["To"] = ", ".join(recipients)
    msg.set_content(text_body)
    if html_body:
        msg.add_alternative(html_body, subtype="html")
    return msg


def send_email(
    recipients: List[str],
    subject: str,
    text_body: str,
    html_body: Optional[str] = None,
) -> bool:
    """
    Send one message using the SMTP settings from config.

    Returns:
        True if the server accepted the message, False otherwise
    """
    if not smtp_configured():
        logger.warning(f"SMTP settings not configured. Email '{subject}' not sent.")
        return False

    msg = build_message(recipients, subject, text_body, html_body)
    port = settings.SMTP_PORT or DEFAULT_SMTP_PORT

    try:
        if port == SMTP_SSL_PORT:
            server = smtplib.SMTP_SSL(settings.SMTP_SERVER, port, timeout=SMTP_TIMEOUT_SECONDS)
        else:
            server = smtplib.SMTP(settings.SMTP_SERVER, port, timeout=SMTP_TIMEOUT_SECONDS)
        with server:
            if port != SMTP_SSL_PORT:
                server.starttls()
            if settings.SMTP_PASSWORD:
                server.login(str(settings.SMTP_EMAIL), settings.SMTP_PASSWORD)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email '{subject}': {e}")
        return False

    logger.info(f"Email '{subject}' sent to {len(recipients)} recipient(s)")
    return True


# ============================================================
# Password Reset
# ============================================================

def reset_page_link(email: str) -> Optional[str]:
    """Link to the web app's reset form with the address pre-filled."""
    if not settings.FRONTEND_URL:
        return None
    base = settings.FRONTEND_URL.rstrip("/")
    return f"{base}/auth/reset-password?{urlencode({'email': email})}"


def send_password_reset_code(email: str, code: str, expires_in_minutes: int = 15) -> bool:
    """
    Email a six-digit reset code.

    The code itself never appears in the link, only in the body.
    """
    subject = f"Your {settings.PROJECT_NAME} password reset code"
    link = reset_page_link(email)

    text_body = (
        f"Your {settings.PROJECT_NAME} password reset code is: {code}\n\n"
        f"It expires in {expires_in_minutes} minutes.\n"
    )
    if link:
        text_body += f"\nEnter it at {link}\n"
    text_body += "\nIf you did not ask to reset your password, you can ignore this email.\n"

    link_html = (
        f'<p style="font-size: 14px;"><a href="{link}" style="color: #0f766e;">'
        f"Open the reset page</a></p>"
        if link else ""
    )
    html_body = f"""
    <!DOCTYPE html>
    <html lang="en">
    <body style="margin: 0; padding: 32px; background-color: #f3f4f6;
                 font-family: -apple-system, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif;
                 color: #111827;">
      <table width="100%" cellpadding="0" cellspacing="0" role="presentation"
             style="max-width: 560px; margin: 0 auto; background-color: #ffffff;
                    border-radius: 12px; overflow: hidden;">
        <tr>
          <td style="background-color: #0f766e; padding: 24px; text-align: center;">
            <h1 style="margin: 0; font-size: 20px; color: #ffffff;">{settings.PROJECT_NAME}</h1>
          </td>
        </tr>
        <tr>
          <td style="padding: 28px;">
            <h2 style="margin-top: 0; font-size: 18px;">Reset your password</h2>
            <p style="font-size: 32px; font-weight: 700; letter-spacing: 8px; text-align: center;
                      font-family: 'Courier New', Courier, monospace; color: #0f766e;">
              {code}
            </p>
            <p style="font-size: 14px; color: #92400e;">
              This code expires in <strong>{expires_in_minutes} minutes</strong>.
            </p>
            {link_html}
            <p style="font-size: 13px; color: #6b7280;">
              If you did not ask to reset your password, you can ignore this email.
            </p>
          </td>
        </tr>
      </table>
    </body>
    </html>
    """

    return send_email([email], subject, text_body, html_body)
