import os
import ssl
import smtplib
import logging
from email.message import EmailMessage
from datetime import datetime, timezone

from models import OtpPurpose

SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASS = os.getenv("SMTP_PASS")
SMTP_TIMEOUT = float(os.getenv("SMTP_TIMEOUT", "10"))
EMAIL_FROM = os.getenv("EMAIL_FROM", SMTP_USER or "")
EMAIL_FROM_NAME = os.getenv("EMAIL_FROM_NAME", "Notes")

logger = logging.getLogger(__name__)


# ────────────────────────────────────────────────────────────
# Helpers
# ────────────────────────────────────────────────────────────
def _send_email(to: str, subject: str, body: str, html_body: str = None) -> None:
    if not all([SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS, EMAIL_FROM]):
        raise RuntimeError("SMTP configuration missing")

    msg = EmailMessage()
    msg["From"] = f"{EMAIL_FROM_NAME} <{EMAIL_FROM}>"
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content(body)

    if html_body:
        msg.add_alternative(html_body, subtype="html")

    context = ssl.create_default_context()
    if SMTP_PORT == 465:
        with smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, context=context, timeout=SMTP_TIMEOUT) as server:
            server.login(SMTP_USER, SMTP_PASS)
            server.send_message(msg, from_addr=EMAIL_FROM, to_addrs=[to])
    else:
        with smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=SMTP_TIMEOUT) as server:
            server.starttls(context=context)
            server.login(SMTP_USER, SMTP_PASS)
            server.send_message(msg, from_addr=EMAIL_FROM, to_addrs=[to])


def purpose_strings(purpose: OtpPurpose) -> tuple[str, str]:
    """(subject, action phrase) for each OTP purpose."""
    if purpose == OtpPurpose.LOGIN:
        return f"{EMAIL_FROM_NAME} - Login Verification", "log in to your account"
    if purpose == OtpPurpose.PASSWORD_RESET:
        return f"{EMAIL_FROM_NAME} - Password Reset", "reset your password"
    return f"{EMAIL_FROM_NAME} - Verify Your Account", "verify your account"


def _build_html_email(code: str, action: str, ttl_minutes: int) -> str:
    return f"""
<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{EMAIL_FROM_NAME} - Verification Code</title></head>
<body style="font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h2 style="color: #367AFF; text-align: center;">{EMAIL_FROM_NAME}</h2>
    <p style="text-align: center;">Use the following code to {action}:</p>
    <p style="text-align: center; font-size: 32px; font-weight: bold; letter-spacing: 4px; color: #367AFF;">{code}</p>
    <p style="text-align: center;">This code will expire in {ttl_minutes} minutes.</p>
    <p style="text-align: center; color: #6B7280; font-size: 14px;">
        If you didn't request this code, please ignore this email.<br>
        &copy; {datetime.now(timezone.utc).year} {EMAIL_FROM_NAME}
    </p>
</body>
</html>
"""


def send_otp_email(email: str, code: str, purpose: OtpPurpose, ttl_minutes: int = 10) -> None:
    """Deliver an OTP. Raises on SMTP failure; callers decide whether that matters."""
    subject, action = purpose_strings(purpose)
    plain_body = (
        f"Hi,\n\n"
        f"Use the following code to {action}: {code}\n"
        f"It expires in {ttl_minutes} minutes.\n\n"
        f"If you didn't request this, you can safely ignore this email.\n\n"
        f"- {EMAIL_FROM_NAME}"
    )
    _send_email(to=email, subject=subject, body=plain_body,
                html_body=_build_html_email(code, action, ttl_minutes))
    logger.info(f"Sent {purpose.value} code to {email[:3]}***")
