# services/otp_service.py
from __future__ import annotations
import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from db import SessionLocal
from models import OtpToken, OtpPurpose
from services.email_service import send_otp_email

OTP_TTL_MINUTES = 10

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    # naive UTC, matching the TIMESTAMP columns
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _generate_code() -> str:
    return f"{secrets.randbelow(1_000_000):06d}"


def issue_otp(email: str, purpose: OtpPurpose, user_id: Optional[uuid.UUID] = None) -> str:
    """
    Create a code for (email, purpose), supersede older unused codes for the
    same pair, and email it. Returns the code (useful for tests; do not log it).

    Superseding and inserting share one transaction, so a reader never sees
    two live codes for the pair. Delivery failures are logged and swallowed:
    the stored code stays valid either way.
    """
    email_lc = (email or "").strip().lower()
    if not email_lc:
        raise ValueError("email is required")

    code = _generate_code()
    expires_at = _utcnow() + timedelta(minutes=OTP_TTL_MINUTES)

    with SessionLocal() as db:
        (
            db.query(OtpToken)
            .filter(
                OtpToken.email == email_lc,
                OtpToken.purpose == purpose,
                OtpToken.used.is_(False),
            )
            .update({OtpToken.used: True}, synchronize_session=False)
        )
        db.add(OtpToken(
            email=email_lc,
            purpose=purpose,
            code=code,
            expires_at=expires_at,
            user_id=user_id,
        ))
        db.commit()

    try:
        send_otp_email(email_lc, code, purpose, ttl_minutes=OTP_TTL_MINUTES)
    except Exception:
        logger.exception(f"Failed to send {purpose.value} code to {email_lc[:3]}***")

    return code


def verify_otp(email: str, code: str, purpose: OtpPurpose) -> bool:
    """
    Consume a live code. True exactly once per code; wrong, used and expired
    codes are all just False.
    """
    email_lc = (email or "").strip().lower()
    if not email_lc or not code:
        return False

    with SessionLocal() as db:
        now = _utcnow()
        token_id = (
            db.query(OtpToken.id)
            .filter(
                OtpToken.email == email_lc,
                OtpToken.purpose == purpose,
                OtpToken.code == str(code).strip(),
                OtpToken.used.is_(False),
                OtpToken.expires_at > now,
            )
            .limit(1)
            .scalar()
        )
        if token_id is None:
            return False

        # conditional flip: a concurrent verifier that got here first wins
        rows = (
            db.query(OtpToken)
            .filter(OtpToken.id == token_id, OtpToken.used.is_(False))
            .update({OtpToken.used: True}, synchronize_session=False)
        )
        db.commit()
        return rows == 1


def cleanup_expired_otps() -> int:
    """Delete every expired code. Returns how many rows went away."""
    with SessionLocal() as db:
        rows = (
            db.query(OtpToken)
            .filter(OtpToken.expires_at < _utcnow())
            .delete(synchronize_session=False)
        )
        db.commit()
        return rows
