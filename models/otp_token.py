import uuid
import enum
from sqlalchemy import Column, Text, TIMESTAMP, String, Boolean, Enum, ForeignKey, Index, Uuid
from sqlalchemy.sql import func
from .base import Base


class OtpPurpose(enum.Enum):
    SIGNUP = "SIGNUP"
    LOGIN = "LOGIN"
    PASSWORD_RESET = "PASSWORD_RESET"


class OtpToken(Base):
    __tablename__ = "otp_tokens"

    id         = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email      = Column(Text, nullable=False)
    purpose    = Column(Enum(OtpPurpose, name="otp_purpose"), nullable=False)
    code       = Column(String(6), nullable=False)  # 6-digit numeric code, leading zeros kept
    expires_at = Column(TIMESTAMP, nullable=False)
    used       = Column(Boolean, nullable=False, default=False)
    user_id    = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(TIMESTAMP, server_default=func.now())

    __table_args__ = (
        Index("ix_otp_tokens_email_purpose_code", "email", "purpose", "code"),
    )
