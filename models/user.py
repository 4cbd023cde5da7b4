import uuid
from sqlalchemy import Column, Text, TIMESTAMP, Boolean, Date, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(Text, unique=True, nullable=False)
    name = Column(Text, nullable=False)
    date_of_birth = Column(Date, nullable=True)
    password_hash = Column(Text, nullable=True)  # null for Google-only accounts
    google_id = Column(Text, unique=True, nullable=True)
    avatar = Column(Text, nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    notes = relationship("Note", back_populates="user", cascade="all, delete-orphan")

    @classmethod
    def owned_by(cls, user_id):
        """A user record is owned only by itself."""
        return cls.id == user_id

    @property
    def is_google_only(self) -> bool:
        """Check if this account can only sign in through Google (no password)"""
        return not self.password_hash
