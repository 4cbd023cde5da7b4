import uuid
from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, String, Boolean, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from .base import Base


class Note(Base):
    __tablename__ = "notes"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False, default="")
    completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="notes")

    @classmethod
    def owned_by(cls, user_id):
        return cls.user_id == user_id
