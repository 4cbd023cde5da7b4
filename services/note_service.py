# services/note_service.py
from __future__ import annotations
import uuid
from typing import List, Optional, Mapping

from db import SessionLocal
from models import Note
from services.ownership import owned

NOTE_FIELDS = {"title", "content", "completed"}


def _sanitize_patch(data: Mapping | None, allowed: set[str]) -> dict:
    """Return only keys present in `allowed` and non-None values."""
    if not data:
        return {}
    return {k: v for k, v in data.items() if k in allowed and v is not None}


def list_notes(user_id: uuid.UUID) -> List[Note]:
    with SessionLocal() as db:
        return (
            owned(db, Note, user_id)
            .order_by(Note.updated_at.desc(), Note.created_at.desc())
            .all()
        )


def create_note(
    user_id: uuid.UUID,
    title: str,
    content: Optional[str] = None,
    completed: bool = False,
) -> Note:
    with SessionLocal() as db:
        n = Note(user_id=user_id, title=title.strip(), content=content or "", completed=bool(completed))
        db.add(n)
        db.commit()
        db.refresh(n)
        return n


def get_note(user_id: uuid.UUID, note_id: uuid.UUID) -> Optional[Note]:
    with SessionLocal() as db:
        return owned(db, Note, user_id).filter(Note.id == note_id).first()


def update_note(user_id: uuid.UUID, note_id: uuid.UUID, patch: dict) -> Optional[Note]:
    """Apply title/content/completed from `patch`; unknown keys are dropped. None if not owned."""
    patch = _sanitize_patch(patch, NOTE_FIELDS)
    if "title" in patch:
        patch["title"] = patch["title"].strip()

    with SessionLocal() as db:
        n = owned(db, Note, user_id).filter(Note.id == note_id).first()
        if not n:
            return None
        for key, value in patch.items():
            setattr(n, key, value)
        db.commit()
        db.refresh(n)
        return n


def delete_note(user_id: uuid.UUID, note_id: uuid.UUID) -> bool:
    with SessionLocal() as db:
        rows = (
            owned(db, Note, user_id)
            .filter(Note.id == note_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        return rows > 0
