# services/ownership.py
"""
Single authorization predicate for owned entities.

Every model that belongs to a user exposes ``owned_by(user_id)`` returning a
SQL filter expression. Reads and writes on such models start from
``owned(db, Model, user_id)`` so a row outside the caller's ownership is
indistinguishable from a missing one.
"""
import uuid
from sqlalchemy.orm import Query, Session


def owned(db: Session, model, user_id: uuid.UUID) -> Query:
    return db.query(model).filter(model.owned_by(user_id))
