# services/user_service.py
from __future__ import annotations
import logging
import uuid
from datetime import date
from typing import Optional, Mapping

from sqlalchemy.exc import IntegrityError

from db import SessionLocal
from models import User
from auth.google import GoogleIdentity
from services.ownership import owned

logger = logging.getLogger(__name__)

PROFILE_FIELDS = {"name", "date_of_birth", "avatar"}


class DuplicateEmailError(Exception):
    """Raised when attempting to register an email that already has an account."""
    def __init__(self, email: str):
        self.email = email
        super().__init__(f"User with email '{email}' already exists")


class AccountNotFoundError(Exception):
    """Raised when a Google login targets an email with no account."""


def find_by_email(email: str) -> Optional[User]:
    with SessionLocal() as db:
        return db.query(User).filter(User.email == (email or "").strip().lower()).first()


def get_user(user_id: uuid.UUID) -> Optional[User]:
    with SessionLocal() as db:
        return owned(db, User, user_id).first()


def create_user(
    email: str,
    name: str,
    password_hash: Optional[str] = None,
    date_of_birth: Optional[date] = None,
) -> User:
    """Create an unverified account. Raises DuplicateEmailError if the email is taken."""
    email_lc = email.strip().lower()
    with SessionLocal() as db:
        if db.query(User).filter(User.email == email_lc).first():
            raise DuplicateEmailError(email_lc)

        user = User(
            email=email_lc,
            name=name.strip(),
            date_of_birth=date_of_birth,
            password_hash=password_hash,
            is_verified=False,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # lost a race with a concurrent signup for the same email
            db.rollback()
            raise DuplicateEmailError(email_lc)
        db.refresh(user)
        logger.info(f"Created account {user.id}")
        return user


def mark_verified(email: str) -> bool:
    with SessionLocal() as db:
        rows = (
            db.query(User)
            .filter(User.email == email.strip().lower())
            .update({User.is_verified: True}, synchronize_session=False)
        )
        db.commit()
        return rows > 0


def set_password(email: str, password_hash: str) -> Optional[User]:
    with SessionLocal() as db:
        user = db.query(User).filter(User.email == email.strip().lower()).first()
        if not user:
            return None
        user.password_hash = password_hash
        db.commit()
        db.refresh(user)
        return user


def update_profile(user_id: uuid.UUID, patch: Mapping) -> Optional[User]:
    """Apply name/date_of_birth/avatar; falsy values leave the field untouched."""
    patch = {k: v for k, v in patch.items() if k in PROFILE_FIELDS and v}
    with SessionLocal() as db:
        user = owned(db, User, user_id).first()
        if not user:
            return None
        for key, value in patch.items():
            setattr(user, key, value)
        db.commit()
        db.refresh(user)
        return user


def delete_account(user_id: uuid.UUID) -> bool:
    """Delete the account; its notes go with it."""
    with SessionLocal() as db:
        user = owned(db, User, user_id).first()
        if not user:
            return False
        db.delete(user)
        db.commit()
        logger.info(f"Deleted account {user_id}")
        return True


def google_sign_in(identity: GoogleIdentity, allow_create: bool) -> User:
    """
    Resolve a verified Google identity to an account.

    - no account + ``allow_create`` False -> AccountNotFoundError
    - no account + ``allow_create`` True  -> new verified account
    - account without a Google link       -> linked and marked verified
    - account already linked              -> returned unchanged
    """
    with SessionLocal() as db:
        user = db.query(User).filter(User.email == identity.email).first()

        if not user:
            if not allow_create:
                raise AccountNotFoundError(identity.email)
            user = User(
                email=identity.email,
                name=identity.name,
                google_id=identity.subject,
                avatar=identity.picture,
                is_verified=True,
            )
            db.add(user)
            try:
                db.commit()
            except IntegrityError:
                # concurrent signup created it first; fall back to that row
                db.rollback()
                user = db.query(User).filter(User.email == identity.email).one()
            else:
                logger.info(f"Created Google account {user.id}")
        elif not user.google_id:
            user.google_id = identity.subject
            user.avatar = identity.picture or user.avatar
            user.is_verified = True
            db.commit()
            logger.info(f"Linked Google identity to account {user.id}")

        db.refresh(user)
        return user
