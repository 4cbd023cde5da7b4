import uuid
from typing import Optional

import azure.functions as func

from db import SessionLocal
from models import User
from auth.token import decode_token
from utils.cookies import token_from_cookie


class AuthenticationError(Exception):
    """Request carries no usable session; the message is client-safe."""


def token_from_request(req: func.HttpRequest) -> Optional[str]:
    # the httpOnly cookie is canonical; the header serves non-browser clients
    token = token_from_cookie(req)
    if token:
        return token
    auth = req.headers.get("Authorization", "")
    if auth.startswith("Bearer ") and auth[7:].strip():
        return auth[7:].strip()
    return None


def authenticate(req: func.HttpRequest) -> User:
    token = token_from_request(req)
    if not token:
        raise AuthenticationError("Access token is required")

    payload = decode_token(token)
    try:
        user_id = uuid.UUID(str(payload["sub"]))
    except (TypeError, KeyError, ValueError):
        raise AuthenticationError("Invalid or expired token")

    with SessionLocal() as db:
        user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise AuthenticationError("User not found")
    if not user.is_verified:
        raise AuthenticationError("Please verify your email address")
    return user
