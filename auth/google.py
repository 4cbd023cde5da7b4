"""
Google Sign-In credential verification.

The browser obtains an ID token from Google Identity Services and posts it
as ``credential``; the signature is checked against Google's published keys
and the audience must equal our OAuth client id.
"""
import os
import logging
from dataclasses import dataclass
from typing import Optional

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import id_token
from google.auth.transport import requests as google_requests

GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")

logger = logging.getLogger(__name__)


@dataclass
class GoogleIdentity:
    subject: str
    email: str
    name: str
    picture: Optional[str] = None


def verify_google_credential(credential: str) -> GoogleIdentity:
    """
    Verify a Google ID token and extract the identity it carries.

    Raises:
        ValueError: the token is malformed, expired, signed by someone else,
            issued for another audience or issuer, or lacks an email.
    """
    if not GOOGLE_CLIENT_ID:
        raise ValueError("GOOGLE_CLIENT_ID is not configured")

    try:
        payload = id_token.verify_oauth2_token(
            credential, google_requests.Request(), GOOGLE_CLIENT_ID
        )
    except GoogleAuthError as e:
        # wrong issuer and key-fetch failures are not ValueErrors
        raise ValueError(str(e)) from e
    email = payload.get("email")
    if not email:
        raise ValueError("Google token has no email claim")

    return GoogleIdentity(
        subject=payload["sub"],
        email=email.strip().lower(),
        name=payload.get("name") or email.split("@")[0],
        picture=payload.get("picture"),
    )
