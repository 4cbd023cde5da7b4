"""Pytest configuration and shared fixtures."""

import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Settings are read at import time, so they must be in place first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["GOOGLE_CLIENT_ID"] = "test-client.apps.googleusercontent.com"
os.environ.pop("APP_ENV", None)

from db import engine  # noqa: E402
from models import Base  # noqa: E402
from utils.rate_limiter import rate_limiter  # noqa: E402


@pytest.fixture(autouse=True)
def database():
    """Fresh schema for every test."""
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture(autouse=True)
def outbox():
    """Capture OTP emails instead of talking to SMTP."""
    with patch("services.otp_service.send_otp_email") as send:
        yield send
