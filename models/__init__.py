### models/__init__.py
from .base import Base
from .user import User
from .note import Note
from .otp_token import OtpToken, OtpPurpose
