"""
Request body checks.

Each ``validate_*`` function returns a list of ``{"field", "message"}``
dicts; an empty list means the body is acceptable.
"""
import re
from datetime import date
from typing import Any

EMAIL_REGEX = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

NAME_MIN, NAME_MAX = 2, 50
PASSWORD_MIN = 8
TITLE_MAX = 200
OTP_PURPOSES = {"SIGNUP", "LOGIN", "PASSWORD_RESET"}
GOOGLE_MODES = {"login", "signup"}


def normalize_email(email: Any) -> str:
    return email.strip().lower() if isinstance(email, str) else ""


def parse_date(value: Any) -> date:
    """Parse YYYY-MM-DD (a trailing time part is ignored)."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid date (expected YYYY-MM-DD): {value!r}")
    return date.fromisoformat(value.strip()[:10])


def _err(field: str, message: str) -> dict:
    return {"field": field, "message": message}


def _check_email(body: dict, errors: list) -> None:
    email = body.get("email")
    if not email:
        errors.append(_err("email", "Email is required"))
    elif not isinstance(email, str) or not EMAIL_REGEX.match(email.strip()):
        errors.append(_err("email", "Please provide a valid email address"))


def validate_signup(body: dict) -> list[dict]:
    errors: list[dict] = []
    _check_email(body, errors)

    name = body.get("name")
    if not name:
        errors.append(_err("name", "Name is required"))
    elif not isinstance(name, str) or len(name.strip()) < NAME_MIN:
        errors.append(_err("name", f"Name must be at least {NAME_MIN} characters long"))
    elif len(name.strip()) > NAME_MAX:
        errors.append(_err("name", f"Name cannot exceed {NAME_MAX} characters"))

    dob = body.get("dateOfBirth")
    if dob:
        try:
            parse_date(dob)
        except ValueError:
            errors.append(_err("dateOfBirth", "Please provide a valid date"))

    password = body.get("password")
    if password is not None:
        if not isinstance(password, str) or len(password) < PASSWORD_MIN:
            errors.append(_err("password", f"Password must be at least {PASSWORD_MIN} characters long"))
    return errors


def validate_login(body: dict) -> list[dict]:
    errors: list[dict] = []
    _check_email(body, errors)
    password, otp = body.get("password"), body.get("otp")
    if not password and not otp:
        errors.append(_err("password", "Password or OTP is required"))
    if password is not None and not isinstance(password, str):
        errors.append(_err("password", "Password must be a string"))
    if otp is not None and not isinstance(otp, str):
        errors.append(_err("otp", "OTP must be a string"))
    return errors


def validate_email_only(body: dict) -> list[dict]:
    errors: list[dict] = []
    _check_email(body, errors)
    return errors


def validate_verify_otp(body: dict) -> list[dict]:
    errors: list[dict] = []
    _check_email(body, errors)
    if not body.get("otp") or not isinstance(body.get("otp"), str):
        errors.append(_err("otp", "OTP is required"))
    otp_type = body.get("type", "SIGNUP")
    if not isinstance(otp_type, str) or otp_type not in OTP_PURPOSES:
        errors.append(_err("type", f"Type must be one of {', '.join(sorted(OTP_PURPOSES))}"))
    return errors


def validate_reset_password(body: dict) -> list[dict]:
    errors = validate_verify_otp({**body, "type": "PASSWORD_RESET"})
    password = body.get("newPassword")
    if not isinstance(password, str) or len(password) < PASSWORD_MIN:
        errors.append(_err("newPassword", f"Password must be at least {PASSWORD_MIN} characters long"))
    return errors


def validate_google(body: dict) -> list[dict]:
    errors: list[dict] = []
    if not body.get("credential") or not isinstance(body.get("credential"), str):
        errors.append(_err("credential", "Google credential is required"))
    mode = body.get("mode", "login")
    if not isinstance(mode, str) or mode not in GOOGLE_MODES:
        errors.append(_err("mode", "Mode must be 'login' or 'signup'"))
    return errors


def _check_title(body: dict, errors: list, required: bool) -> None:
    if "title" not in body:
        if required:
            errors.append(_err("title", "Title is required"))
        return
    title = body["title"]
    if not isinstance(title, str) or not title.strip():
        errors.append(_err("title", "Title cannot be empty"))
    elif len(title) > TITLE_MAX:
        errors.append(_err("title", f"Title cannot exceed {TITLE_MAX} characters"))


def _check_content_completed(body: dict, errors: list) -> None:
    if "content" in body and body["content"] is not None and not isinstance(body["content"], str):
        errors.append(_err("content", "Content must be a string"))
    if "completed" in body and not isinstance(body["completed"], bool):
        errors.append(_err("completed", "Completed must be a boolean"))


def validate_note(body: dict) -> list[dict]:
    errors: list[dict] = []
    _check_title(body, errors, required=True)
    _check_content_completed(body, errors)
    return errors


def validate_note_update(body: dict) -> list[dict]:
    errors: list[dict] = []
    if not any(k in body for k in ("title", "content", "completed")):
        errors.append(_err("body", "At least one of title, content or completed is required"))
        return errors
    _check_title(body, errors, required=False)
    _check_content_completed(body, errors)
    return errors


def validate_profile_update(body: dict) -> list[dict]:
    errors: list[dict] = []
    name = body.get("name")
    if name and (not isinstance(name, str) or not NAME_MIN <= len(name.strip()) <= NAME_MAX):
        errors.append(_err("name", f"Name must be {NAME_MIN}-{NAME_MAX} characters long"))
    dob = body.get("dateOfBirth")
    if dob:
        try:
            parse_date(dob)
        except ValueError:
            errors.append(_err("dateOfBirth", "Please provide a valid date"))
    avatar = body.get("avatar")
    if avatar and not isinstance(avatar, str):
        errors.append(_err("avatar", "Avatar must be a URL string"))
    return errors
