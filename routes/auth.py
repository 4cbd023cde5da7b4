import azure.functions as func
import logging
from auth.google import verify_google_credential
from auth.token import create_access_token
from auth.utils import hash_password, verify_password
from models import OtpPurpose, User
from routes.serializers import serialize_user
from services import user_service
from services.otp_service import issue_otp, verify_otp
from services.user_service import DuplicateEmailError, AccountNotFoundError
from utils.cookies import session_cookie, clear_cookie
from utils.cors import cors_response
from utils.rate_limiter import rate_limited
from utils.responses import ok, fail, validation_failed, server_error, parse_json
from utils import validation as v

logger = logging.getLogger(__name__)
bp = func.Blueprint()


def _session_response(user: User, remember: bool, message: str) -> func.HttpResponse:
    """Mint a token for `user`, set it as the cookie and return it in the body."""
    token = create_access_token(user.id)
    return ok(
        message,
        {"user": serialize_user(user), "token": token},
        headers={"Set-Cookie": session_cookie(token, remember)},
    )


@bp.function_name(name="Signup")
@bp.route(route="auth/signup", methods=["POST", "OPTIONS"],
          auth_level=func.AuthLevel.ANONYMOUS)
@rate_limited
def signup(req: func.HttpRequest) -> func.HttpResponse:
    """
    Register a new account and email a SIGNUP code.

    The account stays unverified (and cannot sign in) until the code is
    confirmed through verify-otp. Password is optional: accounts without one
    sign in by OTP.

    Raises:
        400: Validation failed
        409: Email already exists
        500: Server error
    """
    if req.method == "OPTIONS":
        return cors_response("", 204)

    try:
        data = parse_json(req)
        if data is None:
            return fail("Invalid JSON body", 400)
        errors = v.validate_signup(data)
        if errors:
            return validation_failed(errors)

        email = v.normalize_email(data["email"])
        password = data.get("password")
        dob = data.get("dateOfBirth")

        try:
            user = user_service.create_user(
                email=email,
                name=data["name"],
                password_hash=hash_password(password) if password else None,
                date_of_birth=v.parse_date(dob) if dob else None,
            )
        except DuplicateEmailError:
            return fail("User with this email already exists", 409)

        issue_otp(email, OtpPurpose.SIGNUP, user.id)

        return ok(
            "User created successfully",
            {"message": "Please check your email for verification code", "email": email},
            status=201,
        )

    except Exception:
        return server_error(req, "Failed to create user")


@bp.function_name(name="Login")
@bp.route(route="auth/login", methods=["POST", "OPTIONS"],
          auth_level=func.AuthLevel.ANONYMOUS)
@rate_limited
def login(req: func.HttpRequest) -> func.HttpResponse:
    """
    Sign in with a password or a LOGIN code from send-otp.

    Raises:
        400: Validation failed, or password sent for a Google-only account
        401: Invalid credentials / code, or account not verified
        500: Server error
    """
    if req.method == "OPTIONS":
        return cors_response("", 204)

    try:
        data = parse_json(req)
        if data is None:
            return fail("Invalid JSON body", 400)
        errors = v.validate_login(data)
        if errors:
            return validation_failed(errors)

        email = v.normalize_email(data["email"])
        password = data.get("password")
        otp = data.get("otp")

        user = user_service.find_by_email(email)
        if not user:
            return fail("Invalid credentials", 401)

        if password:
            if user.is_google_only:
                return fail("Please use Google sign-in for this account", 400)
            if not verify_password(password, user.password_hash):
                return fail("Invalid credentials", 401)

        if otp and not verify_otp(email, otp, OtpPurpose.LOGIN):
            return fail("Invalid or expired OTP", 401)

        if not user.is_verified:
            return fail("Please verify your email address", 401)

        return _session_response(user, bool(data.get("remember")), "Login successful")

    except Exception:
        return server_error(req, "Login failed")


@bp.function_name(name="SendOtp")
@bp.route(route="auth/send-otp", methods=["POST", "OPTIONS"],
          auth_level=func.AuthLevel.ANONYMOUS)
@rate_limited
def send_otp(req: func.HttpRequest) -> func.HttpResponse:
    """
    Email a LOGIN code to an existing account.

    Raises:
        400: Validation failed
        404: No account for that email
        500: Server error
    """
    if req.method == "OPTIONS":
        return cors_response("", 204)

    try:
        data = parse_json(req)
        if data is None:
            return fail("Invalid JSON body", 400)
        errors = v.validate_email_only(data)
        if errors:
            return validation_failed(errors)

        email = v.normalize_email(data["email"])
        user = user_service.find_by_email(email)
        if not user:
            return fail("User not found", 404)

        issue_otp(email, OtpPurpose.LOGIN, user.id)
        return ok("OTP sent successfully", {"message": "OTP sent to your email", "email": email})

    except Exception:
        return server_error(req, "Failed to send OTP")


@bp.function_name(name="VerifyOtp")
@bp.route(route="auth/verify-otp", methods=["POST", "OPTIONS"],
          auth_level=func.AuthLevel.ANONYMOUS)
@rate_limited
def verify_otp_endpoint(req: func.HttpRequest) -> func.HttpResponse:
    """
    Consume a code and open a session.

    A SIGNUP code also marks the account verified. Other purposes only sign
    in accounts that are already verified.

    Raises:
        400: Validation failed, or invalid/expired code
        401: Account not verified
        404: User not found
        500: Server error
    """
    if req.method == "OPTIONS":
        return cors_response("", 204)

    try:
        data = parse_json(req)
        if data is None:
            return fail("Invalid JSON body", 400)
        errors = v.validate_verify_otp(data)
        if errors:
            return validation_failed(errors)

        email = v.normalize_email(data["email"])
        purpose = OtpPurpose(data.get("type", "SIGNUP"))

        if not verify_otp(email, data["otp"], purpose):
            return fail("Invalid or expired OTP", 400)

        if purpose == OtpPurpose.SIGNUP:
            user_service.mark_verified(email)

        user = user_service.find_by_email(email)
        if not user:
            return fail("User not found", 404)
        if not user.is_verified:
            return fail("Please verify your email address", 401)

        return _session_response(user, bool(data.get("remember")), "OTP verified successfully")

    except Exception:
        return server_error(req, "OTP verification failed")


@bp.function_name(name="GoogleAuth")
@bp.route(route="auth/google", methods=["POST", "OPTIONS"],
          auth_level=func.AuthLevel.ANONYMOUS)
@rate_limited
def google_auth(req: func.HttpRequest) -> func.HttpResponse:
    """
    Sign in (mode=login) or sign up (mode=signup) with a Google ID token.

    Login never creates an account. An existing password account with the
    same email is linked to the Google identity instead of duplicated.

    Raises:
        400: Validation failed or invalid Google token
        404: mode=login and no account for that email
        500: Server error
    """
    if req.method == "OPTIONS":
        return cors_response("", 204)

    try:
        data = parse_json(req)
        if data is None:
            return fail("Invalid JSON body", 400)
        errors = v.validate_google(data)
        if errors:
            return validation_failed(errors)

        try:
            identity = verify_google_credential(data["credential"])
        except ValueError as e:
            logger.warning(f"Rejected Google credential: {e}")
            return fail("Invalid Google token", 400)

        mode = data.get("mode", "login")
        try:
            user = user_service.google_sign_in(identity, allow_create=(mode == "signup"))
        except AccountNotFoundError:
            return fail("No account found with this email address. Please sign up first.", 404)

        return _session_response(user, bool(data.get("remember")), "Google authentication successful")

    except Exception:
        return server_error(req, "Google authentication failed")


@bp.function_name(name="Logout")
@bp.route(route="auth/logout", methods=["POST", "OPTIONS"],
          auth_level=func.AuthLevel.ANONYMOUS)
@rate_limited
def logout(req: func.HttpRequest) -> func.HttpResponse:
    """
    Clear the session cookie.

    The JWT itself is not revoked and stays valid until it expires; a
    blacklist would need shared storage.
    """
    if req.method == "OPTIONS":
        return cors_response("", 204)
    try:
        return ok("Logout successful", headers={"Set-Cookie": clear_cookie()})
    except Exception:
        return server_error(req, "Logout failed")


@bp.function_name(name="ForgotPassword")
@bp.route(route="auth/forgot-password", methods=["POST", "OPTIONS"],
          auth_level=func.AuthLevel.ANONYMOUS)
@rate_limited
def forgot_password(req: func.HttpRequest) -> func.HttpResponse:
    """
    Request a PASSWORD_RESET code.

    Always answers 200 with the same message so the endpoint cannot be used
    to discover which emails have accounts.
    """
    if req.method == "OPTIONS":
        return cors_response("", 204)

    try:
        data = parse_json(req)
        if data is None:
            return fail("Invalid JSON body", 400)
        errors = v.validate_email_only(data)
        if errors:
            return validation_failed(errors)

        email = v.normalize_email(data["email"])
        user = user_service.find_by_email(email)
        if user:
            issue_otp(email, OtpPurpose.PASSWORD_RESET, user.id)
        return ok("If an account exists for that email, a reset code has been sent.")

    except Exception:
        return server_error(req, "Failed to request password reset")


@bp.function_name(name="ResetPassword")
@bp.route(route="auth/reset-password", methods=["POST", "OPTIONS"],
          auth_level=func.AuthLevel.ANONYMOUS)
@rate_limited
def reset_password(req: func.HttpRequest) -> func.HttpResponse:
    """
    Set a new password with a PASSWORD_RESET code. No session is opened;
    the client signs in afterwards.

    Raises:
        400: Validation failed or invalid/expired code
        404: User not found
        500: Server error
    """
    if req.method == "OPTIONS":
        return cors_response("", 204)

    try:
        data = parse_json(req)
        if data is None:
            return fail("Invalid JSON body", 400)
        errors = v.validate_reset_password(data)
        if errors:
            return validation_failed(errors)

        email = v.normalize_email(data["email"])
        if not verify_otp(email, data["otp"], OtpPurpose.PASSWORD_RESET):
            return fail("Invalid or expired OTP", 400)

        user = user_service.set_password(email, hash_password(data["newPassword"]))
        if not user:
            return fail("User not found", 404)

        return ok("Password updated")

    except Exception:
        return server_error(req, "Failed to reset password")
