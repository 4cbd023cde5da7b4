import azure.functions as func
import logging
from auth.deps import authenticate, AuthenticationError
from routes.serializers import serialize_user
from services import user_service
from utils.cookies import clear_cookie
from utils.cors import cors_response
from utils.rate_limiter import rate_limited
from utils.responses import ok, fail, validation_failed, server_error, parse_json
from utils import validation as v

logger = logging.getLogger(__name__)
bp = func.Blueprint()


@bp.function_name(name="Profile")
@bp.route(route="users/profile", methods=["GET", "PUT", "OPTIONS"],
          auth_level=func.AuthLevel.ANONYMOUS)
@rate_limited
def profile(req: func.HttpRequest) -> func.HttpResponse:
    """
    Read or edit the signed-in user's profile.

    PUT accepts name, dateOfBirth and avatar; empty values leave the stored
    field as it is. Email and verification state are not editable here.
    """
    if req.method == "OPTIONS":
        return cors_response("", 204)

    try:
        user = authenticate(req)
    except AuthenticationError as e:
        return fail(str(e), 401)

    try:
        if req.method == "GET":
            return ok("Profile retrieved successfully", serialize_user(user))

        data = parse_json(req)
        if data is None:
            return fail("Invalid JSON body", 400)
        errors = v.validate_profile_update(data)
        if errors:
            return validation_failed(errors)

        dob = data.get("dateOfBirth")
        updated = user_service.update_profile(user.id, {
            "name": (data.get("name") or "").strip(),
            "date_of_birth": v.parse_date(dob) if dob else None,
            "avatar": data.get("avatar"),
        })
        if not updated:
            return fail("User not found", 404)
        return ok("Profile updated successfully", serialize_user(updated))

    except Exception:
        return server_error(req, "Failed to process profile request")


@bp.function_name(name="DeleteAccount")
@bp.route(route="users/account", methods=["DELETE", "OPTIONS"],
          auth_level=func.AuthLevel.ANONYMOUS)
@rate_limited
def delete_account(req: func.HttpRequest) -> func.HttpResponse:
    """
    Delete the authenticated user's account and all of its notes.

    This is permanent. The session cookie is cleared in the same response.

    Raises:
        401: Unauthorized (missing or invalid token)
        404: User not found
        500: Server error
    """
    if req.method == "OPTIONS":
        return cors_response("", 204)

    try:
        user = authenticate(req)
    except AuthenticationError as e:
        return fail(str(e), 401)

    try:
        if not user_service.delete_account(user.id):
            return fail("User not found", 404)
        return ok("Account deleted successfully", headers={"Set-Cookie": clear_cookie()})

    except Exception:
        return server_error(req, "Failed to delete account")
