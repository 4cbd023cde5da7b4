import azure.functions as func
import logging
import uuid as _uuid
from auth.deps import authenticate, AuthenticationError
from routes.serializers import serialize_note
from services.note_service import (
    list_notes,
    create_note,
    get_note,
    update_note,
    delete_note,
)
from utils.cors import cors_response
from utils.rate_limiter import rate_limited
from utils.responses import ok, fail, validation_failed, server_error, parse_json
from utils import validation as v

logger = logging.getLogger(__name__)
bp = func.Blueprint()


@bp.function_name(name="Notes")
@bp.route(route="notes", methods=["GET", "POST", "OPTIONS"], auth_level=func.AuthLevel.ANONYMOUS)
@rate_limited
def notes(req: func.HttpRequest) -> func.HttpResponse:
    if req.method == "OPTIONS":
        return cors_response("", 204)

    try:
        user = authenticate(req)
    except AuthenticationError as e:
        return fail(str(e), 401)

    try:
        if req.method == "GET":
            items = list_notes(user.id)
            return ok("Notes retrieved successfully", [serialize_note(n) for n in items])

        # POST
        body = parse_json(req)
        if body is None:
            return fail("Invalid JSON body", 400)
        errors = v.validate_note(body)
        if errors:
            return validation_failed(errors)

        n = create_note(
            user.id,
            body["title"],
            content=body.get("content"),
            completed=body.get("completed", False),
        )
        return ok("Note created successfully", serialize_note(n), status=201)

    except Exception:
        return server_error(req, "Failed to process notes request")


@bp.function_name(name="NoteItem")
@bp.route(route="notes/{note_id}", methods=["GET", "PUT", "DELETE", "OPTIONS"], auth_level=func.AuthLevel.ANONYMOUS)
@rate_limited
def note_item(req: func.HttpRequest) -> func.HttpResponse:
    if req.method == "OPTIONS":
        return cors_response("", 204)

    try:
        user = authenticate(req)
    except AuthenticationError as e:
        return fail(str(e), 401)

    try:
        nid = _uuid.UUID(req.route_params["note_id"])
    except (KeyError, ValueError):
        return fail("Invalid note ID", 400)

    try:
        if req.method == "GET":
            n = get_note(user.id, nid)
            if not n:
                return fail("Note not found", 404)
            return ok("Note retrieved successfully", serialize_note(n))

        if req.method == "PUT":
            patch = parse_json(req)
            if patch is None:
                return fail("Invalid JSON body", 400)
            errors = v.validate_note_update(patch)
            if errors:
                return validation_failed(errors)
            n = update_note(user.id, nid, patch)
            if not n:
                return fail("Note not found", 404)
            return ok("Note updated successfully", serialize_note(n))

        # DELETE
        if not delete_note(user.id, nid):
            return fail("Note not found", 404)
        return ok("Note deleted successfully")

    except Exception:
        return server_error(req, "Failed to process note request")
