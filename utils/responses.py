"""
JSON envelope helpers.

Every API answer is ``{"success", "message", "data"?, "error"?}`` so the
client can branch on ``success`` without looking at the status code.
"""
import json
import logging
import traceback
from typing import Any, Optional

import azure.functions as func

from utils.cors import cors_response
from utils.env import is_production

logger = logging.getLogger(__name__)


def api_response(
    success: bool,
    message: str,
    status: int = 200,
    data: Any = None,
    error: Optional[str] = None,
    headers: Optional[dict] = None,
    **extra,
) -> func.HttpResponse:
    payload = {"success": success, "message": message}
    if data is not None:
        payload["data"] = data
    if error is not None:
        payload["error"] = error
    payload.update(extra)
    return cors_response(json.dumps(payload), status, "application/json", headers=headers)


def ok(message: str, data: Any = None, status: int = 200, headers: Optional[dict] = None) -> func.HttpResponse:
    return api_response(True, message, status=status, data=data, headers=headers)


def fail(message: str, status: int, headers: Optional[dict] = None, **extra) -> func.HttpResponse:
    return api_response(False, message, status=status, headers=headers, **extra)


def validation_failed(errors: list[dict]) -> func.HttpResponse:
    return api_response(
        False,
        "Validation failed",
        status=400,
        error="Validation error",
        errors=errors,
    )


def server_error(req: func.HttpRequest, message: str) -> func.HttpResponse:
    """Log an unexpected failure with request context and answer 500.

    Must be called from inside an ``except`` block.
    """
    logger.exception(f"{message}: {req.method} {req.url}")
    error = None if is_production() else traceback.format_exc()
    return api_response(False, message, status=500, error=error)


def parse_json(req: func.HttpRequest) -> Optional[dict]:
    """Return the JSON object body, or None when it is missing or malformed."""
    try:
        body = req.get_json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None
