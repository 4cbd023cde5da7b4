import os
from typing import Optional, Union
import azure.functions as func

# cookies only flow cross-origin with an explicit origin and Allow-Credentials
CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:5173")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": CORS_ORIGIN,
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def cors_response(
    body: Union[str, bytes] = b"",
    status: int = 200,
    mime: str = "text/plain",
    headers: Optional[dict] = None,
) -> func.HttpResponse:
    return func.HttpResponse(
        body=body,
        status_code=status,
        mimetype=mime,
        headers={**CORS_HEADERS, **(headers or {})},
    )
