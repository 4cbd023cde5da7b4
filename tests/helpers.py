"""Request builders for invoking HTTP functions directly."""

import json
from typing import Optional

import azure.functions as func

from auth.token import create_access_token
from auth.utils import hash_password
from services import user_service


def make_request(
    method: str,
    route: str,
    body: Optional[dict] = None,
    token: Optional[str] = None,
    cookie: Optional[str] = None,
    headers: Optional[dict] = None,
    route_params: Optional[dict] = None,
) -> func.HttpRequest:
    all_headers = {"Content-Type": "application/json", "X-Forwarded-For": "203.0.113.7:51234"}
    if token:
        all_headers["Authorization"] = f"Bearer {token}"
    if cookie:
        all_headers["Cookie"] = cookie
    all_headers.update(headers or {})
    return func.HttpRequest(
        method=method,
        url=f"http://localhost:7071/api/{route}",
        headers=all_headers,
        params={},
        route_params=route_params or {},
        body=json.dumps(body).encode() if body is not None else b"",
    )


def invoke(function_builder, req: func.HttpRequest) -> func.HttpResponse:
    """Run the user function behind a blueprint registration."""
    return function_builder.build().get_user_function()(req)


def payload(resp: func.HttpResponse) -> dict:
    return json.loads(resp.get_body())


def cookie_token(resp: func.HttpResponse) -> str:
    """The token value from a Set-Cookie header (``token=<jwt>; ...``)."""
    first = resp.headers.get("Set-Cookie").split(";")[0]
    return first.split("=", 1)[1]


def verified_user(email="alice@example.com", name="Alice", password="correct-horse"):
    """Create a verified password account and return (user, token)."""
    user = user_service.create_user(email, name, password_hash=hash_password(password))
    user_service.mark_verified(email)
    return user, create_access_token(user.id)
