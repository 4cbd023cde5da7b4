from http.cookies import SimpleCookie, CookieError
from typing import Optional

import azure.functions as func

from auth.token import ACCESS_TOKEN_MAX_AGE
from utils.env import is_production

COOKIE_NAME = "token"


def _morsel(value: str) -> SimpleCookie:
    cookie = SimpleCookie()
    cookie[COOKIE_NAME] = value
    cookie[COOKIE_NAME]["httponly"] = True
    cookie[COOKIE_NAME]["samesite"] = "Lax"
    cookie[COOKIE_NAME]["path"] = "/"
    if is_production():
        cookie[COOKIE_NAME]["secure"] = True
    return cookie


def session_cookie(token: str, remember: bool = False) -> str:
    """
    Build the Set-Cookie value for a freshly minted token.

    Without ``remember`` no Max-Age is sent, so the browser drops the cookie
    when the session ends.
    """
    cookie = _morsel(token)
    if remember:
        cookie[COOKIE_NAME]["max-age"] = ACCESS_TOKEN_MAX_AGE
    return cookie[COOKIE_NAME].OutputString()


def clear_cookie() -> str:
    cookie = _morsel("")
    cookie[COOKIE_NAME]["max-age"] = 0
    cookie[COOKIE_NAME]["expires"] = "Thu, 01 Jan 1970 00:00:00 GMT"
    return cookie[COOKIE_NAME].OutputString()


def token_from_cookie(req: func.HttpRequest) -> Optional[str]:
    raw = req.headers.get("Cookie")
    if not raw:
        return None
    try:
        jar = SimpleCookie(raw)
    except CookieError:
        return None
    morsel = jar.get(COOKIE_NAME)
    return morsel.value if morsel and morsel.value else None
