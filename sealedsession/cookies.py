"""Reading and writing sealed sessions on FastAPI requests and responses."""
import binascii
import http.cookies
import logging
from base64 import b64decode
from typing import Any

from fastapi import Request, Response
from fastapi.security.utils import get_authorization_scheme_param

from .codec import decode, encode
from .config import MAX_COOKIE_SIZE, CookieConfig, SessionConfig
from .errors import InvalidTokenError, NotFoundError, TooLongError

logger = logging.getLogger(__name__)

_EPOCH = "Thu, 01 Jan 1970 00:00:00 GMT"


def render_cookie(
    cookie: CookieConfig,
    value: str,
    *,
    max_age: int | None = None,
    expires: str | None = None,
) -> str:
    """Serialize a Set-Cookie header value for cookie carrying value.

    max_age defaults to cookie.max_age.
    """
    jar = http.cookies.SimpleCookie()
    jar[cookie.name] = value
    morsel = jar[cookie.name]
    morsel["max-age"] = cookie.max_age if max_age is None else max_age
    if expires is not None:
        morsel["expires"] = expires
    morsel["path"] = cookie.path
    if cookie.domain is not None:
        morsel["domain"] = cookie.domain
    if cookie.secure:
        morsel["secure"] = True
    if cookie.http_only:
        morsel["httponly"] = True
    morsel["samesite"] = cookie.same_site
    return jar.output(header="").strip()


def _cookie_name(header: str) -> str:
    return header.split(";", 1)[0].split("=", 1)[0].strip()


def replace_cookie(response: Response, name: str, header: str) -> None:
    """Replace every Set-Cookie for name on response with header.

    Appends a new Set-Cookie when none exists for that name.
    """
    encoded = header.encode("latin-1")
    kept = []
    replaced = False
    for key, value in response.raw_headers:
        if key == b"set-cookie" and _cookie_name(value.decode("latin-1")) == name:
            if not replaced:
                kept.append((key, encoded))
                replaced = True
            continue
        kept.append((key, value))
    if not replaced:
        kept.append((b"set-cookie", encoded))
    # raw_headers is shared with response.headers, so mutate it in place
    response.raw_headers[:] = kept


def set_session(
    response: Response,
    value: Any,
    config: SessionConfig,
    *,
    now: int | None = None,
) -> None:
    """Encode value into the session cookie on response.

    Raises:
        EncodingError: if value cannot be serialized
        EncryptionError: if sealing fails
        TooLongError: if the cookie exceeds MAX_COOKIE_SIZE; response is
            left unchanged
    """
    cookie = config.resolved_cookie
    token = encode(value, config, now=now)
    header = render_cookie(cookie, token)
    size = len(header.encode("latin-1"))
    if size > MAX_COOKIE_SIZE:
        logger.warning(
            "Session cookie %r is %d bytes, limit is %d", cookie.name, size, MAX_COOKIE_SIZE
        )
        raise TooLongError(f"session cookie is {size} bytes, limit is {MAX_COOKIE_SIZE}")
    replace_cookie(response, cookie.name, header)


def clear_session(response: Response, config: SessionConfig) -> None:
    """Tell the browser to drop the session cookie."""
    cookie = config.resolved_cookie
    header = render_cookie(cookie, "", max_age=0, expires=_EPOCH)
    replace_cookie(response, cookie.name, header)


def get_session(
    request: Request,
    config: SessionConfig,
    model: Any = None,
    *,
    now: int | None = None,
) -> Any:
    """Decode the session cookie on request.

    Raises:
        NotFoundError: if the request carries no session cookie
        InvalidTokenError, ExpiredError, DeserializationError: from decode
    """
    name = config.resolved_cookie.name
    token = request.cookies.get(name)
    if not token:
        logger.debug("No %r cookie on request", name)
        raise NotFoundError(f"no {name!r} cookie")
    return decode(token, config, model, now=now)


def bearer_token(request: Request) -> str:
    """Extract a session token from the Authorization header.

    Accepts the username of a Basic credential (so clients configured with
    only a user name field can send it) or a Bearer credential.
    """
    authorization = request.headers.get("Authorization")
    scheme, param = get_authorization_scheme_param(authorization)
    scheme = scheme.lower()
    if scheme == "bearer" and param:
        return param
    if scheme != "basic" or not param:
        raise NotFoundError("no session credential in Authorization header")
    try:
        decoded = b64decode(param, validate=True).decode("ascii")
    except (binascii.Error, UnicodeDecodeError):
        raise InvalidTokenError("malformed basic credential") from None
    username, _, _ = decoded.partition(":")
    if not username:
        raise NotFoundError("empty basic username")
    return username


def get_bearer_session(
    request: Request,
    config: SessionConfig,
    model: Any = None,
    *,
    now: int | None = None,
) -> Any:
    """Like get_session, but reads the token from the Authorization header."""
    return decode(bearer_token(request), config, model, now=now)
