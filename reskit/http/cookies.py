"""Set-Cookie serialization, signing and clearing."""

import base64
import hashlib
import hmac
import json
import math
import re
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from email.utils import format_datetime
from typing import Any
from urllib.parse import quote

from fastapi import Request, Response
from pydantic import BaseModel, ConfigDict, Field

from reskit.config.settings import get_settings
from reskit.core.errors import CookieError, CookieSecretError
from reskit.core.logging import get_logger
from reskit.http.headers import append_header


logger = get_logger(__name__)

# RFC 7230 field-content, as accepted in cookie names and attribute values
_FIELD_CONTENT_RE = re.compile(r"[\u0009\u0020-\u007e\u0080-\u00ff]+")

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_SAME_SITE = {
    True: "Strict",
    "strict": "Strict",
    "lax": "Lax",
    "none": "None",
}


class CookieOptions(BaseModel):
    """Attributes of a Set-Cookie entry.

    ``max_age`` is in milliseconds; it is written as ``Max-Age`` in seconds.
    """

    model_config = ConfigDict(extra="forbid")

    path: str | None = Field(default="/")
    domain: str | None = None
    max_age: float | None = None
    expires: datetime | None = None
    signed: bool = False
    http_only: bool = False
    secure: bool = False
    same_site: bool | str | None = None


def _encode(value: str) -> str:
    return quote(value, safe="!'()*")


def _http_date(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return format_datetime(value.astimezone(UTC).replace(microsecond=0), usegmt=True)


def sign(value: str, secret: str) -> str:
    """Append a base64 HMAC-SHA256 of ``value`` (padding stripped)."""
    mac = hmac.new(secret.encode(), value.encode(), hashlib.sha256).digest()
    return f"{value}.{base64.b64encode(mac).decode('ascii').rstrip('=')}"


def unsign(signed_value: str, secret: str) -> str | None:
    """Return the original value if its signature matches ``secret``."""
    value, sep, _ = signed_value.rpartition(".")
    if not sep:
        return None
    if hmac.compare_digest(sign(value, secret).encode(), signed_value.encode()):
        return value
    return None


def serialize_cookie(
    name: str, value: str, options: CookieOptions | None = None
) -> str:
    """Build a Set-Cookie value; ``options.max_age`` is taken as seconds here."""
    options = options or CookieOptions()
    if not _FIELD_CONTENT_RE.fullmatch(name):
        raise CookieError("argument name is invalid")

    encoded = _encode(value)
    if encoded and not _FIELD_CONTENT_RE.fullmatch(encoded):
        raise CookieError("argument val is invalid")

    parts = [f"{name}={encoded}"]

    if options.max_age is not None:
        if not math.isfinite(options.max_age):
            raise CookieError("option maxAge is invalid")
        parts.append(f"Max-Age={math.floor(options.max_age)}")

    if options.domain:
        if not _FIELD_CONTENT_RE.fullmatch(options.domain):
            raise CookieError("option domain is invalid")
        parts.append(f"Domain={options.domain}")

    if options.path:
        if not _FIELD_CONTENT_RE.fullmatch(options.path):
            raise CookieError("option path is invalid")
        parts.append(f"Path={options.path}")

    if options.expires is not None:
        parts.append(f"Expires={_http_date(options.expires)}")

    if options.http_only:
        parts.append("HttpOnly")

    if options.secure:
        parts.append("Secure")

    if options.same_site:
        key = (
            options.same_site.lower()
            if isinstance(options.same_site, str)
            else options.same_site
        )
        if key not in _SAME_SITE:
            raise CookieError("option sameSite is invalid")
        parts.append(f"SameSite={_SAME_SITE[key]}")

    return "; ".join(parts)


def _resolve_secret(request: Request) -> str | None:
    secret: str | Sequence[str] | None = getattr(request.state, "cookie_secret", None)
    if secret is None:
        configured = get_settings().cookies.secret
        secret = configured.get_secret_value() if configured is not None else None
    if secret is not None and not isinstance(secret, str):
        # Several secrets allow rotation; the first one signs
        secret = secret[0] if secret else None
    return secret or None


def set_cookie(
    request: Request,
    response: Response,
    name: str,
    value: Any,
    **options: Any,
) -> Response:
    """Append a Set-Cookie entry for ``name``.

    Mappings, sequences and None are stored as ``j:`` followed by compact
    JSON. With ``signed=True`` the value is signed with the request's cookie
    secret and prefixed with ``s:``; a missing secret raises
    :class:`CookieSecretError`.
    """
    opts = CookieOptions(**options)

    if value is None or isinstance(value, dict | list | tuple):
        serialized = "j:" + json.dumps(value, separators=(",", ":"))
    else:
        serialized = str(value)

    if opts.signed:
        secret = _resolve_secret(request)
        if secret is None:
            raise CookieSecretError()
        serialized = "s:" + sign(serialized, secret)
        logger.debug("cookie_signed", cookie=name, category="cookies")

    if opts.max_age is not None:
        if opts.expires is None:
            now = datetime.now(UTC)
            try:
                opts.expires = now + timedelta(milliseconds=opts.max_age)
            except OverflowError as exc:
                raise CookieError("option expires is invalid", cause=exc) from exc
        opts.max_age = opts.max_age / 1000

    if opts.path is None:
        opts.path = "/"

    return append_header(response, "Set-Cookie", serialize_cookie(name, serialized, opts))


def clear_cookie(
    request: Request, response: Response, name: str, **options: Any
) -> Response:
    """Expire ``name`` on the client by setting it empty with a past Expires."""
    options = {**options, "expires": _EPOCH, "max_age": None}
    return set_cookie(request, response, name, "", **options)
