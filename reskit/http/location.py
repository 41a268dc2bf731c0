"""Location header resolution with selective percent-encoding."""

import re
from urllib.parse import quote

from fastapi import Request, Response

from reskit.http.headers import set_header


# Runs of characters outside the URL-safe set, plus "%" not followed by two
# hex digits. Valid %XX triples never match, so encoding is idempotent.
_ENCODE_CHARS_RE = re.compile(
    r"(?:[^\x21\x23-\x3B\x3D\x3F-\x5B\x5D\x5F\x61-\x7A\x7E]"
    r"|%(?:[^0-9A-Fa-f]|[0-9A-Fa-f][^0-9A-Fa-f]|$))+"
)
_LONE_SURROGATE_RE = re.compile(r"[\ud800-\udfff]")

# Allowed characters other than "%", which is always escaped inside a match
_SAFE = "!#$&'()*+,-./:;=?@[]_~"


def encode_url(url: str) -> str:
    """Percent-encode ``url`` without touching existing escapes."""
    url = _LONE_SURROGATE_RE.sub("\ufffd", url)
    return _ENCODE_CHARS_RE.sub(lambda m: quote(m.group(0), safe=_SAFE), url)


def resolve_back(request: Request) -> str:
    headers = request.headers
    return headers.get("referrer") or headers.get("referer") or "/"


def set_location_header(request: Request, response: Response, url: str) -> Response:
    """Set ``Location``; ``back`` means the request's referrer, or ``/``."""
    location = resolve_back(request) if url == "back" else url
    return set_header(response, "Location", encode_url(location))
