"""Higher-level operations on HTTP responses."""

from .attachment import attachment, content_disposition, download
from .cookies import CookieOptions, clear_cookie, set_cookie, sign, unsign
from .headers import (
    HeaderValue,
    Multi,
    Scalar,
    append_header,
    get_header,
    set_content_type,
    set_header,
    set_headers,
    set_links_header,
    set_vary_header,
)
from .location import encode_url, set_location_header
from .negotiation import AcceptCandidate, accept_params, format_response
from .redirect import redirect
from .response import HttpResponse


__all__ = [
    "AcceptCandidate",
    "CookieOptions",
    "HeaderValue",
    "HttpResponse",
    "Multi",
    "Scalar",
    "accept_params",
    "append_header",
    "attachment",
    "clear_cookie",
    "content_disposition",
    "download",
    "encode_url",
    "format_response",
    "get_header",
    "redirect",
    "set_content_type",
    "set_cookie",
    "set_header",
    "set_headers",
    "set_links_header",
    "set_location_header",
    "set_vary_header",
    "sign",
    "unsign",
]
