"""Response helpers for Starlette and FastAPI applications."""

from reskit.http import (
    HttpResponse,
    append_header,
    attachment,
    clear_cookie,
    download,
    format_response,
    get_header,
    redirect,
    set_content_type,
    set_cookie,
    set_header,
    set_headers,
    set_links_header,
    set_location_header,
    set_vary_header,
)


__version__ = "0.1.0"

__all__ = [
    "HttpResponse",
    "append_header",
    "attachment",
    "clear_cookie",
    "download",
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
]
