"""Redirect responses with a body negotiated from the Accept header."""

from http import HTTPStatus

from fastapi import Request

from reskit.config.settings import get_settings
from reskit.core.errors import NotAcceptableError
from reskit.core.logging import get_logger
from reskit.http.headers import get_header
from reskit.http.location import set_location_header
from reskit.http.negotiation import format_response
from reskit.http.response import HttpResponse
from reskit.utils.html import escape_html


logger = get_logger(__name__)


def _status_text(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return str(status)


def redirect(
    request: Request,
    response: HttpResponse,
    url: str,
    status: int | None = None,
) -> HttpResponse:
    """Redirect to ``url`` (or ``back``) and finish the response.

    The body is a short text or HTML note depending on the Accept header.
    When neither is acceptable the body is empty; the redirect itself still
    goes out with its status and Location.
    """
    if status is None:
        status = get_settings().redirect.default_status

    set_location_header(request, response, url)
    location = str(get_header(response, "Location"))
    status_text = _status_text(status)
    body = ""

    def _text(_request: Request, _response: HttpResponse) -> None:
        nonlocal body
        body = f"{status_text}. Redirecting to {location}"

    def _html(_request: Request, _response: HttpResponse) -> None:
        nonlocal body
        escaped = escape_html(location)
        body = (
            f'<p>{status_text}. Redirecting to <a href="{escaped}">{escaped}</a></p>'
        )

    def _not_acceptable(error: NotAcceptableError) -> None:
        logger.debug(
            "redirect_body_not_acceptable",
            accept=error.accept,
            location=location,
            category="redirect",
        )

    format_response(
        request,
        response,
        {"text": _text, "html": _html},
        on_error=_not_acceptable,
    )

    response.status_code = status
    logger.debug(
        "redirect_sent",
        status=status,
        location=location,
        category="redirect",
    )
    if request.method == "HEAD":
        return response.end()
    return response.end(body)
