"""Content negotiation against the request's Accept header."""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from fastapi import Request, Response

from reskit.core.errors import NotAcceptableError
from reskit.core.logging import get_logger
from reskit.http.headers import lookup_type, set_vary_header


logger = get_logger(__name__)

FormatHandler = Callable[[Request, Response], Any]
ErrorCallback = Callable[[NotAcceptableError], Any]


@dataclass
class AcceptCandidate:
    """One media range from an Accept header."""

    value: str
    quality: float = 1
    params: dict[str, str] = field(default_factory=dict)
    original_index: int | None = None

    @property
    def specificity(self) -> int:
        """2 for an exact type, 1 for ``type/*``, 0 for ``*/*``."""
        main, _, sub = self.value.partition("/")
        if main == "*":
            return 0
        if sub == "*":
            return 1
        return 2

    def matches(self, mime_type: str) -> bool:
        range_main, _, range_sub = self.value.lower().partition("/")
        main, _, sub = mime_type.lower().partition("/")
        if range_main not in ("*", main):
            return False
        return range_sub in ("*", sub)


def _parse_quality(raw: str) -> float:
    try:
        quality = float(raw)
    except ValueError:
        return 1
    if quality != quality:  # NaN
        return 1
    return min(max(quality, 0.0), 1.0)


def accept_params(input: str, index: int | None = None) -> AcceptCandidate:
    """Parse one media range such as ``image/png; q=0.8; level=1``.

    ``q`` becomes the quality (1 when absent or malformed) and is not kept in
    ``params``; every other ``key=value`` pair is.
    """
    parts = input.split(";")
    candidate = AcceptCandidate(value=parts[0].strip(), original_index=index)
    for part in parts[1:]:
        key, sep, value = part.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        if key == "q":
            candidate.quality = _parse_quality(value.strip())
        else:
            candidate.params[key] = value.strip()
    return candidate


def parse_accept(header: str | None) -> list[AcceptCandidate]:
    """Parse an Accept header; a missing or blank header accepts anything."""
    if header is None or not header.strip():
        header = "*/*"
    ranges = [part for part in header.split(",") if part.strip()]
    return [accept_params(part, index) for index, part in enumerate(ranges)]


def normalize_type(type_: str) -> str:
    """Turn a handler key such as ``html`` into a full MIME type."""
    return lookup_type(type_) or type_


def _rank_key(candidate: AcceptCandidate) -> tuple[float, int, int]:
    index = candidate.original_index if candidate.original_index is not None else 0
    return (-candidate.quality, index, -candidate.specificity)


def _refused(candidates: Sequence[AcceptCandidate], mime_type: str) -> bool:
    # A type is refused when the most specific range matching it has q=0
    matching = [c for c in candidates if c.matches(mime_type)]
    if not matching:
        return False
    best = max(matching, key=lambda c: c.specificity)
    return best.quality == 0


def negotiate(accept: str | None, available: Sequence[str]) -> str | None:
    """Return the first of ``available`` preferred by ``accept``, if any.

    Ranges are ranked by quality (highest first), then by their position in
    the header, then by specificity. Within one range, ``available`` order
    decides.
    """
    candidates = parse_accept(accept)
    allowed = [mime for mime in available if not _refused(candidates, mime)]
    for candidate in sorted(candidates, key=_rank_key):
        if candidate.quality <= 0:
            continue
        for mime_type in allowed:
            if candidate.matches(mime_type):
                return mime_type
    return None


def format_response(
    request: Request,
    response: Response,
    handlers: Mapping[str, FormatHandler],
    on_error: ErrorCallback,
) -> Response:
    """Invoke the handler whose type best matches the request's Accept header.

    ``handlers`` maps MIME types (or short names like ``html``) to callables
    taking ``(request, response)``; insertion order breaks ties. The reserved
    ``default`` key runs when nothing matches. Without a default, ``on_error``
    receives a :class:`NotAcceptableError` instead of an exception being
    raised.
    """
    typed = {
        normalize_type(key): handler
        for key, handler in handlers.items()
        if key != "default"
    }
    default = handlers.get("default")
    accept = request.headers.get("accept")

    set_vary_header(response, "Accept")

    chosen = negotiate(accept, list(typed)) if typed else None
    if chosen is not None:
        response.headers["content-type"] = chosen
        logger.debug(
            "negotiation_matched",
            accept=accept,
            content_type=chosen,
            category="negotiation",
        )
        typed[chosen](request, response)
    elif default is not None:
        default(request, response)
    else:
        logger.debug(
            "negotiation_no_match",
            accept=accept,
            available=list(typed),
            category="negotiation",
        )
        on_error(NotAcceptableError(accept=accept))
    return response
