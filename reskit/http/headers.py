"""Header operations on a response's header collection.

Header values are modelled as a tagged variant:

- ``Scalar`` holds a single value, written as one header line
- ``Multi`` holds an ordered sequence, written as one header line per value

Merging two values always yields a ``Multi`` whose values are the ordered
concatenation of both sides, so repeated appends flatten into one sequence.
"""

from __future__ import annotations

import mimetypes
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import overload

from fastapi import Response

from reskit.core.errors import HeaderTypeError


@dataclass(frozen=True)
class Scalar:
    """A single-valued header."""

    value: str

    @property
    def values(self) -> tuple[str, ...]:
        return (self.value,)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Multi:
    """A multi-valued header, one line per value on the wire."""

    values: tuple[str, ...]

    def __str__(self) -> str:
        return ", ".join(self.values)


HeaderValue = Scalar | Multi
HeaderInput = str | int | Sequence[str] | Scalar | Multi

_CHARSET_RE = re.compile(r";\s*charset\s*=", re.IGNORECASE)
_FIELD_NAME_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")

# Non-text types whose registered default charset is UTF-8
_UTF8_TYPES = frozenset(
    {
        "application/json",
        "application/javascript",
        "application/ecmascript",
        "application/ld+json",
        "application/manifest+json",
        "application/x-www-form-urlencoded",
        "application/xhtml+xml",
    }
)

_TYPE_ALIASES = {
    "text": "text/plain",
}


def to_header_value(value: HeaderInput) -> HeaderValue:
    """Wrap a plain header value in its variant; strings stay scalar."""
    if isinstance(value, Scalar | Multi):
        return value
    if isinstance(value, str | int):
        return Scalar(str(value))
    return Multi(tuple(str(v) for v in value))


def merge_header_values(existing: HeaderValue, new: HeaderValue) -> Multi:
    return Multi(existing.values + new.values)


def lookup_charset(mime_type: str) -> str | None:
    """Return the default charset for a MIME type, if it has one."""
    media = mime_type.split(";", 1)[0].strip().lower()
    if media in _UTF8_TYPES or media.startswith("text/"):
        return "UTF-8"
    return None


def lookup_type(name: str) -> str | None:
    """Resolve a short name or extension (``html``, ``.json``) to a MIME type."""
    if "/" in name:
        return name
    ext = name.lstrip(".").lower()
    if ext in _TYPE_ALIASES:
        return _TYPE_ALIASES[ext]
    mime_type, _ = mimetypes.guess_type(f"file.{ext}", strict=False)
    return mime_type


def _write(response: Response, field: str, header: HeaderValue) -> None:
    headers = response.headers
    if field in headers:
        del headers[field]
    for value in header.values:
        headers.append(field, value)


@overload
def set_header(response: Response, field: str, value: HeaderInput) -> Response: ...


@overload
def set_header(response: Response, field: Mapping[str, HeaderInput]) -> Response: ...


def set_header(
    response: Response,
    field: str | Mapping[str, HeaderInput],
    value: HeaderInput | None = None,
) -> Response:
    """Set a header, replacing any previous value.

    Called with a mapping instead of a field name, every entry is set in
    order. ``Content-Type`` must be a single value and gets a ``charset``
    parameter when its MIME type has a default one and none is given.
    """
    if isinstance(field, Mapping):
        return set_headers(response, field)
    if value is None:
        raise HeaderTypeError(f"No value given for header {field!r}", field=field)

    header = to_header_value(value)
    if field.lower() == "content-type":
        if isinstance(header, Multi):
            raise HeaderTypeError("Content-Type cannot be set to an Array", field=field)
        if not _CHARSET_RE.search(header.value):
            charset = lookup_charset(header.value)
            if charset is not None:
                header = Scalar(f"{header.value}; charset={charset.lower()}")

    _write(response, field, header)
    return response


def set_headers(response: Response, headers: Mapping[str, HeaderInput]) -> Response:
    for name, value in headers.items():
        set_header(response, name, value)
    return response


def get_header(response: Response, field: str) -> HeaderValue | None:
    values = response.headers.getlist(field)
    if not values:
        return None
    if len(values) == 1:
        return Scalar(values[0])
    return Multi(tuple(values))


def append_header(response: Response, field: str, value: HeaderInput) -> Response:
    """Append to a header, keeping every earlier value in order."""
    header = to_header_value(value)
    previous = get_header(response, field)
    if previous is not None:
        header = merge_header_values(previous, header)
    return set_header(response, field, header)


def _parse_field_list(header: str) -> list[str]:
    return [part.strip() for part in header.split(",") if part.strip()]


def set_vary_header(response: Response, field: str | Iterable[str]) -> Response:
    """Add field names to ``Vary``.

    Names already present (compared case-insensitively) are skipped and any
    ``*`` collapses the header to ``*``.
    """
    fields = _parse_field_list(field) if isinstance(field, str) else list(field)
    for name in fields:
        if not _FIELD_NAME_RE.fullmatch(name):
            raise HeaderTypeError(
                "field argument contains an invalid header name", field="Vary"
            )

    previous = get_header(response, "Vary")
    current = str(previous) if previous is not None else ""
    if current == "*":
        return response

    seen = [name.lower() for name in _parse_field_list(current)]
    if "*" in fields or "*" in seen:
        return set_header(response, "Vary", "*")

    for name in fields:
        if name.lower() not in seen:
            seen.append(name.lower())
            current = f"{current}, {name}" if current else name

    if current:
        set_header(response, "Vary", current)
    return response


def set_content_type(response: Response, type_: str) -> Response:
    """Set ``Content-Type`` from a MIME type, short name or file extension."""
    content_type = lookup_type(type_) or "application/octet-stream"
    return set_header(response, "Content-Type", content_type)


def set_links_header(response: Response, links: Mapping[str, str]) -> Response:
    """Add ``<url>; rel="rel"`` entries to ``Link``, after any existing ones."""
    if not links:
        return response
    previous = get_header(response, "Link")
    link = f"{previous}, " if previous is not None else ""
    link += ", ".join(f'<{url}>; rel="{rel}"' for rel, url in links.items())
    return set_header(response, "Link", link)
