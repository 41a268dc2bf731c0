"""Content-Disposition naming and file downloads."""

import mimetypes
import os
import re
from collections.abc import Mapping
from pathlib import Path, PurePath
from urllib.parse import quote

from fastapi import Request, Response

from reskit.core.logging import get_logger
from reskit.http.headers import HeaderInput, get_header, set_header
from reskit.http.response import FileErrorCallback, HttpResponse


logger = get_logger(__name__)

# Printable ISO-8859-1, which may appear in a quoted-string
_TEXT_RE = re.compile(r"[\x20-\x7e\x80-\xff]+")
_NON_LATIN1_RE = re.compile(r"[^\x20-\x7e\xa0-\xff]")
_HEX_ESCAPE_RE = re.compile(r"%[0-9A-Fa-f]{2}")
_QUOTE_RE = re.compile(r'([\\"])')


def _quoted(value: str) -> str:
    return '"' + _QUOTE_RE.sub(r"\\\1", value) + '"'


def _ext_value(value: str) -> str:
    # RFC 5987 ext-value
    return "UTF-8''" + quote(value, safe="!")


def content_disposition(
    filename: str | os.PathLike[str] | None = None, type_: str = "attachment"
) -> str:
    """Build a Content-Disposition value for the basename of ``filename``.

    Names that cannot be sent as an ISO-8859-1 quoted-string get a
    ``filename`` fallback with ``?`` replacements plus a UTF-8
    ``filename*`` parameter (RFC 6266).
    """
    if filename is None:
        return type_

    name = PurePath(filename).name
    if not name:
        return type_

    quotable = bool(_TEXT_RE.fullmatch(name))
    fallback = name if quotable else _NON_LATIN1_RE.sub("?", name)
    has_fallback = fallback != name

    params: list[str] = []
    if quotable or has_fallback:
        params.append(f"filename={_quoted(fallback)}")
    if has_fallback or not quotable or _HEX_ESCAPE_RE.search(name):
        params.append(f"filename*={_ext_value(name)}")

    return "; ".join([type_, *params])


def attachment(
    response: Response, filename: str | os.PathLike[str] | None = None
) -> Response:
    """Mark the response as an attachment, optionally naming the file."""
    return set_header(response, "Content-Disposition", content_disposition(filename))


def download(
    request: Request,
    response: HttpResponse,
    path: str | os.PathLike[str],
    filename: str | None = None,
    *,
    root: str | os.PathLike[str] | None = None,
    headers: Mapping[str, HeaderInput] | None = None,
    encoding: str | None = None,
    chunk_size: int | None = None,
    callback: FileErrorCallback | None = None,
) -> HttpResponse:
    """Send the file at ``path`` as an attachment.

    Args:
        request: The incoming request
        response: The response the file is streamed into
        path: File to send, relative to ``root`` when given
        filename: Name offered to the client, defaults to the basename of path
        root: Directory ``path`` is resolved against
        headers: Extra headers set before streaming; they never replace
            Content-Disposition
        encoding: Text encoding the file is read with
        chunk_size: Bytes read per chunk, defaults to the configured size
        callback: Receives read errors; they are never raised

    Returns:
        The response, with headers set and the file attached
    """
    set_header(
        response, "Content-Disposition", content_disposition(filename or path)
    )
    for key, value in (headers or {}).items():
        if key.lower() != "content-disposition":
            set_header(response, key, value)

    if root is None:
        file_path = Path(path).resolve()
    else:
        # Absolute paths are still taken relative to root
        relative = PurePath(path)
        if relative.anchor:
            relative = relative.relative_to(relative.anchor)
        file_path = Path(root, relative)

    if get_header(response, "Content-Type") is None:
        mime_type, _ = mimetypes.guess_type(file_path.name)
        set_header(response, "Content-Type", mime_type or "application/octet-stream")

    logger.debug(
        "download_prepared",
        path=str(file_path),
        method=request.method,
        category="download",
    )
    return response.attach_file(
        file_path, encoding=encoding, chunk_size=chunk_size, on_error=callback
    )
