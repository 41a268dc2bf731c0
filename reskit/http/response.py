"""Response class with a writable body sink and file streaming."""

from collections.abc import Callable
from functools import partial
from pathlib import Path
from typing import Any

import anyio
from fastapi import Response
from starlette.types import Message, Receive, Scope, Send

from reskit.config.settings import get_settings
from reskit.core.errors import ResponseError
from reskit.core.logging import get_logger


logger = get_logger(__name__)

FileErrorCallback = Callable[[Exception], Any]

# Computed at send time from the final body
_COMPUTED_HEADERS = {b"content-length", b"transfer-encoding"}

# Failures while opening or reading an attached file; LookupError covers an
# unknown text encoding
_STREAM_ERRORS = (OSError, LookupError, ValueError)


class FileStream:
    """A file attached to a response, read in chunks while the body is sent."""

    def __init__(
        self,
        path: Path,
        chunk_size: int,
        encoding: str | None = None,
        on_error: FileErrorCallback | None = None,
    ) -> None:
        self.path = path
        self.chunk_size = chunk_size
        self.encoding = encoding
        self.on_error = on_error
        self.completed = False

    def _fail(self, exc: Exception) -> None:
        logger.warning(
            "download_stream_failed",
            path=str(self.path),
            error=str(exc),
            category="download",
        )
        if self.on_error is not None:
            self.on_error(exc)

    async def stream(self, send: Send) -> None:
        """Send the file as body chunks, then close the body.

        Read errors are handed to ``on_error``; the headers have already been
        sent at this point and are not rolled back.
        """
        try:
            if self.encoding is None:
                handle = await anyio.open_file(self.path, "rb")
            else:
                handle = await anyio.open_file(
                    self.path, "r", encoding=self.encoding, errors="replace"
                )
        except _STREAM_ERRORS as exc:
            self._fail(exc)
        else:
            async with handle:
                while True:
                    try:
                        chunk = await handle.read(self.chunk_size)
                    except _STREAM_ERRORS as exc:
                        self._fail(exc)
                        break
                    if not chunk:
                        break
                    if isinstance(chunk, str):
                        chunk = chunk.encode(self.encoding or "utf-8", errors="replace")
                    await send(
                        {"type": "http.response.body", "body": chunk, "more_body": True}
                    )
        await send({"type": "http.response.body", "body": b"", "more_body": False})
        self.completed = True


class HttpResponse(Response):
    """Response that accumulates its body and may stream an attached file.

    Headers live in ``raw_headers`` and can be changed freely until the
    response is sent; ``Content-Length`` is always computed from the final
    body rather than trusted from the header list.
    """

    def __init__(
        self,
        content: Any = None,
        status_code: int = 200,
        headers: dict[str, str] | None = None,
        media_type: str | None = None,
        background: Any = None,
    ):
        super().__init__(
            content=content,
            status_code=status_code,
            headers=headers,
            media_type=media_type,
            background=background,
        )
        if "content-length" in self.headers:
            del self.headers["content-length"]
        self.file: FileStream | None = None
        self.finished = False

    def write(self, data: bytes | str) -> "HttpResponse":
        if self.finished:
            raise ResponseError("Cannot write to a finished response")
        if isinstance(data, str):
            data = data.encode(self.charset)
        self.body += data
        return self

    def end(self, data: bytes | str | None = None) -> "HttpResponse":
        """Write optional final data and mark the body complete."""
        if data:
            self.write(data)
        self.finished = True
        return self

    def attach_file(
        self,
        path: Path,
        *,
        encoding: str | None = None,
        chunk_size: int | None = None,
        on_error: FileErrorCallback | None = None,
    ) -> "HttpResponse":
        """Stream ``path`` as the body when the response is sent."""
        if chunk_size is None:
            chunk_size = get_settings().files.chunk_size
        self.file = FileStream(
            path, chunk_size=chunk_size, encoding=encoding, on_error=on_error
        )
        self.finished = True
        return self

    async def _listen_for_disconnect(self, receive: Receive) -> None:
        while True:
            message: Message = await receive()
            if message["type"] == "http.disconnect":
                break

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        headers_list = [
            (name, value)
            for name, value in self.raw_headers
            if name.lower() not in _COMPUTED_HEADERS
        ]

        if self.file is None:
            if not (self.status_code < 200 or self.status_code in (204, 304)):
                headers_list.append(
                    (b"content-length", str(len(self.body)).encode("latin-1"))
                )
            await send(
                {
                    "type": "http.response.start",
                    "status": self.status_code,
                    "headers": headers_list,
                }
            )
            await send({"type": "http.response.body", "body": self.body})
        else:
            await send(
                {
                    "type": "http.response.start",
                    "status": self.status_code,
                    "headers": headers_list,
                }
            )
            await self._stream_file(receive, send, self.file)

        if self.background is not None:
            await self.background()

    async def _stream_file(self, receive: Receive, send: Send, file: FileStream) -> None:
        # Stop reading as soon as the client goes away; the file handle is
        # closed by FileStream on every exit path.
        async with anyio.create_task_group() as task_group:

            async def wrap(func: Callable[[], Any]) -> None:
                await func()
                task_group.cancel_scope.cancel()

            task_group.start_soon(wrap, partial(file.stream, send))
            await wrap(partial(self._listen_for_disconnect, receive))

        if not file.completed:
            logger.debug(
                "download_stream_cancelled",
                path=str(file.path),
                category="download",
            )
