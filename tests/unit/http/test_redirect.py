"""Tests for redirect status, Location and negotiated body."""

import pytest

from reskit.http.redirect import redirect
from reskit.http.response import HttpResponse
from tests.helpers.asgi import (
    RequestFactory,
    response_body,
    response_headers,
    send_response,
)


pytestmark = pytest.mark.unit


class TestRedirect:
    def test_text_body_by_default(
        self, make_request: RequestFactory, response: HttpResponse
    ) -> None:
        redirect(make_request(), response, "/abc")

        assert response.status_code == 302
        assert response.headers["location"] == "/abc"
        assert response.body == b"Found. Redirecting to /abc"
        assert response.finished

    def test_html_body(
        self, make_request: RequestFactory, response: HttpResponse
    ) -> None:
        redirect(make_request({"Accept": "text/html"}), response, "/abc")

        assert response.headers["content-type"] == "text/html"
        assert response.body == (
            b'<p>Found. Redirecting to <a href="/abc">/abc</a></p>'
        )

    def test_html_body_is_escaped(
        self, make_request: RequestFactory, response: HttpResponse
    ) -> None:
        redirect(make_request({"Accept": "text/html"}), response, "/a?b=1&c='2'")

        assert response.headers["location"] == "/a?b=1&c='2'"
        assert response.body == (
            b"<p>Found. Redirecting to "
            b'<a href="/a?b=1&amp;c=&#39;2&#39;">/a?b=1&amp;c=&#39;2&#39;</a></p>'
        )

    def test_unacceptable_body_is_empty(
        self, make_request: RequestFactory, response: HttpResponse
    ) -> None:
        redirect(make_request({"Accept": "image/jpeg"}), response, "/abc")

        assert response.status_code == 302
        assert response.headers["location"] == "/abc"
        assert response.body == b""
        assert response.headers["vary"] == "Accept"

    def test_head_has_no_body(
        self, make_request: RequestFactory, response: HttpResponse
    ) -> None:
        redirect(make_request(method="HEAD"), response, "/abc")

        assert response.status_code == 302
        assert response.headers["location"] == "/abc"
        assert response.body == b""

    @pytest.mark.parametrize(
        ("status", "text"),
        [
            (301, "Moved Permanently"),
            (307, "Temporary Redirect"),
            (308, "Permanent Redirect"),
            (399, "399"),
        ],
    )
    def test_custom_status(
        self,
        make_request: RequestFactory,
        response: HttpResponse,
        status: int,
        text: str,
    ) -> None:
        redirect(make_request(), response, "/abc", status)

        assert response.status_code == status
        assert response.body == f"{text}. Redirecting to /abc".encode()

    def test_configured_default_status(
        self,
        make_request: RequestFactory,
        response: HttpResponse,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("REDIRECT__DEFAULT_STATUS", "303")

        redirect(make_request(), response, "/abc")

        assert response.status_code == 303
        assert response.body == b"See Other. Redirecting to /abc"

    def test_back(self, make_request: RequestFactory, response: HttpResponse) -> None:
        redirect(make_request({"Referer": "/previous"}), response, "back")

        assert response.headers["location"] == "/previous"
        assert response.body == b"Found. Redirecting to /previous"

    def test_location_is_encoded(
        self, make_request: RequestFactory, response: HttpResponse
    ) -> None:
        redirect(make_request(), response, "/search?q=a b")

        assert response.headers["location"] == "/search?q=a%20b"
        assert response.body == b"Found. Redirecting to /search?q=a%20b"

    @pytest.mark.asyncio
    async def test_sent_with_content_length(
        self, make_request: RequestFactory, response: HttpResponse
    ) -> None:
        redirect(make_request(), response, "/abc")

        messages = await send_response(response)
        headers = response_headers(messages)

        assert messages[0]["status"] == 302
        assert headers["content-length"] == ["26"]
        assert response_body(messages) == b"Found. Redirecting to /abc"
