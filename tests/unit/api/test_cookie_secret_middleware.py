"""Tests for the middleware that provides the cookie-signing secret."""

from urllib.parse import unquote

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from reskit.api.middleware.cookie_secret import CookieSecretMiddleware
from reskit.http.cookies import set_cookie, sign, unsign
from reskit.http.response import HttpResponse


pytestmark = pytest.mark.unit


def _app(secret: str | list[str]) -> FastAPI:
    app = FastAPI()
    app.add_middleware(CookieSecretMiddleware, secret=secret)

    @app.get("/secret")
    def read_secret(request: Request) -> dict[str, str | list[str]]:
        return {"secret": request.state.cookie_secret}

    @app.get("/login")
    def login(request: Request) -> HttpResponse:
        response = HttpResponse()
        set_cookie(request, response, "user", "tobi", signed=True)
        return response.end("ok")

    return app


def _cookie_value(set_cookie_header: str) -> str:
    pair = set_cookie_header.split(";", 1)[0]
    return unquote(pair.split("=", 1)[1])


class TestCookieSecretMiddleware:
    def test_secret_is_on_request_state(self) -> None:
        with TestClient(_app("tobiiscool")) as client:
            response = client.get("/secret")
        assert response.json() == {"secret": "tobiiscool"}

    def test_signed_cookie_uses_secret(self) -> None:
        with TestClient(_app("tobiiscool")) as client:
            response = client.get("/login")

        assert response.status_code == 200
        assert response.text == "ok"
        assert _cookie_value(response.headers["set-cookie"]) == (
            "s:" + sign("tobi", "tobiiscool")
        )

    def test_first_secret_signs(self) -> None:
        with TestClient(_app(["new", "old"])) as client:
            response = client.get("/login")

        signed = _cookie_value(response.headers["set-cookie"]).removeprefix("s:")
        assert unsign(signed, "new") == "tobi"
        assert unsign(signed, "old") is None

    @pytest.mark.parametrize("secret", ["", []])
    def test_empty_secret_is_rejected(self, secret: str | list[str]) -> None:
        with pytest.raises(ValueError, match="non-empty secret"):
            CookieSecretMiddleware(FastAPI(), secret=secret)
