"""Shared test fixtures and configuration for reskit tests.

Requests are real Starlette ``Request`` objects built from an ASGI scope and
responses are real ``HttpResponse`` objects, so unit tests exercise the same
header collections the application sees at runtime.
"""

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi import FastAPI

from reskit.config.settings import get_settings
from reskit.http.response import HttpResponse
from tests.helpers.asgi import RequestFactory, build_request


FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep env-provided secrets out of tests and reset the settings cache."""
    monkeypatch.delenv("COOKIES__SECRET", raising=False)
    monkeypatch.delenv("RESKIT_CONFIG_FILE", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_request() -> RequestFactory:
    return build_request


@pytest.fixture
def response() -> HttpResponse:
    return HttpResponse()


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def app() -> FastAPI:
    """Bare FastAPI app; tests register their own routes."""
    return FastAPI()
