"""Middleware that makes a cookie-signing secret available to each request."""

from collections.abc import Sequence
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


class CookieSecretMiddleware(BaseHTTPMiddleware):
    """Store the cookie secret on ``request.state`` for signed cookies."""

    def __init__(self, app: ASGIApp, secret: str | Sequence[str]):
        """Initialize the cookie secret middleware.

        Args:
            app: The ASGI application
            secret: Signing secret, or several with the first used to sign
        """
        super().__init__(app)
        if not secret:
            raise ValueError("CookieSecretMiddleware requires a non-empty secret")
        self.secret = secret

    async def dispatch(self, request: Request, call_next: Any) -> Response:
        """Attach the secret and continue down the chain.

        Args:
            request: The incoming HTTP request
            call_next: The next middleware/handler in the chain

        Returns:
            The HTTP response
        """
        request.state.cookie_secret = self.secret
        return await call_next(request)  # type: ignore[no-any-return]
