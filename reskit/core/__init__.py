"""Core abstractions shared by reskit modules."""

from reskit.core.errors import (
    CookieError,
    CookieSecretError,
    HeaderTypeError,
    NotAcceptableError,
    ResponseError,
)


__all__ = [
    "CookieError",
    "CookieSecretError",
    "HeaderTypeError",
    "NotAcceptableError",
    "ResponseError",
]
