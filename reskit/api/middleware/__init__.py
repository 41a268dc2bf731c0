"""Middleware for reskit applications."""

from .cookie_secret import CookieSecretMiddleware


__all__ = ["CookieSecretMiddleware"]
