"""Core error types for response operations."""


class ResponseError(Exception):
    """Base exception for all response-operation errors."""

    def __init__(self, message: str, cause: Exception | None = None):
        """Initialize with a message and optional cause.

        Args:
            message: The error message
            cause: The underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause:
            # Use Python's exception chaining
            self.__cause__ = cause


class HeaderTypeError(ResponseError, TypeError):
    """Error raised when a header is given a value of the wrong shape."""

    def __init__(self, message: str, field: str | None = None):
        """Initialize with a message and the offending header field.

        Args:
            message: The error message
            field: The header field that was being written
        """
        super().__init__(message)
        self.field = field


class CookieError(ResponseError, TypeError):
    """Error raised when a cookie name, value or attribute is invalid."""


class CookieSecretError(CookieError):
    """Error raised when a signed cookie is requested without a secret."""

    def __init__(
        self, message: str = 'cookieParser("secret") required for signed cookies'
    ):
        super().__init__(message)


class NotAcceptableError(ResponseError):
    """No representation matches the request's Accept header.

    Passed to negotiation error callbacks rather than raised, so callers
    decide how to present it.
    """

    status = 406

    def __init__(self, message: str = "Not Acceptable", accept: str | None = None):
        """Initialize with a message and the Accept header that failed.

        Args:
            message: The error message
            accept: The raw Accept header value
        """
        super().__init__(message)
        self.accept = accept
