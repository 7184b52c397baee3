"""Exception hierarchy for glueapi.

All exceptions inherit from :class:`GlueError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`glueapi.exit_codes`.
The top-level error handler in :func:`glueapi.app.main` catches
``GlueError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Library callers get the same typed errors: a failed fetch never comes back
as data, so an error can not be mistaken for a (short) collection.

Subclass hierarchy::

    GlueError (exit 1)
    +-- InvalidUsageError          (exit 2)
    +-- ConfigError                (exit 1)
    +-- AuthError                  (exit 3)
    +-- ConnectionError_           (exit 6)
    +-- OperationCancelled         (exit 130)
    +-- FetchError                 (exit 5)
        +-- UnexpectedResponseError (exit 5)
        +-- NotFoundError           (exit 4)
        +-- TimeoutExhausted        (exit 5)
        +-- RateLimitExhausted      (exit 8)
        +-- PageSizeExhausted       (exit 9)
        +-- ReconciliationMismatch  (exit 9)
"""

from __future__ import annotations

import enum
from typing import Optional

from glueapi.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CANCELLED,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INCOMPLETE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_RATE_LIMITED,
    EXIT_SERVER_ERROR,
)


class GlueError(Exception):
    """Base exception for all glueapi errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`glueapi.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(GlueError):
    """Raised for invalid CLI arguments or malformed call parameters."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(GlueError):
    """Raised for configuration problems (missing profiles, invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE


class AuthFailure(str, enum.Enum):
    """Which step of authentication failed."""

    REFRESH_TOKEN_DENIED = "refresh_token_denied"
    ACCESS_TOKEN_DENIED = "access_token_denied"
    MISCONFIGURED = "misconfigured"


class AuthError(GlueError):
    """Raised when the credential exchange fails.

    Never retried by the client; the caller may retry with new credentials.
    """

    exit_code = EXIT_AUTH_FAILURE

    def __init__(self, message: str, reason: AuthFailure = AuthFailure.MISCONFIGURED):
        super().__init__(message)
        self.reason = reason


class ConnectionError_(GlueError):
    """Raised on network-level failures (transport timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class OperationCancelled(GlueError):
    """Raised when a :class:`~glueapi.client.cancel.CancelToken` is set mid-operation."""

    exit_code = EXIT_CANCELLED


class FetchError(GlueError):
    """Base class for failures while retrieving or mutating records."""

    exit_code = EXIT_SERVER_ERROR


class UnexpectedResponseError(FetchError):
    """Raised for any non-2xx or malformed response that is not retried.

    Args:
        message: Human-readable description.
        status_code: HTTP status of the response, when there was one.
        title: The server's ``errors[0].title``, if present.
        detail: The server's ``errors[0].detail``, if present.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        title: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.title = title
        self.detail = detail


class NotFoundError(FetchError):
    """Raised when a single record does not exist (HTTP 404 or an empty ``data`` member)."""

    exit_code = EXIT_NOT_FOUND


class TimeoutExhausted(FetchError):
    """Raised when the server kept reporting "request timed out" past the retry ceiling."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class RateLimitExhausted(FetchError):
    """Raised when HTTP 429 persisted for every allowed attempt."""

    exit_code = EXIT_RATE_LIMITED

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class PageSizeExhausted(FetchError):
    """Raised when timeouts persist even after halving the page size down to one."""

    exit_code = EXIT_INCOMPLETE


class ReconciliationMismatch(FetchError):
    """Raised when the retrieved record count disagrees with the server's total.

    Args:
        message: Human-readable description.
        actual: Number of records retrieved.
        expected: The server-reported ``total-count``.
        kind: ``"overrun"`` or ``"undercount"``.
    """

    exit_code = EXIT_INCOMPLETE

    def __init__(self, message: str, actual: int, expected: int, kind: str):
        super().__init__(message)
        self.actual = actual
        self.expected = expected
        self.kind = kind
