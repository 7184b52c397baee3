"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~glueapi.exceptions.GlueError` subclass.
Shell wrappers and schedulers can inspect the exit code to tell a rate-limit
exhaustion apart from a broken credential without parsing stderr.

Example::

    $ glueapi list organizations
    $ echo $?
    8   # EXIT_RATE_LIMITED -- the tenant's rate limit never cleared
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""The credential exchange failed."""

EXIT_NOT_FOUND = 4
"""The requested record does not exist."""

EXIT_SERVER_ERROR = 5
"""The API returned an unexpected error response."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (DNS failure, connection refused, transport timeout)."""

EXIT_RATE_LIMITED = 8
"""HTTP 429 responses persisted past the attempt ceiling."""

EXIT_INCOMPLETE = 9
"""A fetch could not produce a complete collection."""

EXIT_CANCELLED = 130
"""The operation was cancelled by the caller (Ctrl-C)."""
