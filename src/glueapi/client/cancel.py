"""Cooperative cancellation for long-running operations."""

from __future__ import annotations

import threading

from glueapi.exceptions import OperationCancelled


class CancelToken:
    """A thread-safe flag that aborts backoff sleeps and pending requests.

    A fetch that keeps hitting HTTP 429 can block for many minutes. Hand the
    same token to :class:`~glueapi.client.SyncClient` and call
    :meth:`cancel` from another thread to stop it at the next sleep or
    request boundary with :class:`~glueapi.exceptions.OperationCancelled`.

    Example::

        token = CancelToken()
        threading.Timer(30, token.cancel).start()
        with SyncClient(profile, cancel_token=token) as client:
            fetch_all(client, "configurations")
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """Sleep up to *seconds*; return ``True`` if cancelled meanwhile."""
        return self._event.wait(seconds)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled("Operation cancelled")
