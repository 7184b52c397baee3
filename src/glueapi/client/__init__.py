"""HTTP client module for glueapi.

:class:`SyncClient` wraps :class:`httpx.Client` with auth injection and the
per-request retry policy shared by every operation: fixed backoff on HTTP
429, bounded retries on server-reported timeouts, exponential backoff on
transport failures, and typed errors for everything else.

:class:`CancelToken` lets another thread abort a client that is blocked in
a backoff sleep.

Example::

    from glueapi.client import SyncClient

    with SyncClient(profile, auth_manager=manager) as client:
        resp = client.get("/organizations/42")
"""

from glueapi.client.cancel import CancelToken
from glueapi.client.sync_client import SyncClient

__all__ = ["SyncClient", "CancelToken"]
