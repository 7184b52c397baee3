"""Record retrieval and mutation on top of :class:`~glueapi.client.SyncClient`.

- :func:`fetch_all` -- complete, ordered collection from a list endpoint.
- :func:`fetch_one` -- one record by id.
- :func:`mutate` -- create, update or delete one record.
- :func:`reconcile` -- compare a collection with the server's total.
"""

from glueapi.fetch.endpoints import ENDPOINTS, normalize_filters, resolve_endpoint
from glueapi.fetch.engine import FetchEngine, fetch_all
from glueapi.fetch.mutate import mutate
from glueapi.fetch.reconcile import Outcome, OutcomeKind, ensure_complete, reconcile
from glueapi.fetch.single import fetch_one
from glueapi.fetch.state import FetchState

__all__ = [
    "ENDPOINTS",
    "FetchEngine",
    "FetchState",
    "Outcome",
    "OutcomeKind",
    "ensure_complete",
    "fetch_all",
    "fetch_one",
    "mutate",
    "normalize_filters",
    "reconcile",
    "resolve_endpoint",
]
