"""Paginated fetch engine.

:func:`fetch_all` retrieves every record of a list endpoint:

1. Filters are normalized once against the endpoint's allow-list.
2. A count request (``page[size]=1``) learns ``meta.total-count``; a total
   of zero returns an empty list with no further requests.
3. Pages are requested strictly one at a time and appended in order until
   the endpoint's termination rule holds (retrieved >= total-count, or no
   ``next-page``), or a page comes back empty. Cursor endpoints request
   the page named by ``next-page``; a cursor that stalls or points past
   ``total-pages`` is a terminal error.
4. When a page exhausts the client's server-timeout retries the page size is
   halved and the loop resumes at the page that holds the first record not
   yet retrieved.
5. The collection is reconciled against the final total; any mismatch
   raises :class:`~glueapi.exceptions.ReconciliationMismatch`.

HTTP 429 backoff and the per-request retry ceilings live in
:class:`~glueapi.client.SyncClient`; this module only decides what to ask
for next. Page-size changes never outlive one call.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from glueapi.client.response import parse_page
from glueapi.client.sync_client import SyncClient
from glueapi.exceptions import PageSizeExhausted, TimeoutExhausted, UnexpectedResponseError
from glueapi.fetch.endpoints import normalize_filters, resolve_endpoint
from glueapi.fetch.reconcile import ensure_complete, reconcile
from glueapi.fetch.state import FetchState
from glueapi.models import EndpointSpec, PageRequest, PageResponse, Record, Termination
from glueapi.output import get_output


class FetchEngine:
    """Drives the requests for one :func:`fetch_all` call.

    Args:
        client: An entered :class:`~glueapi.client.SyncClient`.
        endpoint: Endpoint path (``"organizations"``) or an
            :class:`~glueapi.models.EndpointSpec`.
        filters: Caller filters; unsupported keys are dropped.
        sort: Optional JSON:API ``sort`` expression, e.g. ``"-updated_at"``.
        page_size: Starting page size; defaults to the profile's
            ``request.page_size``.
    """

    def __init__(
        self,
        client: SyncClient,
        endpoint: Union[str, EndpointSpec],
        filters: Optional[Mapping[str, Any]] = None,
        sort: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> None:
        self._client = client
        self._endpoint = resolve_endpoint(endpoint)
        self._filters = normalize_filters(self._endpoint, filters)
        self._sort = sort
        self._page_size = page_size if page_size is not None else client.config.page_size
        if self._page_size < 1:
            raise ValueError("page_size must be at least 1")

    @property
    def endpoint(self) -> EndpointSpec:
        return self._endpoint

    @property
    def filters(self) -> dict[str, str]:
        return dict(self._filters)

    def run(self) -> list[Record]:
        """Fetch the complete collection.

        Raises:
            PageSizeExhausted: Timeouts persisted down to page size 1.
            ReconciliationMismatch: The count disagrees with the server total.
            RateLimitExhausted, UnexpectedResponseError, NotFoundError,
            ConnectionError_, OperationCancelled: Propagated from the client.
        """
        output = get_output()
        path = self._endpoint.path
        termination = self._endpoint.termination

        counted = self._count_request()
        if counted.total_count == 0 or (counted.total_count is None and not counted.items):
            output.info(f"{path}: no records")
            return []
        if counted.total_count is None and termination == Termination.TOTAL_COUNT:
            output.error(f"{path}: response did not report meta.total-count")
            raise UnexpectedResponseError(
                f"{path} did not report meta.total-count, which its pagination requires"
            )

        if counted.total_count is not None:
            output.info(f"{path}: {counted.total_count} records to fetch")
        state = FetchState(page_size=self._page_size, total=counted.total_count)
        records: list[Record] = []

        follow_cursor = termination == Termination.NEXT_PAGE
        while not state.is_complete(termination):
            request = state.to_request(self._filters, self._sort)
            try:
                page = self._fetch_page(request)
            except TimeoutExhausted:
                state = self._degrade(state)
                continue
            if follow_cursor:
                self._check_cursor(request, page)

            items = page.items[state.skip:]
            records.extend(items)
            state = state.advance(page, len(items), follow_cursor=follow_cursor)
            output.debug(
                f"{path}: page {request.page_number} (size {request.page_size}) "
                f"returned {len(page.items)} records, {state.retrieved} so far"
            )
            if not items:
                break

        ensure_complete(reconcile(records, state.total), path)
        return records

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _count_request(self) -> PageResponse:
        request = PageRequest(page_number=1, page_size=1, filters=self._filters, sort=self._sort)
        try:
            return self._fetch_page(request)
        except TimeoutExhausted as exc:
            get_output().error(f"{self._endpoint.path}: count request timed out at page size 1")
            raise PageSizeExhausted(
                f"{self._endpoint.path}: server timed out even at page size 1"
            ) from exc

    def _fetch_page(self, request: PageRequest) -> PageResponse:
        response = self._client.get(f"/{self._endpoint.path}", params=request.to_params())
        try:
            body = response.json()
        except ValueError as exc:
            message = f"{self._endpoint.path}: response is not JSON"
            get_output().error(message)
            raise UnexpectedResponseError(message, status_code=response.status_code) from exc
        return parse_page(body)

    def _check_cursor(self, request: PageRequest, page: PageResponse) -> None:
        """Reject a ``next-page`` that does not move forward or overshoots ``total-pages``."""
        cursor = page.next_page
        if cursor is None:
            return
        problem = None
        if cursor <= request.page_number:
            problem = f"next-page {cursor} does not advance past page {request.page_number}"
        elif page.total_pages is not None and cursor > page.total_pages:
            problem = f"next-page {cursor} is beyond total-pages {page.total_pages}"
        if problem is not None:
            message = f"{self._endpoint.path}: {problem}"
            get_output().error(message)
            raise UnexpectedResponseError(message)

    def _degrade(self, state: FetchState) -> FetchState:
        output = get_output()
        try:
            degraded = state.degrade()
        except PageSizeExhausted as exc:
            output.error(f"{self._endpoint.path}: {exc}")
            raise
        output.warning(
            f"{self._endpoint.path}: server timed out at page size {state.page_size}; "
            f"resuming at page {degraded.page_number} with page size {degraded.page_size}"
        )
        return degraded


def fetch_all(
    client: SyncClient,
    endpoint: Union[str, EndpointSpec],
    filters: Optional[Mapping[str, Any]] = None,
    *,
    sort: Optional[str] = None,
    page_size: Optional[int] = None,
) -> list[Record]:
    """Return every record of *endpoint* matching *filters*, in server order.

    Example::

        with SyncClient(profile, auth_manager=manager) as client:
            contacts = fetch_all(client, "contacts", {"organization_id": 42})
    """
    return FetchEngine(client, endpoint, filters, sort=sort, page_size=page_size).run()
