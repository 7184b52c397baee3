"""Mock JSON:API server and profile builders shared by the test modules."""

from __future__ import annotations

from typing import Any, Optional

import httpx

from glueapi.models import AuthConfig, Profile, RequestConfig

TIMEOUT_BODY = {
    "errors": [
        {
            "status": "422",
            "title": "Unprocessable Entity",
            "detail": "The request took too long to process and timed out.",
        }
    ]
}


def make_profile(auth: Optional[AuthConfig] = None, **request: Any) -> Profile:
    """Profile with zero backoffs and a single transport retry."""
    settings: dict[str, Any] = {
        "rate_limit_backoff": 0,
        "timeout_backoff": 0,
        "max_retries": 1,
    }
    settings.update(request)
    return Profile(
        name="test",
        base_url="https://api.example.com",
        auth=auth,
        request=RequestConfig(**settings),
    )


def make_records(count: int, resource_type: str = "organizations") -> list[dict[str, Any]]:
    return [
        {"id": str(i), "type": resource_type, "attributes": {"name": f"Record {i}"}}
        for i in range(1, count + 1)
    ]


def timeout_response() -> httpx.Response:
    return httpx.Response(422, json=TIMEOUT_BODY)


class MockServer:
    """Serves a fixed dataset with JSON:API paging and records every request.

    Args:
        records: The full collection, in server order.
        report_total: Whether list responses carry ``meta.total-count``.
        total_override: Report this total instead of ``len(records)``.
        max_page_size: Page sizes above this answer with the server timeout.
        next_page_meta: Include ``meta.next-page`` in list responses.
        timeout_on: ``(page_size, page_number)`` pairs that always time out.
    """

    def __init__(
        self,
        records: list[dict[str, Any]],
        report_total: bool = True,
        total_override: Optional[int] = None,
        max_page_size: Optional[int] = None,
        next_page_meta: bool = True,
        timeout_on: Optional[set[tuple[int, int]]] = None,
    ) -> None:
        self.records = records
        self.report_total = report_total
        self.total_override = total_override
        self.max_page_size = max_page_size
        self.next_page_meta = next_page_meta
        self.timeout_on = timeout_on or set()
        self.requests: list[httpx.Request] = []

    @property
    def page_requests(self) -> list[tuple[int, int]]:
        """``(page_size, page_number)`` of every list request, in order."""
        return [
            (int(r.url.params["page[size]"]), int(r.url.params["page[number]"]))
            for r in self.requests
            if "page[size]" in r.url.params
        ]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        size = int(request.url.params.get("page[size]", "1000"))
        number = int(request.url.params.get("page[number]", "1"))
        if (size, number) in self.timeout_on:
            return timeout_response()
        if self.max_page_size is not None and size > self.max_page_size:
            return timeout_response()

        start = (number - 1) * size
        items = self.records[start:start + size]
        total = self.total_override if self.total_override is not None else len(self.records)
        pages = -(-total // size) if total else 0
        meta: dict[str, Any] = {"current-page": number, "total-pages": pages}
        if self.report_total:
            meta["total-count"] = total
        if self.next_page_meta:
            meta["next-page"] = number + 1 if number < pages else None
        return httpx.Response(200, json={"data": items, "meta": meta})
