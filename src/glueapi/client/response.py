"""Parsing of JSON:API response envelopes.

This module bridges the HTTP client and the fetch engine. It knows the
shape of the API's three kinds of body:

* list envelopes ``{"data": [...], "meta": {"total-count", "total-pages", "next-page"}}``,
  parsed by :func:`parse_page` into a :class:`~glueapi.models.PageResponse`;
* single-record envelopes ``{"data": {...}}``, parsed by :func:`parse_record`;
* error envelopes ``{"errors": [{"title", "detail"}]}``, read by
  :func:`error_details` and :func:`is_server_timeout`.

Meta fields are optional; a missing or unparseable value becomes ``None``
rather than an error.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from glueapi.exceptions import UnexpectedResponseError
from glueapi.models import PageResponse, Record
from glueapi.output import get_output

TIMEOUT_DETAIL = "The request took too long to process and timed out."
"""The ``errors[].detail`` text the server uses for an application-level timeout."""


def extract_response_data(response: httpx.Response) -> Any:
    """Return the JSON body, the raw text if it is not JSON, or ``None`` if empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def error_details(body: Any) -> tuple[Optional[str], Optional[str]]:
    """Return ``(title, detail)`` of the first entry in a JSON:API ``errors`` array.

    Falls back to top-level ``message``/``error`` keys for non-JSON:API bodies.
    """
    if not isinstance(body, dict):
        return None, (body[:200] if isinstance(body, str) and body else None)

    errors = body.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        first = errors[0]
        title = first.get("title")
        detail = first.get("detail")
        return (
            str(title) if title is not None else None,
            str(detail) if detail is not None else None,
        )

    message = body.get("message") or body.get("error")
    return None, (str(message) if message else None)


def is_server_timeout(response: httpx.Response) -> bool:
    """Return ``True`` if the body reports the server-side "timed out" error.

    This is an application error carried in an error body, distinct from a
    transport-level :class:`httpx.TimeoutException`.
    """
    if response.status_code < 400:
        return False
    body = extract_response_data(response)
    if not isinstance(body, dict):
        return False
    errors = body.get("errors")
    if not isinstance(errors, list):
        return False
    return any(
        isinstance(entry, dict) and str(entry.get("detail", "")).strip() == TIMEOUT_DETAIL
        for entry in errors
    )


def _malformed(message: str) -> UnexpectedResponseError:
    get_output().error(message)
    return UnexpectedResponseError(message)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_page(body: Any) -> PageResponse:
    """Parse a list envelope.

    Raises:
        UnexpectedResponseError: If ``data`` is missing or not a list.
    """
    if not isinstance(body, dict) or not isinstance(body.get("data"), list):
        raise _malformed("Malformed list response: 'data' is not an array")

    meta = body.get("meta")
    if not isinstance(meta, dict):
        meta = {}
    return PageResponse(
        items=list(body["data"]),
        total_count=_optional_int(meta.get("total-count")),
        total_pages=_optional_int(meta.get("total-pages")),
        next_page=_optional_int(meta.get("next-page")),
    )


def parse_record(body: Any) -> Optional[Record]:
    """Return the ``data`` object of a single-record envelope, or ``None`` if absent.

    Raises:
        UnexpectedResponseError: If ``data`` is present but not an object.
    """
    if not isinstance(body, dict):
        return None
    data = body.get("data")
    if data is None or data == {} or data == []:
        return None
    if isinstance(data, list):
        # Some endpoints answer a by-id GET with a one-element array.
        if len(data) == 1 and isinstance(data[0], dict):
            return data[0]
        raise _malformed(f"Expected a single record, got an array of {len(data)}")
    if not isinstance(data, dict):
        raise _malformed("Malformed record response: 'data' is not an object")
    return data
