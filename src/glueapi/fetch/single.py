"""Fetch exactly one record by id."""

from __future__ import annotations

from typing import Union

from glueapi.client.response import extract_response_data, parse_record
from glueapi.client.sync_client import SyncClient
from glueapi.exceptions import NotFoundError, TimeoutExhausted
from glueapi.fetch.endpoints import resolve_endpoint
from glueapi.models import EndpointSpec, Record
from glueapi.output import get_output


def fetch_one(
    client: SyncClient,
    endpoint: Union[str, EndpointSpec],
    record_id: Union[str, int],
) -> Record:
    """``GET /<endpoint>/<id>`` under the client's retry policy.

    No pagination or reconciliation is involved. A response without a
    record, like an HTTP 404, raises :class:`NotFoundError` so callers can
    tell "missing" apart from "broken".

    Raises:
        NotFoundError: The record does not exist.
        TimeoutExhausted: The server timed out on every allowed attempt.
        RateLimitExhausted, UnexpectedResponseError, ConnectionError_:
            Propagated from the client.
    """
    spec = resolve_endpoint(endpoint)
    path = f"/{spec.path}/{record_id}"
    output = get_output()

    try:
        response = client.get(path)
    except TimeoutExhausted:
        output.error(f"GET {path} kept timing out")
        raise

    record = parse_record(extract_response_data(response))
    if record is None:
        output.error(f"GET {path} returned no record")
        raise NotFoundError(f"No {spec.resource_type} record with id {record_id}")
    return record
