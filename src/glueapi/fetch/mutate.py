"""Create, update and delete single records."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from glueapi.client.response import extract_response_data, parse_record
from glueapi.client.sync_client import SyncClient
from glueapi.exceptions import InvalidUsageError, TimeoutExhausted
from glueapi.fetch.endpoints import resolve_endpoint
from glueapi.models import EndpointSpec, MutationMethod, Record
from glueapi.output import get_output

_HTTP_METHODS = {
    MutationMethod.CREATE: "POST",
    MutationMethod.UPDATE: "PATCH",
    MutationMethod.DELETE: "DELETE",
}


def build_envelope(
    resource_type: str,
    body: Mapping[str, Any],
    record_id: Optional[Union[str, int]] = None,
) -> dict[str, Any]:
    """Wrap attributes in the ``{"data": {"type", "attributes"}}`` envelope.

    A *body* that already has a top-level ``data`` member is sent as-is.
    """
    if "data" in body:
        return dict(body)
    data: dict[str, Any] = {"type": resource_type, "attributes": dict(body)}
    if record_id is not None:
        data["id"] = str(record_id)
    return {"data": data}


def mutate(
    client: SyncClient,
    endpoint: Union[str, EndpointSpec],
    method: Union[MutationMethod, str],
    body: Optional[Mapping[str, Any]] = None,
    *,
    record_id: Optional[Union[str, int]] = None,
    resource_type: Optional[str] = None,
) -> Optional[Record]:
    """Send one create/update/delete under the client's retry policy.

    * ``CREATE`` -- ``POST /<endpoint>`` with the attribute envelope.
    * ``UPDATE`` -- ``PATCH /<endpoint>/<id>`` with the envelope (``id`` included).
    * ``DELETE`` -- ``DELETE /<endpoint>/<id>``, body optional.

    There is no page size to shrink, so a server timeout past the retry
    ceiling is terminal.

    Returns:
        The record in the response, or ``None`` for an empty (204) response.

    Raises:
        InvalidUsageError: Missing id for update/delete or missing body for
            create/update.
        TimeoutExhausted, RateLimitExhausted, UnexpectedResponseError,
        NotFoundError, ConnectionError_: Propagated from the client.
    """
    method = MutationMethod(method)
    spec = resolve_endpoint(endpoint)
    rtype = resource_type or spec.resource_type

    problem = None
    if method != MutationMethod.CREATE and record_id is None:
        problem = f"{method.value} requires a record id"
    elif method != MutationMethod.DELETE and not body:
        problem = f"{method.value} requires a body"
    if problem is not None:
        get_output().error(problem)
        raise InvalidUsageError(problem)

    path = f"/{spec.path}" if method == MutationMethod.CREATE else f"/{spec.path}/{record_id}"
    json_body = None
    if body:
        envelope_id = record_id if method == MutationMethod.UPDATE else None
        json_body = build_envelope(rtype, body, envelope_id)

    http_method = _HTTP_METHODS[method]
    output = get_output()
    output.debug(f"{http_method} {path}")
    try:
        response = client.request(http_method, path, json_body=json_body)
    except TimeoutExhausted:
        output.error(f"{http_method} {path} kept timing out")
        raise

    return parse_record(extract_response_data(response))
