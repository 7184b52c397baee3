"""Endpoint table and filter normalization.

The API only honours documented ``filter[...]`` keys per resource and
answers unknown ones with an error, so filters are normalized once per
fetch against :data:`ENDPOINTS` before any request is made.

Nested paths resolve by their last resource segment, so
``organizations/12/relationships/contacts`` uses the ``contacts`` entry.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from glueapi.models import EndpointSpec, Termination
from glueapi.output import get_output


def _spec(
    name: str,
    filters: tuple[str, ...],
    termination: Termination = Termination.TOTAL_COUNT,
) -> EndpointSpec:
    return EndpointSpec(
        path=name,
        resource_type=name.replace("_", "-"),
        allowed_filters=frozenset(filters),
        termination=termination,
    )


_PSA = ("psa_id", "psa_integration_type")

ENDPOINTS: dict[str, EndpointSpec] = {
    spec.path: spec
    for spec in (
        _spec(
            "organizations",
            (
                "id", "name", "organization_type_id", "organization_status_id",
                "created_at", "updated_at", "my_glue_account_id", "group_id",
                "exclude_id", "exclude_name", "exclude_organization_type_id",
                "exclude_organization_status_id", "range", "range_my_glue_account_id",
            ) + _PSA,
        ),
        _spec(
            "configurations",
            (
                "id", "name", "organization_id", "configuration_type_id",
                "configuration_status_id", "contact_id", "serial_number",
                "mac_address", "asset_tag", "rmm_id", "rmm_integration_type", "archived",
            ) + _PSA,
        ),
        _spec(
            "contacts",
            (
                "id", "first_name", "last_name", "title", "contact_type_id",
                "important", "primary_email", "organization_id",
            ) + _PSA,
        ),
        _spec(
            "passwords",
            (
                "id", "name", "organization_id", "password_category_id", "url",
                "cached_resource_name", "archived",
            ),
        ),
        _spec(
            "locations",
            ("id", "name", "city", "region_id", "country_id", "organization_id") + _PSA,
        ),
        _spec("flexible_assets", ("flexible_asset_type_id", "name", "organization_id")),
        _spec("flexible_asset_types", ("id", "name", "icon", "enabled")),
        _spec("domains", ("id", "organization_id")),
        _spec("users", ("id", "name", "email", "role_name")),
        _spec(
            "expirations",
            (
                "id", "resource_id", "resource_name", "resource_type_name",
                "description", "expiration_date", "organization_id", "range",
            ),
        ),
        _spec("configuration_types", ("name",)),
        _spec("configuration_statuses", ("name",)),
        _spec("contact_types", ("name",)),
        _spec("organization_types", ("name",)),
        _spec("organization_statuses", ("name",)),
        _spec("password_categories", ("name",)),
        _spec("manufacturers", ("name",)),
        _spec("models", ("id", "manufacturer_id")),
        _spec("operating_systems", ("name",)),
        _spec("platforms", ("name",)),
        _spec("countries", ("name", "iso")),
        _spec("regions", ("name", "iso", "country_id")),
        _spec("groups", ("name",)),
        _spec("logs", ("created_at",), Termination.NEXT_PAGE),
    )
}


def endpoint_key(path: str) -> str:
    """Return the resource segment of *path* used to look up :data:`ENDPOINTS`."""
    segments = [s for s in path.strip("/").split("/") if s]
    for segment in reversed(segments):
        if segment == "relationships" or segment.isdigit():
            continue
        return segment
    return path.strip("/")


def resolve_endpoint(endpoint: Union[str, EndpointSpec]) -> EndpointSpec:
    """Return the :class:`EndpointSpec` for *endpoint*.

    A string path is matched against the built-in table and keeps its own
    path (so nested paths stay nested). Unknown endpoints get a spec with no
    allow-list.
    """
    if isinstance(endpoint, EndpointSpec):
        return endpoint

    path = endpoint.strip("/")
    known = ENDPOINTS.get(endpoint_key(path))
    if known is None:
        get_output().debug(
            f"Endpoint '{path}' is not in the endpoint table; filters are sent unchanged"
        )
        return EndpointSpec(path=path, resource_type=endpoint_key(path).replace("_", "-"))
    if known.path == path:
        return known
    return known.model_copy(update={"path": path})


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(_format_value(v) for v in value)
    return str(value)


def normalize_filters(
    endpoint: EndpointSpec,
    filters: Optional[Mapping[str, Any]],
) -> dict[str, str]:
    """Turn a caller filter mapping into ``filter[key]=value`` query parameters.

    Keys outside the endpoint's allow-list are dropped with a warning.
    ``None`` values are dropped, booleans become ``true``/``false`` and
    sequences are comma-joined. Keys may be given bare (``organization_id``)
    or already bracketed (``filter[organization_id]``).

    Example::

        >>> normalize_filters(ENDPOINTS["contacts"], {"organization_id": 7, "foo": 1})
        {'filter[organization_id]': '7'}
    """
    if not filters:
        return {}

    output = get_output()
    params: dict[str, str] = {}
    for raw_key, value in filters.items():
        key = raw_key
        if key.startswith("filter[") and key.endswith("]"):
            key = key[len("filter["):-1]
        if value is None:
            continue
        if endpoint.allowed_filters is not None and key not in endpoint.allowed_filters:
            output.warning(f"Dropping unsupported filter '{key}' for {endpoint.path}")
            continue
        params[f"filter[{key}]"] = _format_value(value)
    return params
