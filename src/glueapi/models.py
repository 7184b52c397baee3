"""Canonical Pydantic models shared across all glueapi modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`AuthConfig`, :class:`RequestConfig`, :class:`OutputConfig`,
    :class:`GlobalConfig`, and :class:`Profile`.

**Wire models** -- produced and consumed by the HTTP client and fetch engine:
    :class:`ApiKeyCredential`, :class:`PasswordCredential`,
    :class:`Termination`, :class:`EndpointSpec`, :class:`PageRequest`,
    :class:`PageResponse`, and :class:`MutationMethod`.

Records themselves are not modelled: the API's ``{id, type, attributes,
relationships}`` objects are passed through as plain dicts (:data:`Record`).
"""

from __future__ import annotations

import enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

JSONAPI_CONTENT_TYPE = "application/vnd.api+json"

Record = dict[str, Any]
"""An opaque JSON:API resource object. Only ``id`` is ever interpreted."""


# --- Auth Config ---


class AuthConfig(BaseModel):
    """Authentication configuration embedded in a :class:`Profile`.

    The ``type`` field selects the strategy: ``api_key`` sends a static key in
    the ``x-api-key`` header, ``password`` exchanges a username and password
    for a short-lived bearer token. Credential fields hold *source
    descriptors* (``env:VAR``, ``file:/path``, ``prompt``), never secrets.

    Example::

        AuthConfig(type="api_key", source="env:GLUE_API_KEY")
        AuthConfig(
            type="password",
            username_source="env:GLUE_USER",
            password_source="env:GLUE_PASSWORD",
        )
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(description="Auth type: api_key or password")
    source: str = Field(
        default="prompt",
        description="Credential source for the API key: env:VAR, file:/path, prompt",
    )
    # Password exchange
    username_source: Optional[str] = None
    password_source: Optional[str] = None
    otp_source: Optional[str] = Field(
        default=None, description="Optional one-time password source for the login step"
    )
    login_url: Optional[str] = Field(
        default=None,
        description="Refresh-token endpoint (default: <base_url>/login?generate_token=true)",
    )
    token_url: Optional[str] = Field(
        default=None, description="Access-token endpoint (default: <base_url>/jwt/token)"
    )


class RequestConfig(BaseModel):
    """HTTP and retry settings applied to every API call in a profile."""

    timeout: int = Field(default=60, description="Transport timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_retries: int = Field(
        default=3, ge=0, description="Retries for transport-level failures"
    )
    page_size: int = Field(default=1000, ge=1, description="Initial page size for list fetches")
    rate_limit_attempts: int = Field(
        default=10, ge=1, description="Total attempts per request while rate limited"
    )
    rate_limit_backoff: float = Field(
        default=60.0, ge=0, description="Seconds to sleep after each HTTP 429"
    )
    timeout_attempts: int = Field(
        default=5, ge=1, description="Total attempts per request while the server times out"
    )
    timeout_backoff: float = Field(
        default=5.0, ge=0, description="Seconds to sleep after each server timeout"
    )


class OutputConfig(BaseModel):
    """Record format used when neither ``--json`` nor ``--plain`` is given."""

    format: Literal["auto", "json", "plain", "rich"] = "auto"


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/glueapi/config.json``.

    Fields here have the lowest precedence and can be overridden by
    environment variables or CLI flags. See
    :func:`~glueapi.config.resolve_config` for the full precedence chain.
    """

    default_profile: Optional[str] = None
    auto_select_single_profile: bool = True
    output: OutputConfig = Field(default_factory=OutputConfig)


class Profile(BaseModel):
    """Per-tenant profile stored as JSON under the ``profiles/`` config directory.

    See Also:
        :func:`~glueapi.config.load_profile`: Deserialise a profile by name.
        :func:`~glueapi.config.save_profile`: Persist a profile to disk.
    """

    model_config = ConfigDict(extra="allow")

    name: str
    base_url: str = Field(description="API root, e.g. https://api.itglue.com")
    auth: Optional[AuthConfig] = None
    request: RequestConfig = Field(default_factory=RequestConfig)


# --- Credentials ---


class ApiKeyCredential(BaseModel):
    """A static API key."""

    api_key: str


class PasswordCredential(BaseModel):
    """A username/password pair, exchanged for a bearer token."""

    username: str
    password: str
    otp: Optional[str] = None


Credential = Union[ApiKeyCredential, PasswordCredential]


# --- Endpoints and pages ---


class Termination(str, enum.Enum):
    """Which signal ends the page loop for an endpoint.

    ``TOTAL_COUNT`` stops once as many records as ``meta.total-count`` have
    been retrieved; ``NEXT_PAGE`` stops when ``meta.next-page`` is null.
    """

    TOTAL_COUNT = "total_count"
    NEXT_PAGE = "next_page"


class EndpointSpec(BaseModel):
    """Static description of a list endpoint.

    ``allowed_filters`` is the server-documented set of ``filter[...]`` keys.
    ``None`` means the endpoint is not in the built-in table and filters are
    passed through untouched.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    resource_type: str
    allowed_filters: Optional[frozenset[str]] = None
    termination: Termination = Termination.TOTAL_COUNT


class PageRequest(BaseModel):
    """One page request. Built fresh per iteration and never mutated."""

    model_config = ConfigDict(frozen=True)

    page_number: int = Field(ge=1)
    page_size: int = Field(ge=1)
    filters: dict[str, str] = Field(default_factory=dict)
    sort: Optional[str] = None

    def to_params(self) -> dict[str, Any]:
        """Return the query string as JSON:API bracket parameters."""
        params: dict[str, Any] = {
            "page[size]": self.page_size,
            "page[number]": self.page_number,
        }
        params.update(self.filters)
        if self.sort:
            params["sort"] = self.sort
        return params


class PageResponse(BaseModel):
    """A parsed ``{data: [...], meta: {...}}`` list envelope."""

    items: list[Record] = Field(default_factory=list)
    total_count: Optional[int] = None
    total_pages: Optional[int] = None
    next_page: Optional[int] = None


class MutationMethod(str, enum.Enum):
    """Write operations supported by :func:`~glueapi.fetch.mutate.mutate`."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
