"""Abstract base class for authentication plugins.

This module defines the two foundational types of the auth subsystem:

- :class:`AuthResult` -- a plain container for the HTTP headers an auth
  plugin produces.
- :class:`AuthPlugin` -- the abstract base class that every authentication
  strategy extends.

Authentication is split in two steps so that callers holding a credential
in memory can skip the configuration layer entirely:

1. :meth:`~AuthPlugin.resolve_credential` turns the profile's source
   descriptors into a :data:`~glueapi.models.Credential`.
2. :meth:`~AuthPlugin.exchange` turns that credential into request headers,
   calling the network when the strategy needs a token.

See Also:
    :mod:`glueapi.auth.manager` for plugin registration and dispatch.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from glueapi.models import AuthConfig, Credential


class AuthResult:
    """Container for the headers to inject into every API request.

    Args:
        headers: HTTP headers to add (e.g. ``{"authorization": "Bearer ..."}``).

    Example::

        result = AuthResult(headers={"x-api-key": "k"})
        assert result.headers["x-api-key"] == "k"
    """

    def __init__(self, headers: dict[str, str] | None = None):
        self.headers = headers or {}

    def __repr__(self) -> str:
        # Header values are secrets.
        return f"AuthResult(headers={sorted(self.headers)})"


class AuthPlugin(ABC):
    """Abstract base class for authentication plugins.

    Every concrete strategy provides:

    1. An :attr:`auth_type` property returning its identifier, matched
       against ``AuthConfig.type``.
    2. A :attr:`credential_type` naming the credential model it accepts.
    3. :meth:`resolve_credential` and :meth:`exchange` implementations.
    """

    credential_type: type

    @property
    @abstractmethod
    def auth_type(self) -> str:
        """Return the unique auth type identifier (``"api_key"``, ``"password"``)."""
        ...

    @abstractmethod
    def resolve_credential(self, auth_config: AuthConfig) -> Credential:
        """Read the credential described by *auth_config*.

        Raises:
            ConfigError: If a credential source cannot be resolved.
            AuthError: If required fields are missing.
        """
        ...

    @abstractmethod
    def exchange(
        self,
        credential: Credential,
        base_url: str,
        auth_config: AuthConfig | None = None,
    ) -> AuthResult:
        """Produce request headers from *credential*.

        Raises:
            AuthError: If the server rejects the credential. Never retried.
        """
        ...

    def authenticate(self, auth_config: AuthConfig, base_url: str) -> AuthResult:
        """Resolve the configured credential and exchange it for headers."""
        credential = self.resolve_credential(auth_config)
        return self.exchange(credential, base_url, auth_config)

    def validate_config(self, auth_config: AuthConfig) -> list[str]:
        """Return human-readable configuration problems; empty means valid."""
        return []
