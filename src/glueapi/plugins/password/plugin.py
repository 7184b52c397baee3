"""Username/password auth plugin with a refresh-token -> access-token exchange.

The exchange has two steps, each of which fails terminally:

1. ``POST login_url`` with ``{"user": {"email", "password"}}`` returns a
   refresh token. Any non-2xx response, or a body without a token, raises
   :class:`~glueapi.exceptions.AuthError` with reason
   ``REFRESH_TOKEN_DENIED``.
2. ``GET token_url?refresh_token=...`` returns the access token. Failures
   raise ``ACCESS_TOKEN_DENIED``.

``login_url`` defaults to ``<base_url>/login?generate_token=true`` and
``token_url`` to ``<base_url>/jwt/token``. Tokens are returned to the caller
in an :class:`~glueapi.auth.base.AuthResult` and never stored.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from glueapi.auth.base import AuthPlugin, AuthResult
from glueapi.config import resolve_credential
from glueapi.exceptions import AuthError, AuthFailure
from glueapi.models import JSONAPI_CONTENT_TYPE, AuthConfig, Credential, PasswordCredential
from glueapi.output import get_output

_EXCHANGE_TIMEOUT = 30.0


def _extract_token(body: Any, *keys: str) -> Optional[str]:
    """Return the first non-empty string under *keys*, looking inside ``data`` too."""
    candidates = [body]
    if isinstance(body, dict) and isinstance(body.get("data"), dict):
        candidates.append(body["data"])
    for candidate in candidates:
        if not isinstance(candidate, dict):
            continue
        for key in keys:
            value = candidate.get(key)
            if isinstance(value, str) and value:
                return value
    return None


class PasswordAuthPlugin(AuthPlugin):
    """Authenticate by exchanging username/password for a bearer token."""

    credential_type = PasswordCredential

    @property
    def auth_type(self) -> str:
        return "password"

    def resolve_credential(self, auth_config: AuthConfig) -> PasswordCredential:
        if not auth_config.username_source or not auth_config.password_source:
            message = "password auth requires 'username_source' and 'password_source'"
            get_output().error(message)
            raise AuthError(message)
        otp = None
        if auth_config.otp_source:
            otp = resolve_credential(auth_config.otp_source, "one-time password")
        return PasswordCredential(
            username=resolve_credential(auth_config.username_source, "username"),
            password=resolve_credential(auth_config.password_source, "password"),
            otp=otp,
        )

    def exchange(
        self,
        credential: Credential,
        base_url: str,
        auth_config: AuthConfig | None = None,
    ) -> AuthResult:
        """Run the two-step exchange and return a bearer header.

        Raises:
            AuthError: With reason ``REFRESH_TOKEN_DENIED`` or
                ``ACCESS_TOKEN_DENIED`` depending on the failing step.
        """
        if not isinstance(credential, PasswordCredential):
            get_output().error("password auth requires a PasswordCredential")
            raise AuthError("password auth requires a PasswordCredential")

        root = base_url.rstrip("/")
        login_url = (auth_config and auth_config.login_url) or f"{root}/login?generate_token=true"
        token_url = (auth_config and auth_config.token_url) or f"{root}/jwt/token"

        refresh_token = self._fetch_refresh_token(credential, login_url)
        access_token = self._fetch_access_token(refresh_token, token_url)
        return AuthResult(
            headers={
                "authorization": f"Bearer {access_token}",
                "content-type": JSONAPI_CONTENT_TYPE,
            }
        )

    def validate_config(self, auth_config: AuthConfig) -> list[str]:
        errors: list[str] = []
        if not auth_config.username_source:
            errors.append("password auth requires 'username_source'")
        if not auth_config.password_source:
            errors.append("password auth requires 'password_source'")
        return errors

    def _fetch_refresh_token(self, credential: PasswordCredential, login_url: str) -> str:
        """Step 1: POST the credentials and return the refresh token."""
        user: dict[str, str] = {
            "email": credential.username,
            "password": credential.password,
        }
        if credential.otp:
            user["otp_attempt"] = credential.otp

        output = get_output()
        output.debug(f"Requesting refresh token from {login_url}")
        try:
            response = httpx.post(
                login_url,
                json={"user": user},
                headers={"Accept": "application/json"},
                timeout=_EXCHANGE_TIMEOUT,
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            output.error(f"Refresh token request denied (HTTP {exc.response.status_code})")
            raise AuthError(
                f"Refresh token request failed with status {exc.response.status_code}",
                reason=AuthFailure.REFRESH_TOKEN_DENIED,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            output.error(f"Refresh token request failed: {exc}")
            raise AuthError(
                f"Refresh token request failed: {exc}",
                reason=AuthFailure.REFRESH_TOKEN_DENIED,
            ) from exc

        token = _extract_token(body, "token", "refresh_token")
        if token is None:
            output.error("Login response did not contain a refresh token")
            raise AuthError(
                "Login response did not contain a refresh token",
                reason=AuthFailure.REFRESH_TOKEN_DENIED,
            )
        return token

    def _fetch_access_token(self, refresh_token: str, token_url: str) -> str:
        """Step 2: trade the refresh token for a bearer access token."""
        output = get_output()
        output.debug(f"Requesting access token from {token_url}")
        try:
            response = httpx.get(
                token_url,
                params={"refresh_token": refresh_token},
                headers={"Accept": "application/json"},
                timeout=_EXCHANGE_TIMEOUT,
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            output.error(f"Access token request denied (HTTP {exc.response.status_code})")
            raise AuthError(
                f"Access token request failed with status {exc.response.status_code}",
                reason=AuthFailure.ACCESS_TOKEN_DENIED,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            output.error(f"Access token request failed: {exc}")
            raise AuthError(
                f"Access token request failed: {exc}",
                reason=AuthFailure.ACCESS_TOKEN_DENIED,
            ) from exc

        token = _extract_token(body, "token", "access_token")
        if token is None:
            output.error("Token response did not contain an access token")
            raise AuthError(
                "Token response did not contain an access token",
                reason=AuthFailure.ACCESS_TOKEN_DENIED,
            )
        return token
