"""API key auth plugin.

Resolves the key from the configured ``source`` (e.g. ``env:GLUE_API_KEY``)
and returns it in the ``x-api-key`` header alongside the JSON:API content
type. The key is never cached or written anywhere.
"""

from __future__ import annotations

from glueapi.auth.base import AuthPlugin, AuthResult
from glueapi.config import resolve_credential
from glueapi.exceptions import AuthError
from glueapi.models import JSONAPI_CONTENT_TYPE, ApiKeyCredential, AuthConfig, Credential
from glueapi.output import get_output


class APIKeyAuthPlugin(AuthPlugin):
    """Authenticate with a static API key in the ``x-api-key`` header."""

    credential_type = ApiKeyCredential

    @property
    def auth_type(self) -> str:
        return "api_key"

    def resolve_credential(self, auth_config: AuthConfig) -> ApiKeyCredential:
        return ApiKeyCredential(api_key=resolve_credential(auth_config.source, "API key"))

    def exchange(
        self,
        credential: Credential,
        base_url: str,
        auth_config: AuthConfig | None = None,
    ) -> AuthResult:
        problem = None
        if not isinstance(credential, ApiKeyCredential):
            problem = "api_key auth requires an ApiKeyCredential"
        elif not credential.api_key:
            problem = "API key is empty"
        if problem is not None:
            get_output().error(problem)
            raise AuthError(problem)
        return AuthResult(
            headers={
                "x-api-key": credential.api_key,
                "content-type": JSONAPI_CONTENT_TYPE,
            }
        )

    def validate_config(self, auth_config: AuthConfig) -> list[str]:
        errors: list[str] = []
        if not auth_config.source:
            errors.append("API key auth requires a 'source' for the key")
        return errors
