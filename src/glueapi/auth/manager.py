"""Auth manager -- registry and dispatcher for auth plugins.

The :class:`AuthManager` maps auth-type strings (``"api_key"``,
``"password"``) to :class:`~glueapi.auth.base.AuthPlugin` instances and
exposes two entry points:

- :meth:`AuthManager.authenticate` for a stored
  :class:`~glueapi.models.Profile`, used by the HTTP client.
- :meth:`AuthManager.authenticate_credential` for a credential the caller
  already holds in memory.

For most use cases, call :func:`create_default_manager`.
"""

from __future__ import annotations

from glueapi.auth.base import AuthPlugin, AuthResult
from glueapi.exceptions import AuthError
from glueapi.models import AuthConfig, Credential, Profile
from glueapi.output import get_output


def _auth_failure(message: str) -> AuthError:
    get_output().error(message)
    return AuthError(message)


class AuthManager:
    """Registry and dispatcher for authentication plugins.

    Example::

        from glueapi.auth import AuthManager
        from glueapi.plugins.api_key import APIKeyAuthPlugin

        manager = AuthManager()
        manager.register(APIKeyAuthPlugin())
        result = manager.authenticate(profile)
    """

    def __init__(self) -> None:
        self._plugins: dict[str, AuthPlugin] = {}

    def register(self, plugin: AuthPlugin) -> None:
        """Register an auth plugin, replacing any plugin of the same type."""
        self._plugins[plugin.auth_type] = plugin

    def get_plugin(self, auth_type: str) -> AuthPlugin:
        """Retrieve a registered plugin by its auth type identifier.

        Raises:
            AuthError: If no plugin is registered for *auth_type*.
        """
        plugin = self._plugins.get(auth_type)
        if plugin is None:
            available = ", ".join(self.list_types()) or "(none)"
            raise _auth_failure(
                f"No auth plugin registered for type '{auth_type}'. "
                f"Available types: {available}"
            )
        return plugin

    def authenticate(self, profile: Profile) -> AuthResult:
        """Authenticate using the profile's auth configuration.

        Returns:
            An :class:`~glueapi.auth.base.AuthResult`; empty when the profile
            has no auth section.

        Raises:
            AuthError: If the auth type is unknown, the configuration is
                invalid, or the plugin's exchange fails.
        """
        if profile.auth is None:
            return AuthResult()
        plugin = self.get_plugin(profile.auth.type)
        problems = plugin.validate_config(profile.auth)
        if problems:
            raise _auth_failure("; ".join(problems))
        get_output().debug(f"Authenticating profile '{profile.name}' ({plugin.auth_type})")
        return plugin.authenticate(profile.auth, profile.base_url)

    def authenticate_credential(
        self,
        credential: Credential,
        base_url: str,
        auth_config: AuthConfig | None = None,
    ) -> AuthResult:
        """Exchange an in-memory credential for request headers.

        The plugin is chosen by the credential's model class.

        Raises:
            AuthError: If no plugin accepts this credential type, or the
                exchange fails.
        """
        for plugin in self._plugins.values():
            if isinstance(credential, plugin.credential_type):
                return plugin.exchange(credential, base_url, auth_config)
        raise _auth_failure(
            f"No auth plugin accepts credentials of type {type(credential).__name__}"
        )

    def list_types(self) -> list[str]:
        """Return the sorted identifiers of all registered auth types."""
        return sorted(self._plugins.keys())


def create_default_manager() -> AuthManager:
    """Create an :class:`AuthManager` with the ``api_key`` and ``password`` plugins."""
    from glueapi.plugins.api_key import APIKeyAuthPlugin
    from glueapi.plugins.password import PasswordAuthPlugin

    manager = AuthManager()
    manager.register(APIKeyAuthPlugin())
    manager.register(PasswordAuthPlugin())
    return manager
