"""Plugin-based authentication for glueapi.

Two strategies are built in: a static API key (``api_key``) and a
username/password exchanged for a short-lived bearer token (``password``).

The main entry points are:

- :class:`AuthPlugin` -- abstract base class for an auth strategy.
- :class:`AuthManager` -- registry that maps auth type strings to plugin
  instances and dispatches authentication for a
  :class:`~glueapi.models.Profile` or a raw credential.
- :func:`create_default_manager` -- factory pre-loaded with the built-in plugins.

Typical usage::

    from glueapi.auth import create_default_manager

    manager = create_default_manager()
    auth_result = manager.authenticate(profile)
    # auth_result.headers is ready to inject into requests.
"""

from glueapi.auth.base import AuthPlugin, AuthResult
from glueapi.auth.manager import AuthManager, create_default_manager

__all__ = [
    "AuthPlugin",
    "AuthResult",
    "AuthManager",
    "create_default_manager",
]
