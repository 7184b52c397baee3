"""API key authentication plugin.

Implements the ``api_key`` auth type, which sends a static key in the
``x-api-key`` header of every request. No network call is made.

See Also:
    :class:`~glueapi.plugins.api_key.plugin.APIKeyAuthPlugin`
"""

from glueapi.plugins.api_key.plugin import APIKeyAuthPlugin

__all__ = ["APIKeyAuthPlugin"]
