"""Username/password authentication plugin.

Implements the ``password`` auth type: a two-step exchange of a username and
password for a refresh token, then of the refresh token for a short-lived
bearer access token.

See Also:
    :class:`~glueapi.plugins.password.plugin.PasswordAuthPlugin`
"""

from glueapi.plugins.password.plugin import PasswordAuthPlugin

__all__ = ["PasswordAuthPlugin"]
