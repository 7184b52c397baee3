"""Built-in authentication plugins.

Each sub-package contributes one :class:`~glueapi.auth.base.AuthPlugin`:

- :mod:`glueapi.plugins.api_key` -- static ``x-api-key`` header.
- :mod:`glueapi.plugins.password` -- username/password exchanged for a
  bearer token via a refresh-token step.
"""
