"""glueapi -- resilient client for a JSON:API IT-documentation REST API.

The package turns a single "list resource X" call into a complete, ordered
collection of records, riding out HTTP 429 rate limiting, server-side
timeouts (by degrading the page size) and inconsistent total counts.

Typical usage::

    from glueapi.auth import create_default_manager
    from glueapi.client import SyncClient
    from glueapi.fetch import fetch_all

    with SyncClient(profile, auth_manager=create_default_manager()) as client:
        orgs = fetch_all(client, "organizations", {"name": "Acme"})

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: XDG-aware profile storage and credential resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stderr diagnostics sink with Rich support.
    fetch: Paginated fetch engine, single fetch, mutations, reconciliation.
"""

__version__ = "0.1.0"
