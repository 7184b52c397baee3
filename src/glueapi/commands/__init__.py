"""Built-in CLI sub-commands for glueapi.

* :mod:`~glueapi.commands.records` -- ``list``, ``get``, ``create``,
  ``update`` and ``delete``, registered directly on the root app.
* :mod:`~glueapi.commands.config` -- the ``config`` group for creating,
  inspecting and selecting tenant profiles.

The root callback stores the global flags as a :class:`CliOptions` in
``ctx.obj``; commands read them back with :func:`cli_options`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer


@dataclass(frozen=True)
class CliOptions:
    profile: Optional[str] = None
    base_url: Optional[str] = None
    force: bool = False


def cli_options(ctx: typer.Context) -> CliOptions:
    return ctx.obj if isinstance(ctx.obj, CliOptions) else CliOptions()
