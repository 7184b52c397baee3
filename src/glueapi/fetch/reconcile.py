"""Post-fetch reconciliation of retrieved records against the server's total."""

from __future__ import annotations

import enum
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional, Sequence

from glueapi.exceptions import ReconciliationMismatch
from glueapi.models import Record
from glueapi.output import get_output


class OutcomeKind(str, enum.Enum):
    COMPLETE = "complete"
    OVERRUN = "overrun"
    UNDERCOUNT = "undercount"


@dataclass(frozen=True)
class Outcome:
    """Result of :func:`reconcile`.

    ``duplicate_ids`` lists record ids that appeared more than once, which
    usually explains an overrun (records shifting between pages mid-fetch).
    """

    kind: OutcomeKind
    actual: int
    expected: Optional[int]
    duplicate_ids: tuple[str, ...] = field(default=())

    @property
    def is_complete(self) -> bool:
        return self.kind == OutcomeKind.COMPLETE


def reconcile(records: Sequence[Record], total: Optional[int]) -> Outcome:
    """Compare the collection with the server-reported total.

    A missing total (the endpoint reports none) counts as complete.
    """
    actual = len(records)
    counts = Counter(str(r["id"]) for r in records if isinstance(r, dict) and "id" in r)
    duplicates = tuple(sorted(rid for rid, n in counts.items() if n > 1))

    if total is None or actual == total:
        kind = OutcomeKind.COMPLETE
    elif actual > total:
        kind = OutcomeKind.OVERRUN
    else:
        kind = OutcomeKind.UNDERCOUNT
    return Outcome(kind=kind, actual=actual, expected=total, duplicate_ids=duplicates)


def ensure_complete(outcome: Outcome, endpoint: str) -> None:
    """Raise :class:`ReconciliationMismatch` unless *outcome* is complete."""
    if outcome.is_complete or outcome.expected is None:
        return

    message = (
        f"{endpoint}: retrieved {outcome.actual} records but the server reported "
        f"{outcome.expected} ({outcome.kind.value})"
    )
    if outcome.duplicate_ids:
        shown = ", ".join(outcome.duplicate_ids[:10])
        message += f"; duplicate ids: {shown}"
    get_output().error(message)
    raise ReconciliationMismatch(
        message,
        actual=outcome.actual,
        expected=outcome.expected,
        kind=outcome.kind.value,
    )
