"""Immutable page-loop state for the paginated fetch engine.

Each iteration of :class:`~glueapi.fetch.engine.FetchEngine` derives a new
:class:`FetchState` instead of mutating counters in place, which keeps the
page-size degradation and resume arithmetic testable on its own.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from glueapi.exceptions import PageSizeExhausted
from glueapi.models import PageRequest, PageResponse, Termination


@dataclass(frozen=True)
class FetchState:
    """Where the page loop stands.

    Attributes:
        page_size: Records requested per page; halves on repeated timeouts.
        page_number: 1-based page to request next.
        retrieved: Records appended to the collection so far.
        total: Latest ``total-count`` reported by the server, if any.
        skip: Leading records of the next page that were already retrieved.
            Non-zero only right after a degradation whose new page size does
            not divide ``retrieved``.
        has_next: Whether the last page advertised a ``next-page``.
        degradations: How many times the page size has been halved.
    """

    page_size: int
    page_number: int = 1
    retrieved: int = 0
    total: Optional[int] = None
    skip: int = 0
    has_next: bool = True
    degradations: int = 0

    def to_request(
        self,
        filters: dict[str, str],
        sort: Optional[str] = None,
    ) -> PageRequest:
        return PageRequest(
            page_number=self.page_number,
            page_size=self.page_size,
            filters=filters,
            sort=sort,
        )

    def advance(
        self,
        page: PageResponse,
        appended: int,
        follow_cursor: bool = False,
    ) -> FetchState:
        """Return the state after *appended* records of *page* were kept.

        With *follow_cursor* the next page number is taken from
        ``meta.next-page`` when the server sends one.
        """
        next_number = self.page_number + 1
        if follow_cursor and page.next_page is not None:
            next_number = page.next_page
        return replace(
            self,
            page_number=next_number,
            retrieved=self.retrieved + appended,
            total=page.total_count if page.total_count is not None else self.total,
            skip=0,
            has_next=page.next_page is not None,
        )

    def degrade(self) -> FetchState:
        """Halve the page size and reposition so nothing is skipped or repeated.

        The new page number is ``retrieved // page_size + 1``; records of
        that page which precede ``retrieved`` are marked in :attr:`skip`.

        Raises:
            PageSizeExhausted: If the page size would drop below 1.
        """
        new_size = self.page_size // 2
        if new_size < 1:
            raise PageSizeExhausted(
                f"Server keeps timing out at page size {self.page_size}; "
                "cannot reduce the page size any further"
            )
        page_number = self.retrieved // new_size + 1
        return replace(
            self,
            page_size=new_size,
            page_number=page_number,
            skip=self.retrieved - (page_number - 1) * new_size,
            degradations=self.degradations + 1,
        )

    def is_complete(self, termination: Termination) -> bool:
        """Whether the loop should stop under the endpoint's termination rule."""
        if termination == Termination.NEXT_PAGE:
            return not self.has_next
        return self.total is not None and self.retrieved >= self.total
