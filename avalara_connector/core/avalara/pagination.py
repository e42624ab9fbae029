"""OData-style paging for AvaTax list endpoints.

A listing is either a fresh query (``$top``/``$skip``/``$orderby``/``$filter``)
or a continuation that replays the ``@nextLink`` URL issued by the server.
The two modes never mix: once a next link is present it wins.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Dict, Optional


@dataclass(frozen=True)
class PaginationOptions:
    """Query options for a single page request."""
    top: int = 0
    skip: int = 0
    order_by: str = ""
    filter: str = ""
    next_link: str = ""

    @property
    def is_continuation(self) -> bool:
        return bool(self.next_link)

    def to_query_params(self) -> Dict[str, str]:
        """Encode the fresh-query fields, omitting zero and empty values.

        Returns an empty dict for continuations; the link already carries
        its own query string.
        """
        if self.is_continuation:
            return {}
        params: Dict[str, str] = {}
        if self.top > 0:
            params["$top"] = str(self.top)
        if self.skip > 0:
            params["$skip"] = str(self.skip)
        if self.order_by:
            params["$orderby"] = self.order_by
        if self.filter:
            params["$filter"] = self.filter
        return params


class PaginatedResponse(ABC):
    """Behaviour shared by every list envelope: exposing the next page link."""

    @abstractmethod
    def get_next_link(self) -> str:
        """Return the server-issued continuation URL, or "" on the last page."""


def update_pagination_options(
    options: Optional[PaginationOptions], response: PaginatedResponse
) -> PaginationOptions:
    """Return the options for the page after ``response``.

    The returned options carry the response's next link (possibly empty,
    which signals the end of the listing).
    """
    if options is None:
        options = PaginationOptions()
    return replace(options, next_link=response.get_next_link())
