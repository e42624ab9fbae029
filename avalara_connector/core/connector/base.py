"""Contract between the connector and the governance host.

Every method returns one page as ``(items, next_page_token)``. The host
keeps calling with the returned token until it comes back empty.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from ..avalara.client import AvalaraClient
from ..avalara.pagination import PaginationOptions
from .models import Entitlement, Grant, Resource, ResourceId, ResourceType

PAGE_SIZE = 100


class ResourceSyncer(ABC):
    """Lists one resource type and its entitlements and grants."""

    resource_type: ResourceType

    def __init__(self, client: AvalaraClient):
        self.client = client

    @abstractmethod
    def list(
        self, parent_resource_id: Optional[ResourceId], page_token: Optional[str]
    ) -> Tuple[List[Resource], str]:
        """Return one page of resources."""

    @abstractmethod
    def entitlements(self, resource: Resource, page_token: Optional[str]) -> Tuple[List[Entitlement], str]:
        """Return one page of entitlements offered by ``resource``."""

    @abstractmethod
    def grants(self, resource: Resource, page_token: Optional[str]) -> Tuple[List[Grant], str]:
        """Return one page of grants of ``resource``'s entitlements."""


def page_options(page_token: Optional[str], page_size: int = PAGE_SIZE) -> PaginationOptions:
    """First page when the token is empty, otherwise a continuation of it."""
    if page_token:
        return PaginationOptions(top=page_size, next_link=page_token)
    return PaginationOptions(top=page_size)
