"""Drive a full sync the way the governance host does.

For every resource syncer: page through ``list``, then page through
``entitlements`` and ``grants`` of each listed resource. Paging stops when a
call returns an empty token.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from ..avalara.exceptions import SyncError
from .connector import AvalaraConnector
from .models import Entitlement, Grant, Resource

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class SyncResult:
    resources: List[Resource] = field(default_factory=list)
    entitlements: List[Entitlement] = field(default_factory=list)
    grants: List[Grant] = field(default_factory=list)

    def summary(self) -> Dict[str, int]:
        return {
            "resources": len(self.resources),
            "entitlements": len(self.entitlements),
            "grants": len(self.grants),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resources": [r.to_dict() for r in self.resources],
            "entitlements": [e.to_dict() for e in self.entitlements],
            "grants": [g.to_dict() for g in self.grants],
        }


def collect_pages(
    fetch: Callable[[Optional[str]], Tuple[List[T], str]], resource_type: str
) -> List[T]:
    """Call ``fetch`` with each returned token until the token is empty."""
    items: List[T] = []
    token: Optional[str] = None
    seen = set()
    while True:
        page, next_token = fetch(token)
        items.extend(page)
        if not next_token:
            return items
        if next_token in seen:
            raise SyncError(resource_type, f"next page token repeated: {next_token}")
        seen.add(next_token)
        token = next_token


def run_sync(connector: AvalaraConnector) -> SyncResult:
    result = SyncResult()
    for syncer in connector.resource_syncers():
        rt = syncer.resource_type.id
        resources = collect_pages(lambda token: syncer.list(None, token), rt)
        logger.info("Synced %d %s resource(s)", len(resources), rt)
        result.resources.extend(resources)

        for resource in resources:
            result.entitlements.extend(
                collect_pages(lambda token: syncer.entitlements(resource, token), rt)
            )
            result.grants.extend(
                collect_pages(lambda token: syncer.grants(resource, token), rt)
            )

    logger.info("Sync complete: %s", result.summary())
    return result
