"""Maps Avalara identity data onto the governance host's resource graph.

Architecture:
- connector.py: Facade (validate, metadata, resource syncers)
- users.py / roles.py: Resource syncers
- models.py: Resource, entitlement and grant types
- resource_types.py: Resource type definitions
- sync.py: Host-style paging loop over every syncer
"""
from .base import ResourceSyncer, PAGE_SIZE
from .connector import AvalaraConnector, ConnectorMetadata
from .roles import RoleBuilder
from .sync import SyncResult, run_sync
from .users import UserBuilder

__all__ = [
    "AvalaraConnector",
    "ConnectorMetadata",
    "ResourceSyncer",
    "PAGE_SIZE",
    "RoleBuilder",
    "UserBuilder",
    "SyncResult",
    "run_sync",
]
