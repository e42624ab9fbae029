"""Avalara security roles as governance role resources.

Avalara does not expose role membership directly. A user belongs to a role
when the user's ``securityRoleId`` equals the role's description, so grants
are derived by paging through every user for each role.
"""
from __future__ import annotations
import logging
from typing import List, Optional, Tuple

from ..avalara.exceptions import AvalaraError, SyncError
from ..avalara.models import SecurityRoleModel
from .base import ResourceSyncer, page_options
from .models import (
    Entitlement,
    Grant,
    Resource,
    ResourceId,
    RoleTrait,
    get_profile_string_value,
    get_role_trait,
    new_assignment_entitlement,
    new_grant,
    new_resource_id,
    new_role_resource,
)
from . import resource_types

logger = logging.getLogger(__name__)


def role_resource(role: SecurityRoleModel, parent_resource_id: Optional[ResourceId] = None) -> Resource:
    trait = RoleTrait(profile={"id": str(role.id), "description": role.description})
    return new_role_resource(
        role.description,
        resource_types.ROLE,
        role.id,
        trait,
        parent_resource_id=parent_resource_id,
    )


class RoleBuilder(ResourceSyncer):
    """Syncs security roles and their derived user memberships."""

    resource_type = resource_types.ROLE

    def list(
        self, parent_resource_id: Optional[ResourceId], page_token: Optional[str]
    ) -> Tuple[List[Resource], str]:
        try:
            roles, next_options = self.client.get_user_roles(page_options(page_token))
        except AvalaraError as exc:
            raise SyncError(self.resource_type.id, f"failed to list roles: {exc}") from exc

        resources = [role_resource(role, parent_resource_id) for role in roles.value]
        logger.info("Mapped %d role(s); more pages: %s", len(resources), bool(next_options.next_link))
        return resources, next_options.next_link

    def entitlements(self, resource: Resource, page_token: Optional[str]) -> Tuple[List[Entitlement], str]:
        entitlement = new_assignment_entitlement(
            resource,
            resource_types.ROLE_MEMBER_ENTITLEMENT,
            grantable_to=[resource_types.USER],
            display_name=f"{resource.display_name} Role",
            description=f"Avalara {resource.display_name} role assignment",
        )
        return [entitlement], ""

    def grants(self, resource: Resource, page_token: Optional[str]) -> Tuple[List[Grant], str]:
        """Return one page of users holding this role.

        The page token walks the user listing, not a role listing.
        """
        try:
            trait = get_role_trait(resource)
        except ValueError as exc:
            raise SyncError(self.resource_type.id, f"failed to get role trait: {exc}") from exc

        role_description = get_profile_string_value(trait.profile, "description")
        if role_description is None:
            raise SyncError(self.resource_type.id, "failed to get role description from profile")

        try:
            users, next_options = self.client.get_users(page_options(page_token))
        except AvalaraError as exc:
            raise SyncError(self.resource_type.id, f"failed to list users: {exc}") from exc

        grants = [
            new_grant(resource, resource_types.ROLE_MEMBER_ENTITLEMENT, new_resource_id(resource_types.USER, user.id))
            for user in users.value
            if user.security_role_id == role_description
        ]
        logger.debug("Role %r: %d grant(s) on this page", role_description, len(grants))
        return grants, next_options.next_link
