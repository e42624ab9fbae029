"""Avalara users as governance user resources."""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Tuple

from ..avalara.exceptions import AvalaraError, SyncError
from ..avalara.models import UserModel
from .base import ResourceSyncer, page_options
from .models import (
    Entitlement,
    Grant,
    Resource,
    ResourceId,
    UserStatus,
    UserTrait,
    new_user_resource,
)
from . import resource_types

logger = logging.getLogger(__name__)


def user_profile(user: UserModel) -> Dict[str, Any]:
    return {
        "id": user.id,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "userName": user.user_name,
        "accountId": user.account_id,
        "companyId": user.company_id,
        "securityRoleId": user.security_role_id,
        "isActive": user.is_active,
        "suppressNewUserEmail": user.suppress_new_user_email,
        "isDeleted": user.is_deleted,
    }


def user_resource(user: UserModel, parent_resource_id: Optional[ResourceId] = None) -> Resource:
    """Map an upstream user; status follows ``isActive``."""
    trait = UserTrait(
        profile=user_profile(user),
        status=UserStatus.ENABLED if user.is_active else UserStatus.DISABLED,
        login=user.user_name,
        email=user.email,
        email_is_primary=True,
    )
    return new_user_resource(
        user.user_name,
        resource_types.USER,
        user.id,
        trait,
        parent_resource_id=parent_resource_id,
    )


class UserBuilder(ResourceSyncer):
    """Syncs Avalara users. Users carry no entitlements or grants of their own."""

    resource_type = resource_types.USER

    def list(
        self, parent_resource_id: Optional[ResourceId], page_token: Optional[str]
    ) -> Tuple[List[Resource], str]:
        try:
            resp, next_options = self.client.get_users(page_options(page_token))
        except AvalaraError as exc:
            raise SyncError(self.resource_type.id, f"failed to get users: {exc}") from exc

        users = [user_resource(user, parent_resource_id) for user in resp.value]
        logger.info("Mapped %d user(s); more pages: %s", len(users), bool(next_options.next_link))
        return users, next_options.next_link

    def entitlements(self, resource: Resource, page_token: Optional[str]) -> Tuple[List[Entitlement], str]:
        return [], ""

    def grants(self, resource: Resource, page_token: Optional[str]) -> Tuple[List[Grant], str]:
        return [], ""
