"""Resource / entitlement / grant model consumed by the governance host.

Usage:
    user = new_user_resource("alice", USER, 42, UserTrait(profile={...}))
    role = new_role_resource("AccountAdmin", ROLE, "3", RoleTrait(profile={...}))
    ent = new_assignment_entitlement(role, "member", grantable_to=[USER])
    grant = new_grant(role, "member", user.id)
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class Trait(str, Enum):
    USER = "user"
    ROLE = "role"


class UserStatus(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"


class EntitlementPurpose(str, Enum):
    ASSIGNMENT = "assignment"


@dataclass(frozen=True)
class ResourceType:
    id: str
    display_name: str
    description: str = ""
    traits: Tuple[Trait, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "description": self.description,
            "traits": [t.value for t in self.traits],
        }


@dataclass(frozen=True)
class ResourceId:
    resource_type: str
    resource: str

    def to_dict(self) -> Dict[str, str]:
        return {"resource_type": self.resource_type, "resource": self.resource}


@dataclass
class UserTrait:
    profile: Dict[str, Any] = field(default_factory=dict)
    status: UserStatus = UserStatus.ENABLED
    login: str = ""
    email: str = ""
    email_is_primary: bool = False

    def to_dict(self) -> Dict[str, Any]:
        emails = [{"address": self.email, "is_primary": self.email_is_primary}] if self.email else []
        return {
            "profile": dict(self.profile),
            "status": self.status.value,
            "login": self.login,
            "emails": emails,
        }


@dataclass
class RoleTrait:
    profile: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"profile": dict(self.profile)}


@dataclass
class Resource:
    id: ResourceId
    display_name: str
    parent_resource_id: Optional[ResourceId] = None
    user_trait: Optional[UserTrait] = None
    role_trait: Optional[RoleTrait] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id.to_dict(),
            "display_name": self.display_name,
            "parent_resource_id": self.parent_resource_id.to_dict() if self.parent_resource_id else None,
        }
        if self.user_trait is not None:
            data["user_trait"] = self.user_trait.to_dict()
        if self.role_trait is not None:
            data["role_trait"] = self.role_trait.to_dict()
        return data


@dataclass
class Entitlement:
    id: str
    resource: Resource
    slug: str
    display_name: str = ""
    description: str = ""
    purpose: EntitlementPurpose = EntitlementPurpose.ASSIGNMENT
    grantable_to: List[ResourceType] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "resource": self.resource.id.to_dict(),
            "slug": self.slug,
            "display_name": self.display_name,
            "description": self.description,
            "purpose": self.purpose.value,
            "grantable_to": [rt.id for rt in self.grantable_to],
        }


@dataclass
class Grant:
    id: str
    entitlement: Entitlement
    principal: ResourceId

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "entitlement": self.entitlement.id,
            "principal": self.principal.to_dict(),
        }


def new_resource_id(resource_type: ResourceType, object_id: Union[str, int]) -> ResourceId:
    """Build a resource id; numeric upstream ids are stringified."""
    return ResourceId(resource_type=resource_type.id, resource=str(object_id))


def new_user_resource(
    name: str,
    resource_type: ResourceType,
    object_id: Union[str, int],
    trait: UserTrait,
    parent_resource_id: Optional[ResourceId] = None,
) -> Resource:
    return Resource(
        id=new_resource_id(resource_type, object_id),
        display_name=name,
        parent_resource_id=parent_resource_id,
        user_trait=trait,
    )


def new_role_resource(
    name: str,
    resource_type: ResourceType,
    object_id: Union[str, int],
    trait: RoleTrait,
    parent_resource_id: Optional[ResourceId] = None,
) -> Resource:
    return Resource(
        id=new_resource_id(resource_type, object_id),
        display_name=name,
        parent_resource_id=parent_resource_id,
        role_trait=trait,
    )


def entitlement_id(resource: Resource, slug: str) -> str:
    return f"{resource.id.resource_type}:{resource.id.resource}:{slug}"


def new_assignment_entitlement(
    resource: Resource,
    slug: str,
    grantable_to: Optional[List[ResourceType]] = None,
    display_name: str = "",
    description: str = "",
) -> Entitlement:
    return Entitlement(
        id=entitlement_id(resource, slug),
        resource=resource,
        slug=slug,
        display_name=display_name or slug,
        description=description,
        purpose=EntitlementPurpose.ASSIGNMENT,
        grantable_to=list(grantable_to or []),
    )


def new_grant(resource: Resource, slug: str, principal: ResourceId) -> Grant:
    """Record that ``principal`` holds the ``slug`` entitlement of ``resource``."""
    entitlement = Entitlement(id=entitlement_id(resource, slug), resource=resource, slug=slug)
    grant_id = f"{entitlement.id}:{principal.resource_type}:{principal.resource}"
    return Grant(id=grant_id, entitlement=entitlement, principal=principal)


def get_role_trait(resource: Resource) -> RoleTrait:
    """Return the role trait or raise ValueError if the resource is not a role."""
    if resource.role_trait is None:
        raise ValueError(f"resource {resource.id.resource_type}:{resource.id.resource} has no role trait")
    return resource.role_trait


def get_profile_string_value(profile: Dict[str, Any], key: str) -> Optional[str]:
    value = profile.get(key)
    if isinstance(value, str):
        return value
    return None
