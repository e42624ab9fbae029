"""Resource types exposed by the Avalara connector."""
from .models import ResourceType, Trait

USER = ResourceType(
    id="user",
    display_name="User",
    traits=(Trait.USER,),
)

ROLE = ResourceType(
    id="role",
    display_name="Role",
    description="Represents an Avalara security role",
    traits=(Trait.ROLE,),
)

ROLE_MEMBER_ENTITLEMENT = "member"
