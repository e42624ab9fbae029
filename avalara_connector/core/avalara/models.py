"""Typed records for AvaTax REST v2 responses.

Each ``from_dict`` accepts the decoded JSON body. Missing keys fall back to
the zero value of the field; keys that are present with the wrong JSON type
raise ``TypeError``, which the client reports as a format error.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Union

from .pagination import PaginatedResponse


def _field(data: Dict[str, Any], key: str, expected: type, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    # bool is a subclass of int; refuse it where a number is expected
    if expected is int and isinstance(value, bool):
        raise TypeError(f"field {key!r}: expected int, got bool")
    if not isinstance(value, expected):
        raise TypeError(f"field {key!r}: expected {expected.__name__}, got {type(value).__name__}")
    return value


def _int(data: Dict[str, Any], key: str) -> int:
    return _field(data, key, int, 0)


def _str(data: Dict[str, Any], key: str) -> str:
    return _field(data, key, str, "")


def _bool(data: Dict[str, Any], key: str) -> bool:
    return _field(data, key, bool, False)


def _object(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise TypeError(f"{what}: expected object, got {type(data).__name__}")
    return data


class AccessLevel(str, Enum):
    """Scope of a user's entitlements."""
    NONE = "None"
    SINGLE_COMPANY = "SingleCompany"
    SINGLE_ACCOUNT = "SingleAccount"
    ALL_ACCOUNTS = "AllAccounts"
    FIRM_MANAGED_ACCOUNTS = "FirmManagedAccounts"


def _access_level(value: str) -> Union[AccessLevel, str]:
    # Levels added upstream after this release are kept as the raw string.
    if not value:
        return AccessLevel.NONE
    try:
        return AccessLevel(value)
    except ValueError:
        return value


@dataclass(frozen=True)
class SecurityRoleModel:
    id: int
    description: str

    @classmethod
    def from_dict(cls, data: Any) -> "SecurityRoleModel":
        data = _object(data, "security role")
        return cls(id=_int(data, "id"), description=_str(data, "description"))


@dataclass(frozen=True)
class UserModel:
    """A user as returned by ``/api/v2/users``."""
    id: int
    account_id: int = 0
    company_id: int = 0
    user_name: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    postal_code: str = ""
    security_role_id: str = ""
    password_status: str = ""
    is_active: bool = False
    suppress_new_user_email: bool = False
    is_deleted: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "UserModel":
        data = _object(data, "user")
        return cls(
            id=_int(data, "id"),
            account_id=_int(data, "accountId"),
            company_id=_int(data, "companyId"),
            user_name=_str(data, "userName"),
            first_name=_str(data, "firstName"),
            last_name=_str(data, "lastName"),
            email=_str(data, "email"),
            postal_code=_str(data, "postalCode"),
            security_role_id=_str(data, "securityRoleId"),
            password_status=_str(data, "passwordStatus"),
            is_active=_bool(data, "isActive"),
            suppress_new_user_email=_bool(data, "suppressNewUserEmail"),
            is_deleted=_bool(data, "isDeleted"),
        )


@dataclass(frozen=True)
class AccountModel:
    id: int
    name: str = ""
    effective_date: str = ""
    account_status_id: str = ""
    account_type_id: str = ""
    is_saml_enabled: bool = False
    is_deleted: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "AccountModel":
        data = _object(data, "account")
        return cls(
            id=_int(data, "id"),
            name=_str(data, "name"),
            effective_date=_str(data, "effectiveDate"),
            account_status_id=_str(data, "accountStatusId"),
            account_type_id=_str(data, "accountTypeId"),
            is_saml_enabled=_bool(data, "isSamlEnabled"),
            is_deleted=_bool(data, "isDeleted"),
        )


@dataclass
class ListResponse(PaginatedResponse):
    """Envelope shared by list endpoints: ``{"@recordsetCount", "value", "@nextLink", "pageKey"}``."""
    recordset_count: int = 0
    value: List[Any] = field(default_factory=list)
    next_link: str = ""
    page_key: str = ""

    item_type: ClassVar[Any] = None

    def get_next_link(self) -> str:
        return self.next_link

    @classmethod
    def parse_item(cls, item: Any) -> Any:
        return cls.item_type.from_dict(item)

    @classmethod
    def from_dict(cls, data: Any):
        data = _object(data, "list response")
        items = data.get("value")
        if items is None:
            items = []
        if not isinstance(items, list):
            raise TypeError(f"field 'value': expected array, got {type(items).__name__}")
        return cls(
            recordset_count=_int(data, "@recordsetCount"),
            value=[cls.parse_item(item) for item in items],
            next_link=_str(data, "@nextLink"),
            page_key=_str(data, "pageKey"),
        )


@dataclass
class SecurityRoleResponse(ListResponse):
    item_type: ClassVar[Any] = SecurityRoleModel


@dataclass
class UserResponse(ListResponse):
    item_type: ClassVar[Any] = UserModel


@dataclass
class AccountResponse(ListResponse):
    item_type: ClassVar[Any] = AccountModel


@dataclass
class PermissionResponse(ListResponse):
    """Permissions are bare names, not objects."""

    @classmethod
    def parse_item(cls, item: Any) -> str:
        if not isinstance(item, str):
            raise TypeError(f"permission: expected string, got {type(item).__name__}")
        return item


@dataclass(frozen=True)
class EntitlementResponse:
    """Entitlements of a single user; not paginated."""
    permissions: List[str] = field(default_factory=list)
    access_level: Union[AccessLevel, str] = AccessLevel.NONE
    companies: List[int] = field(default_factory=list)

    @property
    def access_level_name(self) -> str:
        if isinstance(self.access_level, AccessLevel):
            return self.access_level.value
        return self.access_level

    @classmethod
    def from_dict(cls, data: Any) -> "EntitlementResponse":
        data = _object(data, "entitlements")
        permissions = _field(data, "permissions", list, [])
        companies = _field(data, "companies", list, [])
        if not all(isinstance(p, str) for p in permissions):
            raise TypeError("field 'permissions': expected array of strings")
        if not all(isinstance(c, int) and not isinstance(c, bool) for c in companies):
            raise TypeError("field 'companies': expected array of integers")
        access_level = _str(data, "accessLevel")
        return cls(
            permissions=list(permissions),
            access_level=_access_level(access_level),
            companies=list(companies),
        )


@dataclass(frozen=True)
class PingResponse:
    """Result of ``/api/v2/utilities/ping``."""
    version: str = ""
    authenticated: bool = False
    authentication_type: str = ""
    authenticated_user_name: str = ""
    authenticated_user_id: int = 0
    authenticated_account_id: int = 0
    authenticated_company_id: int = 0
    crm_id: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "PingResponse":
        data = _object(data, "ping")
        return cls(
            version=_str(data, "version"),
            authenticated=_bool(data, "authenticated"),
            authentication_type=_str(data, "authenticationType"),
            authenticated_user_name=_str(data, "authenticatedUserName"),
            authenticated_user_id=_int(data, "authenticatedUserId"),
            authenticated_account_id=_int(data, "authenticatedAccountId"),
            authenticated_company_id=_int(data, "authenticatedCompanyId"),
            crm_id=_str(data, "crmid"),
        )
