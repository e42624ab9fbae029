"""Avalara AvaTax REST API client library.

Architecture:
- client.py: HTTP client with Basic auth, query construction and error mapping
- pagination.py: Paging options and the next-link contract
- models.py: Typed response envelopes and records
- exceptions.py: Typed exceptions for error handling

Usage:
    from avalara_connector.core.avalara import get_avalara_client, PaginationOptions

    client = get_avalara_client("sandbox", "user", "pass")
    options = PaginationOptions(top=100)
    while True:
        users, options = client.get_users(options)
        ...
        if not options.next_link:
            break
"""
from .client import (
    AvalaraClient,
    get_avalara_client,
    resolve_base_url,
    REQUEST_TIMEOUT,
    PRODUCTION_BASE_URL,
    SANDBOX_BASE_URL,
    TEST_BASE_URL,
)
from .exceptions import (
    AvalaraError,
    AvalaraAPIError,
    AvalaraFormatError,
    AvalaraTransportError,
    UnexpectedStatusError,
    ConfigurationError,
    SyncError,
)
from .models import (
    AccessLevel,
    AccountModel,
    AccountResponse,
    EntitlementResponse,
    PermissionResponse,
    PingResponse,
    SecurityRoleModel,
    SecurityRoleResponse,
    UserModel,
    UserResponse,
)
from .pagination import PaginatedResponse, PaginationOptions, update_pagination_options

__all__ = [
    # Client
    "AvalaraClient",
    "get_avalara_client",
    "resolve_base_url",
    "REQUEST_TIMEOUT",
    "PRODUCTION_BASE_URL",
    "SANDBOX_BASE_URL",
    "TEST_BASE_URL",

    # Exceptions
    "AvalaraError",
    "AvalaraAPIError",
    "AvalaraFormatError",
    "AvalaraTransportError",
    "UnexpectedStatusError",
    "ConfigurationError",
    "SyncError",

    # Models
    "AccessLevel",
    "AccountModel",
    "AccountResponse",
    "EntitlementResponse",
    "PermissionResponse",
    "PingResponse",
    "SecurityRoleModel",
    "SecurityRoleResponse",
    "UserModel",
    "UserResponse",

    # Pagination
    "PaginatedResponse",
    "PaginationOptions",
    "update_pagination_options",
]
