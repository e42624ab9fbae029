"""Low-level HTTP client for the Avalara AvaTax REST API.

Handles Basic authentication, the client identification header, query
construction for list endpoints and error mapping.
"""
from __future__ import annotations
import base64
import logging
from typing import Any, Optional, Tuple, Type

import requests

from .exceptions import (
    AvalaraAPIError,
    AvalaraFormatError,
    AvalaraTransportError,
    UnexpectedStatusError,
)
from .models import (
    AccountResponse,
    EntitlementResponse,
    PermissionResponse,
    PingResponse,
    SecurityRoleResponse,
    UserResponse,
)
from .pagination import PaginationOptions, update_pagination_options

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30

PRODUCTION_BASE_URL = "https://rest.avatax.com"
SANDBOX_BASE_URL = "https://sandbox-rest.avatax.com"
TEST_BASE_URL = "http://localhost:8080"

APP_NAME = "avalara-connector"
APP_VERSION = "1.0.0"
CLIENT_HEADER = "X-Avalara-Client"

SECURITY_ROLES_ENDPOINT = "/api/v2/definitions/securityroles"
USERS_ENDPOINT = "/api/v2/users"
PERMISSIONS_ENDPOINT = "/api/v2/definitions/permissions"
ACCOUNTS_ENDPOINT = "/api/v2/accounts"
USER_ENTITLEMENTS_ENDPOINT = "/api/v2/accounts/{account_id}/users/{user_id}/entitlements"
PING_ENDPOINT = "/api/v2/utilities/ping"


def resolve_base_url(environment: Optional[str]) -> str:
    """Map an environment selector to the API root.

    ``sandbox`` and ``test`` select their fixed hosts, a selector that is
    itself an http(s) URL is used as-is, anything else means production.
    """
    environment = (environment or "").strip()
    if environment.lower().startswith("http"):
        return environment.rstrip("/")
    if environment == "sandbox":
        return SANDBOX_BASE_URL
    if environment == "test":
        return TEST_BASE_URL
    return PRODUCTION_BASE_URL


class AvalaraClient:
    """HTTP client for the AvaTax REST v2 API.

    Usage:
        client = AvalaraClient("sandbox")
        client.add_credentials("user", "pass")
        roles, next_options = client.get_user_roles(PaginationOptions(top=100))
    """

    def __init__(
        self,
        environment: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        """Initialize the client.

        Args:
            environment: production, sandbox, test, or an explicit base URL
            session: Shared HTTP session (a new one is created when omitted)
            timeout: Per-request timeout handed to requests
        """
        self.base_url = resolve_base_url(environment)
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.client_header = f"{APP_NAME}; {APP_VERSION}; Python SDK; API_VERSION"
        self.credentials = ""

    def add_credentials(self, username: str, password: str) -> None:
        """Store the Basic auth credential used by every subsequent request."""
        raw = f"{username}:{password}".encode("utf-8")
        self.credentials = base64.b64encode(raw).decode("ascii")

    def close(self) -> None:
        self.session.close()

    def _headers(self) -> dict:
        return {
            "Authorization": f"Basic {self.credentials}",
            CLIENT_HEADER: self.client_header,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _prepare(self, endpoint: str, options: Optional[PaginationOptions]) -> requests.PreparedRequest:
        if options is not None and options.is_continuation:
            request = requests.Request("GET", options.next_link, headers=self._headers())
            target = options.next_link
        else:
            params = options.to_query_params() if options is not None else None
            target = f"{self.base_url}{endpoint}"
            request = requests.Request("GET", target, params=params, headers=self._headers())

        try:
            prepared = self.session.prepare_request(request)
        except (requests.exceptions.RequestException, ValueError) as exc:
            raise AvalaraTransportError(target, f"error parsing URL: {exc}") from exc

        if options is not None and options.is_continuation:
            # Skip requests' requoting; urllib3 may still normalise escapes on the wire.
            prepared.url = options.next_link
        return prepared

    def get(self, endpoint: str, options: Optional[PaginationOptions], response_type: Type[Any]) -> Any:
        """Execute a GET request and decode the body into ``response_type``.

        Args:
            endpoint: API path relative to the base URL (ignored for continuations)
            options: Paging options, or None for single-object endpoints
            response_type: Class exposing ``from_dict``

        Returns:
            Instance of ``response_type``

        Raises:
            AvalaraTransportError: Request could not be sent
            AvalaraAPIError: Structured error body on a non-2xx response
            UnexpectedStatusError: Non-2xx response without a structured body
            AvalaraFormatError: 2xx body does not match ``response_type``
        """
        prepared = self._prepare(endpoint, options)
        logger.debug("GET %s", prepared.url)

        send_kwargs = self.session.merge_environment_settings(prepared.url, {}, None, None, None)
        try:
            resp = self.session.send(prepared, timeout=self.timeout, **send_kwargs)
        except requests.exceptions.RequestException as exc:
            raise AvalaraTransportError(prepared.url, str(exc)) from exc

        logger.debug("GET %s -> %s", prepared.url, resp.status_code)
        self._handle_error(resp)

        try:
            return response_type.from_dict(resp.json())
        except (ValueError, TypeError, KeyError) as exc:
            raise AvalaraFormatError(str(exc)) from exc

    def _handle_error(self, resp: requests.Response) -> None:
        """Raise for any status outside [200, 300)."""
        if 200 <= resp.status_code < 300:
            return
        try:
            body = resp.json()
        except ValueError:
            body = None
        api_error = AvalaraAPIError.from_response_body(body, resp.status_code)
        if api_error is not None:
            raise api_error
        raise UnexpectedStatusError(resp.status_code)

    def get_user_roles(
        self, options: Optional[PaginationOptions] = None
    ) -> Tuple[SecurityRoleResponse, PaginationOptions]:
        """Retrieve one page of security role definitions."""
        result = self.get(SECURITY_ROLES_ENDPOINT, options, SecurityRoleResponse)
        return result, update_pagination_options(options, result)

    def get_users(self, options: Optional[PaginationOptions] = None) -> Tuple[UserResponse, PaginationOptions]:
        """Retrieve one page of users visible to the authenticated account."""
        result = self.get(USERS_ENDPOINT, options, UserResponse)
        return result, update_pagination_options(options, result)

    def get_permissions(
        self, options: Optional[PaginationOptions] = None
    ) -> Tuple[PermissionResponse, PaginationOptions]:
        """Retrieve one page of permission names."""
        result = self.get(PERMISSIONS_ENDPOINT, options, PermissionResponse)
        return result, update_pagination_options(options, result)

    def get_accounts(
        self, options: Optional[PaginationOptions] = None
    ) -> Tuple[AccountResponse, PaginationOptions]:
        """Retrieve one page of accounts."""
        result = self.get(ACCOUNTS_ENDPOINT, options, AccountResponse)
        return result, update_pagination_options(options, result)

    def get_user_entitlements(self, account_id: int, user_id: int) -> EntitlementResponse:
        """Retrieve all entitlements of a single user."""
        endpoint = USER_ENTITLEMENTS_ENDPOINT.format(account_id=account_id, user_id=user_id)
        return self.get(endpoint, None, EntitlementResponse)

    def ping(self) -> PingResponse:
        """Check connectivity and whether the credentials were accepted."""
        return self.get(PING_ENDPOINT, None, PingResponse)


def get_avalara_client(
    environment: Optional[str],
    username: str,
    password: str,
    session: Optional[requests.Session] = None,
    timeout: float = REQUEST_TIMEOUT,
) -> AvalaraClient:
    """Create a client with credentials already attached."""
    client = AvalaraClient(environment, session=session, timeout=timeout)
    client.add_credentials(username, password)
    return client
