"""Mock AvaTax REST server for end-to-end connector tests.

Runs an in-memory server using ``http.server`` in a background thread. It
checks Basic credentials and the ``X-Avalara-Client`` header, emulates
``$top``/``$skip`` paging with ``@nextLink`` URLs, and answers with the
documented error shape.

The ``$filter`` handling understands only ``id eq N``,
``description eq 'X'`` and ``lastName startsWith "X"``; it is a fixture,
not a statement about upstream filter semantics.

Behaviour flags (pass via ``options`` dict):

  ``trailing_next_link``  Emit a ``@nextLink`` on the last page of roles,
                          pointing at an empty page.
  ``unauthenticated_ping`` Ping answers 200 with ``authenticated: false``.
  ``malformed_users``     ``/api/v2/users`` answers 200 with a non-JSON body.

Usage::

    with MockAvalaraServer() as server:
        client = get_avalara_client(server.base_url, "testuser", "testpass")
        roles, _ = client.get_user_roles()
"""

import base64
import json
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, quote, urlsplit

USERNAME = "testuser"
PASSWORD = "testpass"

ROLES = [
    {"id": 1, "description": "AccountAdmin"},
    {"id": 2, "description": "AccountUser"},
    {"id": 3, "description": "CompanyAdmin"},
    {"id": 4, "description": "CompanyUser"},
    {"id": 5, "description": "SystemAdmin"},
]


def _user(user_id: int, name: str, role: str, company_id: int, active: bool = True) -> Dict[str, Any]:
    return {
        "id": user_id, "accountId": 123456789, "companyId": company_id,
        "userName": f"{name.lower()}Example", "firstName": name, "lastName": "Example",
        "email": f"{name.lower()}@example.org", "postalCode": "98110",
        "securityRoleId": role, "passwordStatus": "UserCanChange",
        "isActive": active, "suppressNewUserEmail": False, "isDeleted": False,
    }


USERS = [
    _user(12345, "Bob", "AccountUser", 123456),
    _user(67890, "Alice", "AccountAdmin", 123456),
    _user(13579, "Charlie", "CompanyUser", 123457),
    _user(24680, "Dana", "CompanyAdmin", 123457, active=False),
    _user(35791, "Eve", "AccountUser", 123458),
]

PERMISSIONS = ["AccountSvc", "CompanySvc", "TaxSvc", "NexusFetch"]

ACCOUNTS = [
    {"id": 123456789, "name": "Example Account", "effectiveDate": "2020-01-01T00:00:00",
     "accountStatusId": "Active", "accountTypeId": "Regular", "isSamlEnabled": False, "isDeleted": False},
]


def _matches_filter(item: Dict[str, Any], expr: str) -> bool:
    expr = expr.strip()
    if expr.startswith("id eq"):
        try:
            return item.get("id") == int(expr[len("id eq"):].strip())
        except ValueError:
            return False
    if expr.startswith("description eq"):
        wanted = expr[len("description eq"):].strip().strip("'")
        return str(item.get("description", "")).lower() == wanted.lower()
    if expr.startswith("lastName startsWith"):
        prefix = expr[len("lastName startsWith"):].strip().strip("\"'")
        return str(item.get("lastName", "")).lower().startswith(prefix.lower())
    return True


class MockAvalaraHandler(BaseHTTPRequestHandler):
    """Handles AvaTax GET requests against static fixtures.

    Shared state (options, request log) lives on the ``HTTPServer`` instance.
    """

    def log_message(self, format, *args):
        """Suppress request logging during tests to keep output clean."""
        pass

    def _send_json(self, status: int, body: Any):
        payload = json.dumps(body).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def _send_raw(self, status: int, payload: bytes):
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def _send_error(self, status: int, code: str, message: str, target: str = "", details: Optional[List[str]] = None):
        self._send_json(status, {
            "error": {
                "code": code,
                "message": message,
                "target": target,
                "details": [{"message": d} for d in (details or [])],
            }
        })

    def _authenticated(self) -> bool:
        header = self.headers.get("Authorization", "")
        scheme, _, encoded = header.partition(" ")
        if scheme != "Basic":
            return False
        try:
            decoded = base64.b64decode(encoded).decode("utf-8")
        except (ValueError, UnicodeDecodeError):
            return False
        return decoded == f"{USERNAME}:{PASSWORD}"

    def _page(self, path: str, items: List[Any], query: Dict[str, List[str]], trailing_link: bool = False):
        top = int(query.get("$top", ["0"])[0] or 0)
        skip = int(query.get("$skip", ["0"])[0] or 0)
        flt = query.get("$filter", [""])[0]
        order_by = query.get("$orderby", [""])[0]

        if flt:
            items = [i for i in items if isinstance(i, dict) and _matches_filter(i, flt)]
        if order_by:
            field, _, direction = order_by.partition(" ")
            items = sorted(items, key=lambda i: str(i.get(field, "")), reverse=direction.upper() == "DESC")

        end = len(items) if top <= 0 else min(skip + top, len(items))
        page = items[skip:end]
        body: Dict[str, Any] = {"@recordsetCount": len(items), "value": page}

        more = end < len(items)
        if more or (trailing_link and skip < len(items)):
            link = f"{self.server.base_url}{path}?$top={top}&$skip={end}"
            if flt:
                link += "&$filter=" + quote(flt)
            if order_by:
                link += "&$orderby=" + quote(order_by)
            body["@nextLink"] = link
        self._send_json(200, body)

    def do_GET(self):
        self.server.requests.append(self.path)

        if not self._authenticated():
            self._send_error(401, "AuthenticationException", "Invalid credentials")
            return
        if not self.headers.get("X-Avalara-Client"):
            self._send_error(400, "HeaderValidationException", "Missing X-Avalara-Client header",
                             "X-Avalara-Client", ["The X-Avalara-Client header is required for all API calls"])
            return

        parts = urlsplit(self.path)
        path = parts.path
        query = parse_qs(parts.query)
        options = self.server.options

        if path == "/api/v2/utilities/ping":
            self._send_json(200, {
                "version": "24.8.2",
                "authenticated": not options.get("unauthenticated_ping", False),
                "authenticationType": "UsernamePassword",
                "authenticatedUserName": USERNAME,
                "authenticatedUserId": 12345,
                "authenticatedAccountId": 123456789,
                "crmid": "some-crm-id",
            })
        elif path == "/api/v2/definitions/securityroles":
            self._page(path, ROLES, query, trailing_link=options.get("trailing_next_link", False))
        elif path == "/api/v2/users":
            if options.get("malformed_users"):
                self._send_raw(200, b"<html>not json</html>")
                return
            self._page(path, USERS, query)
        elif path == "/api/v2/definitions/permissions":
            self._page(path, PERMISSIONS, query)
        elif path == "/api/v2/accounts":
            self._page(path, ACCOUNTS, query)
        elif path.startswith("/api/v2/accounts/") and path.endswith("/entitlements"):
            self._send_json(200, {
                "permissions": ["CompanyFetch", "CompanySave", "NexusFetch", "NexusSave"],
                "accessLevel": "SingleAccount",
                "companies": [123, 456, 789],
            })
        else:
            self._send_error(404, "EntityNotFoundError", f"No route for {path}")


class MockAvalaraServer:
    """Threaded mock AvaTax server bound to an ephemeral localhost port."""

    def __init__(self, port: int = 0, options: Optional[Dict[str, Any]] = None):
        self.server = HTTPServer(("127.0.0.1", port), MockAvalaraHandler)
        host, bound_port = self.server.server_address[:2]
        self.server.base_url = f"http://{host}:{bound_port}"
        self.server.options = dict(options or {})
        self.server.requests = []
        self._thread = None

    @property
    def base_url(self) -> str:
        return self.server.base_url

    @property
    def requests(self) -> List[str]:
        """Raw request targets (path plus query) in arrival order."""
        return self.server.requests

    def start(self):
        self._thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self._thread.start()

    def stop(self):
        self.server.shutdown()
        self.server.server_close()
        if self._thread:
            self._thread.join(timeout=5)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *args):
        self.stop()
