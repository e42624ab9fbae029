"""Pytest shared fixtures for connector tests."""
import json
import pathlib
import sys
from typing import Any, List, Optional, Tuple

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests
from requests.adapters import BaseAdapter

from avalara_connector.core.avalara import AvalaraClient
from scripts import audit
from tests.mock_avalara_server import MockAvalaraServer


# ─────────────────────────────────────────────────────────────────────────────
# Transport double
# ─────────────────────────────────────────────────────────────────────────────
class FakeAdapter(BaseAdapter):
    """requests transport adapter that records requests and replays canned responses.

    Responses are ``(status, body)`` tuples; ``body`` is JSON-encoded unless
    it is already ``bytes``. Set ``error`` to make every send raise.
    """

    def __init__(self):
        super().__init__()
        self.responses: List[Tuple[int, Any]] = []
        self.requests: List[requests.PreparedRequest] = []
        self.send_kwargs: List[dict] = []
        self.error: Optional[Exception] = None

    def queue(self, status: int, body: Any) -> "FakeAdapter":
        self.responses.append((status, body))
        return self

    def send(self, request, **kwargs):
        self.requests.append(request)
        self.send_kwargs.append(kwargs)
        if self.error is not None:
            raise self.error

        status, body = self.responses.pop(0) if self.responses else (200, {"value": []})
        resp = requests.Response()
        resp.status_code = status
        resp._content = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")
        resp.headers["Content-Type"] = "application/json"
        resp.encoding = "utf-8"
        resp.url = request.url
        resp.request = request
        return resp

    def close(self):
        pass

    @property
    def last_request(self) -> requests.PreparedRequest:
        return self.requests[-1]


@pytest.fixture
def adapter():
    return FakeAdapter()


@pytest.fixture
def session(adapter):
    s = requests.Session()
    s.trust_env = False
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    return s


@pytest.fixture
def client(session):
    """Sandbox client wired to the fake adapter, with test credentials."""
    c = AvalaraClient("sandbox", session=session)
    c.add_credentials("testuser", "testpass")
    return c


@pytest.fixture
def mock_server():
    """A mock AvaTax server with default behaviour."""
    with MockAvalaraServer() as server:
        yield server


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep tests independent of the developer's Avalara and audit environment."""
    for var in ("AVALARA_USERNAME", "AVALARA_PASSWORD", "AVALARA_ENVIRONMENT",
                "AVALARA_REQUEST_TIMEOUT", "LOG_LEVEL", "AUDIT_ENABLED",
                "AUDIT_LOG_SIGNING_KEY", "AUDIT_LOG_SIGNING_KEY_FILE"):
        monkeypatch.delenv(var, raising=False)

    audit_dir = tmp_path / "audit"
    monkeypatch.setattr(audit, "AUDIT_LOG_DIR", audit_dir)
    monkeypatch.setattr(audit, "AUDIT_LOG_FILE", audit_dir / "sync-events.jsonl")
