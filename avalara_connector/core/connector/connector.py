"""Avalara connector facade handed to the governance host."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import requests

from ..avalara.client import AvalaraClient, REQUEST_TIMEOUT, get_avalara_client
from ..avalara.exceptions import AvalaraError, ConfigurationError
from ..avalara.models import PingResponse
from .base import ResourceSyncer
from .roles import RoleBuilder
from .users import UserBuilder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectorMetadata:
    display_name: str
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {"display_name": self.display_name, "description": self.description}


class AvalaraConnector:
    """Composes the Avalara client and resource syncers.

    Usage:
        connector = AvalaraConnector.new("sandbox", "user", "pass")
        connector.validate()
        for syncer in connector.resource_syncers():
            ...
    """

    def __init__(self, client: AvalaraClient):
        self.client = client

    @classmethod
    def new(
        cls,
        environment: Optional[str],
        username: str,
        password: str,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> "AvalaraConnector":
        return cls(get_avalara_client(environment, username, password, session=session, timeout=timeout))

    def resource_syncers(self) -> List[ResourceSyncer]:
        return [
            UserBuilder(self.client),
            RoleBuilder(self.client),
        ]

    def metadata(self) -> ConnectorMetadata:
        return ConnectorMetadata(
            display_name="Avalara",
            description=(
                "The Avalara connector allows you to sync users, roles, "
                "and entitlements from your Avalara account."
            ),
        )

    def validate(self) -> PingResponse:
        """Exercise the credentials with a ping.

        Raises:
            ConfigurationError: Ping failed or Avalara did not authenticate the caller
        """
        try:
            ping = self.client.ping()
        except AvalaraError as exc:
            raise ConfigurationError(f"failed to validate Avalara connection: {exc}") from exc

        if not ping.authenticated:
            raise ConfigurationError("Avalara authentication failed")

        logger.info(
            "Validated Avalara connection as %s (account %s, API %s)",
            ping.authenticated_user_name,
            ping.authenticated_account_id,
            ping.version,
        )
        return ping

    def asset(self, asset_ref: Any) -> Tuple[str, None]:
        """Assets are not supported; always returns an empty result."""
        return "", None
