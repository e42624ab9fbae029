"""Avalara AvaTax identity connector.

To use the API client:
    from avalara_connector.core.avalara import get_avalara_client

To run a sync:
    from avalara_connector.core.connector import AvalaraConnector, run_sync

Configuration is loaded explicitly:
    from avalara_connector.config import load_settings, validate_config
"""

__version__ = "1.0.0"
