"""Core connector logic, independent of the CLI.

Module Structure:
    - avalara/    : Low-level AvaTax REST client (transport, paging, models, errors)
    - connector/  : Resource syncers, connector facade and sync driver

Usage Pattern:
    from avalara_connector.core.connector import AvalaraConnector, run_sync

    connector = AvalaraConnector.new("sandbox", "user", "pass")
    connector.validate()
    result = run_sync(connector)
"""
