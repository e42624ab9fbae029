"""Command-line entry point for the Avalara identity connector.

This module serves as a CLI wrapper around avalara_connector services.
"""
from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from avalara_connector.config import AppConfig, load_settings, validate_config
from avalara_connector.core.avalara import AvalaraClient, AvalaraError, ConfigurationError
from avalara_connector.core.connector import AvalaraConnector, run_sync
from avalara_connector.core.connector.base import page_options
from avalara_connector.core.connector.sync import collect_pages
from scripts import audit

logger = logging.getLogger("baton_avalara")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _write_json(payload, output: str | None) -> None:
    text = json.dumps(payload, indent=2, sort_keys=True)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        print(f"[sync] Wrote {output}", file=sys.stderr)
    else:
        print(text)


def _list_permissions(client: AvalaraClient) -> list[str]:
    def fetch(token):
        resp, next_options = client.get_permissions(page_options(token))
        return resp.value, next_options.next_link

    return collect_pages(fetch, "permission")


def _audit(config: AppConfig, event_type, operator: str, details: dict, success: bool) -> None:
    if config.audit_enabled:
        audit.safe_log_sync_event(
            event_type,
            environment=config.environment,
            operator=operator,
            details=details,
            success=success,
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Avalara identity connector")
    parser.add_argument("--username", default=os.environ.get("AVALARA_USERNAME"))
    parser.add_argument("--password", default=None,
                        help="Defaults to /run/secrets/avalara_password or AVALARA_PASSWORD")
    parser.add_argument("--environment", default=os.environ.get("AVALARA_ENVIRONMENT", "production"),
                        help="production, sandbox, test, or an explicit base URL")
    parser.add_argument("--operator", default="automation",
                        help="Operator identifier for audit logs (default: automation)")
    parser.add_argument("--log-level", default=None)

    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("validate", help="Check credentials with a ping")
    sub.add_parser("metadata", help="Print connector metadata")

    ss = sub.add_parser("sync", help="Sync users, roles, entitlements and grants")
    ss.add_argument("--output", default=None, help="Write JSON here instead of stdout")

    sub.add_parser("permissions", help="List permission names")

    se = sub.add_parser("entitlements", help="Show one user's entitlements")
    se.add_argument("--account-id", type=int, required=True)
    se.add_argument("--user-id", type=int, required=True)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return

    try:
        config = load_settings(args.username, args.password, args.environment)
    except ConfigurationError as e:
        parser.error(str(e))
    _configure_logging(args.log_level or config.log_level)

    if args.cmd == "metadata":
        metadata = AvalaraConnector(AvalaraClient(config.environment)).metadata()
        _write_json(metadata.to_dict(), None)
        return

    try:
        validate_config(config)
    except ConfigurationError as e:
        parser.error(str(e))

    connector = AvalaraConnector.new(
        config.environment, config.username, config.password, timeout=config.request_timeout
    )

    try:
        if args.cmd == "validate":
            ping = connector.validate()
            print(f"[validate] Authenticated as {ping.authenticated_user_name} "
                  f"(account {ping.authenticated_account_id})", file=sys.stderr)
            _audit(config, "validate", args.operator, {"version": ping.version}, True)
        elif args.cmd == "sync":
            connector.validate()
            result = run_sync(connector)
            _write_json(result.to_dict(), args.output)
            _audit(config, "sync", args.operator, result.summary(), True)
        elif args.cmd == "permissions":
            permissions = _list_permissions(connector.client)
            _write_json(permissions, None)
            _audit(config, "permissions", args.operator, {"count": len(permissions)}, True)
        elif args.cmd == "entitlements":
            ent = connector.client.get_user_entitlements(args.account_id, args.user_id)
            _write_json(
                {
                    "permissions": ent.permissions,
                    "access_level": ent.access_level_name,
                    "companies": ent.companies,
                },
                None,
            )
            _audit(config, "entitlements", args.operator,
                   {"account_id": args.account_id, "user_id": args.user_id}, True)
        else:
            parser.print_help()
    except AvalaraError as e:
        print(f"[{args.cmd}] Error: {e}", file=sys.stderr)
        _audit(config, args.cmd, args.operator, {"error": str(e)}, False)
        sys.exit(1)
    finally:
        connector.client.close()


if __name__ == "__main__":
    main()
