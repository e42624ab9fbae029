"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..core.avalara.client import REQUEST_TIMEOUT, resolve_base_url
from ..core.avalara.exceptions import ConfigurationError

ENVIRONMENTS = ("production", "sandbox", "test")


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] Loaded {secret_name} from /run/secrets", file=sys.stderr)
                return secret_value
        except OSError as e:
            print(f"[settings] Failed to read /run/secrets/{secret_name}: {e}", file=sys.stderr)

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


def _env_bool(var_name: str, default: bool) -> bool:
    value = os.environ.get(var_name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class AppConfig:
    """Connector configuration container."""
    username: str = ""
    password: str = ""
    environment: str = "production"
    request_timeout: float = REQUEST_TIMEOUT
    log_level: str = "INFO"
    audit_enabled: bool = True

    @property
    def base_url(self) -> str:
        return resolve_base_url(self.environment)


def is_valid_environment(environment: str) -> bool:
    """Named environments plus explicit http(s) base URLs."""
    env = (environment or "").strip().lower()
    return env in ENVIRONMENTS or env.startswith(("http://", "https://"))


def validate_config(config: AppConfig) -> None:
    """Reject configurations that cannot produce a working client.

    Raises:
        ConfigurationError: Missing credentials or unknown environment
    """
    if not config.username or not config.password:
        raise ConfigurationError("both username and password are required")

    if not is_valid_environment(config.environment):
        raise ConfigurationError(
            f"invalid environment {config.environment!r}: must be one of "
            f"{', '.join(ENVIRONMENTS)} or an http(s) URL"
        )

    if config.request_timeout <= 0:
        raise ConfigurationError("request timeout must be positive")


def load_settings(
    username: Optional[str] = None,
    password: Optional[str] = None,
    environment: Optional[str] = None,
) -> AppConfig:
    """Load settings from explicit values, /run/secrets and environment variables.

    Explicit arguments win over the environment. The result is not validated;
    call validate_config() before building a client.
    """
    username = username or os.environ.get("AVALARA_USERNAME", "")
    password = password or _load_secret_from_file("avalara_password", "AVALARA_PASSWORD") or ""
    environment = (environment or os.environ.get("AVALARA_ENVIRONMENT", "production")).strip()
    # Named environments are case-insensitive; URLs are kept as given.
    if environment.lower() in ENVIRONMENTS:
        environment = environment.lower()

    timeout_str = os.environ.get("AVALARA_REQUEST_TIMEOUT", "")
    try:
        request_timeout = float(timeout_str) if timeout_str else float(REQUEST_TIMEOUT)
    except ValueError:
        raise ConfigurationError(f"AVALARA_REQUEST_TIMEOUT must be a number, got {timeout_str!r}")

    return AppConfig(
        username=username,
        password=password,
        environment=environment,
        request_timeout=request_timeout,
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        audit_enabled=_env_bool("AUDIT_ENABLED", True),
    )
