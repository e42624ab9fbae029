"""Configuration module for the Avalara connector."""
from .settings import AppConfig, load_settings, validate_config

__all__ = ["AppConfig", "load_settings", "validate_config"]
