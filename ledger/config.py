"""Configuration for the ledger service.

Settings are read from an optional YAML file and then overridden by
environment variables, so containers can be configured with env alone.
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

CONFIG_FILENAME = ".ledger.yaml"

# Environment variable -> settings field
ENV_OVERRIDES = {
    "DATABASE_URL": "database_url",
    "SQLALCHEMY_ECHO": "sqlalchemy_echo",
    "LEDGER_STORE_TIMEOUT": "store_timeout",
    "LEDGER_REQUIRE_OWNER_ON_SELL": "require_owner_on_sell",
    "LEDGER_TRADE_JOURNAL": "trade_journal",
    "OTLP_ENABLED": "otlp_enabled",
    "OTLP_ENDPOINT": "otlp_endpoint",
    "OTLP_EXPORT_INTERVAL": "otlp_export_interval",
}


@dataclass
class Settings:
    """Runtime settings."""

    database_url: str = "sqlite+aiosqlite:///./ledger.db"
    sqlalchemy_echo: bool = False
    # Seconds allowed for a single store get/put before it fails as StoreError
    store_timeout: float = 5.0
    # Reject listings by anyone other than the current owner
    require_owner_on_sell: bool = True
    # Stage buys in the write-ahead trade journal
    trade_journal: bool = True
    otlp_enabled: bool = True
    otlp_endpoint: str = "http://localhost:4318/v1/metrics"
    otlp_export_interval: int = 5000


def _coerce(value, target_type):
    """Convert a raw YAML/env value to the type of a settings field."""
    if target_type is bool:
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in ("1", "true", "yes", "on"):
            return True
        if text in ("0", "false", "no", "off"):
            return False
        raise ValueError(f"Invalid boolean value: {value!r}")
    if target_type is int:
        return int(value)
    if target_type is float:
        return float(value)
    return str(value)


def find_config() -> Path | None:
    """Find the config file (LEDGER_CONFIG first, then the working directory).

    Returns:
        Path to config file if found, None otherwise.
    """
    explicit = os.getenv("LEDGER_CONFIG")
    if explicit:
        return Path(explicit)

    project_config = Path(CONFIG_FILENAME)
    if project_config.exists():
        return project_config

    return None


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from YAML and the environment.

    Args:
        path: Explicit config file. Defaults to find_config().

    Returns:
        Populated Settings. Unknown YAML keys are ignored.
    """
    types = {f.name: f.type for f in fields(Settings)}
    values = {}

    path = path or find_config()
    if path is not None and path.exists():
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        for key, value in data.items():
            if key in types:
                values[key] = _coerce(value, types[key])

    for env_name, field_name in ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if raw is not None:
            values[field_name] = _coerce(raw, types[field_name])

    return Settings(**values)


settings = load_settings()
