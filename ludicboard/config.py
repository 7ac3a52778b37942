"""Configuration management that reads from `config/settings.toml`."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
import re
import tomllib
from typing import Any


DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "settings.toml"
CONFIG_PATH_ENV = "LUDICBOARD_CONFIG"
JWT_SECRET_ENV = "JWT_SECRET"


class SettingsError(RuntimeError):
    """Raised when configuration cannot be loaded."""


def _config_path() -> Path:
    override = os.environ.get(CONFIG_PATH_ENV)
    return Path(override) if override else DEFAULT_CONFIG_PATH


def _load_config_file(path: Path) -> dict[str, Any]:
    """Load TOML configuration from disk."""
    if not path.exists():
        raise SettingsError(
            f"Configuration file '{path}' is missing. "
            f"Create 'config/settings.toml' or point {CONFIG_PATH_ENV} at a settings file "
            "before launching the backend."
        )
    with path.open("rb") as fp:
        return tomllib.load(fp)


def _require_section(raw: dict[str, Any], section: str) -> dict[str, Any]:
    if section not in raw or not isinstance(raw[section], dict):
        raise SettingsError(
            f"Section '[{section}]' is missing in the configuration file. "
            "All settings must be defined in the config file."
        )
    return raw[section]


def _require_value(section: dict[str, Any], key: str, *, section_name: str) -> Any:
    if key not in section:
        raise SettingsError(f"Missing key '{section_name}.{key}' in the configuration file.")
    return section[key]


def _extract_settings(raw: dict[str, Any]) -> dict[str, Any]:
    """Map nested TOML structure into flat settings attributes."""
    database = _require_section(raw, "database")
    security = _require_section(raw, "security")
    server = _require_section(raw, "server")
    cors = _require_section(raw, "cors")
    api = _require_section(raw, "api")
    logging_section = raw.get("logging", {})

    api_version = _require_value(api, "version", section_name="api")

    # The signing secret is the only value allowed to come from the environment
    secret_key = os.environ.get(JWT_SECRET_ENV) or _require_value(
        security, "secret_key", section_name="security"
    )

    return {
        "database_url": _require_value(database, "url", section_name="database"),
        "secret_key": secret_key,
        "algorithm": _require_value(security, "algorithm", section_name="security"),
        "access_token_expire_minutes": int(
            _require_value(security, "access_token_expire_minutes", section_name="security")
        ),
        "host": _require_value(server, "host", section_name="server"),
        "port": int(_require_value(server, "port", section_name="server")),
        "debug": bool(_require_value(server, "debug", section_name="server")),
        "environment": server.get("environment", "development"),
        "cors_origins": _require_value(cors, "origins", section_name="cors"),
        "api_version_path": f"/api/v{api_version}",
        "log_dir": logging_section.get("dir"),
    }


@dataclass(slots=True)
class Settings:
    """Application settings loaded from a config file."""

    database_url: str
    secret_key: str
    algorithm: str
    access_token_expire_minutes: int
    host: str
    port: int
    debug: bool
    environment: str
    cors_origins: list[str]
    api_version_path: str
    log_dir: str | None = None

    @property
    def cors_origins_list(self) -> list[str]:
        """Return the exact (non-wildcard) CORS origins."""
        return [origin for origin in self.cors_origins if "*" not in origin]

    @property
    def cors_origin_regex(self) -> str | None:
        """Combine wildcard origins (e.g., "http://192.168.1.*:3000") into one regex.

        Returns None when no wildcard origin is configured.
        """
        patterns = []
        for origin in self.cors_origins:
            if "*" in origin:
                # Escape everything, then turn the escaped asterisk back into a wildcard
                patterns.append(re.escape(origin).replace(r"\*", r".*"))
        if not patterns:
            return None
        return "|".join(f"(?:{pattern})" for pattern in patterns)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    global _settings
    if _settings is None:
        raw = _load_config_file(_config_path())
        _settings = Settings(**_extract_settings(raw))
    return _settings
