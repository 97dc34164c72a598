"""
Settings loader.

Layers, lowest to highest precedence:
1. Dataclass defaults
2. settings/defaults.yaml
3. settings/<ENV>.yaml, when ENV (or APP_ENV) names an environment
4. Environment variables (DATA_HOST, LOGGING_LEVEL, ...)

Command-line flags are applied afterwards by main.run().
"""
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from config import Config, DataConfig, LoggingConfig, ServerConfig

DEFAULT_SETTINGS_PATHS = [
    Path("settings/defaults.yaml"),
    Path(__file__).resolve().parent.parent / "settings" / "defaults.yaml",
    Path("/app/settings/defaults.yaml"),
]

# YAML keys are camelCase to match the settings files
_DATA_KEYS = {
    "protocol": "protocol",
    "host": "host",
    "username": "username",
    "password": "password",
    "database": "database",
    "options": "options",
    "defaultPageSize": "default_page_size",
    "maxPageSize": "max_page_size",
    "timeoutSeconds": "timeout_seconds",
    "populateCount": "populate_count",
    "populateBatchSize": "populate_batch_size",
}


class EnvironmentConfigLoader:
    """Loads configuration from settings files and environment variables.

    Single Responsibility: settings access logic.
    """

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = settings_path

    def load(self) -> Config:
        """Create Config from settings files and environment"""
        settings = self._read_settings()
        config = Config(
            data=self._load_data_config(settings.get("data") or {}),
            logging=self._load_logging_config(settings.get("logging") or {}),
            server=self._load_server_config(settings.get("server") or {}),
            populate=bool(settings.get("populate", False)),
        )
        config.populate = self._get_bool("POPULATE", config.populate)
        return config

    # ============ Settings files ============

    def _read_settings(self) -> Dict[str, Any]:
        """Read base settings file and optional environment overlay"""
        base_path = self._find_settings_file()
        if base_path is None:
            return {}

        settings = self._read_yaml(base_path)
        env_name = os.getenv("ENV") or os.getenv("APP_ENV")
        if env_name:
            overlay = base_path.parent / f"{env_name}.yaml"
            if overlay.exists():
                settings = _merge(settings, self._read_yaml(overlay))
        return settings

    def _find_settings_file(self) -> Optional[Path]:
        """Locate the base settings file"""
        if self.settings_path is not None:
            if not self.settings_path.exists():
                raise FileNotFoundError(f"Settings file not found: {self.settings_path}")
            return self.settings_path

        for path in DEFAULT_SETTINGS_PATHS:
            if path.exists():
                return path
        return None

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        """Parse a YAML settings file"""
        with open(path) as f:
            data = yaml.safe_load(f)
        return data or {}

    # ============ Sections ============

    def _load_data_config(self, section: Dict[str, Any]) -> DataConfig:
        """Load data configuration from settings then environment"""
        values = {
            attr: section[key] for key, attr in _DATA_KEYS.items() if key in section
        }
        defaults = DataConfig(**values)
        return DataConfig(
            protocol=self._get_optional("DATA_PROTOCOL", defaults.protocol),
            host=self._get_optional("DATA_HOST", defaults.host),
            username=self._get_optional("DATA_USERNAME", defaults.username),
            password=self._get_optional("DATA_PASSWORD", defaults.password),
            database=self._get_optional("DATA_DATABASE", defaults.database),
            options=self._get_optional("DATA_OPTIONS", defaults.options),
            default_page_size=self._get_int("DATA_DEFAULT_PAGE_SIZE", defaults.default_page_size),
            max_page_size=self._get_int("DATA_MAX_PAGE_SIZE", defaults.max_page_size),
            timeout_seconds=self._get_int("DATA_TIMEOUT_SECONDS", defaults.timeout_seconds),
            populate_count=self._get_int("DATA_POPULATE_COUNT", defaults.populate_count),
            populate_batch_size=self._get_int("DATA_POPULATE_BATCH_SIZE", defaults.populate_batch_size),
        )

    def _load_logging_config(self, section: Dict[str, Any]) -> LoggingConfig:
        """Load logging configuration"""
        level = section.get("level", LoggingConfig.level)
        return LoggingConfig(level=self._get_optional("LOGGING_LEVEL", level))

    def _load_server_config(self, section: Dict[str, Any]) -> ServerConfig:
        """Load HTTP server configuration"""
        address = section.get("address", ServerConfig.address)
        return ServerConfig(address=self._get_optional("SERVER_ADDRESS", address))

    # ============ Environment access ============

    def _get_optional(self, key: str, default: str) -> str:
        """Get optional string environment variable"""
        return os.getenv(key, default)

    def _get_bool(self, key: str, default: bool) -> bool:
        """Get boolean environment variable"""
        value = os.getenv(key, str(default).lower())
        return value.lower() == "true"

    def _get_int(self, key: str, default: int) -> int:
        """Get integer environment variable"""
        value = os.getenv(key, str(default))
        return int(value)


def _merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge overlay settings onto base settings"""
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged
