"""Configuration management for master-portal using YAML files."""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger()

CONFIG_DIR_NAME = ".master-portal"


class Config:
    """Configuration manager using YAML file storage.

    Supports both local (working-directory) and global (user-level) configuration.
    Local config is stored in .master-portal/config.yaml in the current directory.
    Global config is stored in ~/.master-portal/config.yaml.

    When reading, values are looked up in local config first, then global config.
    """

    def __init__(
        self,
        use_global: bool = False,
        config_dir: Path | None = None,
        global_dir: Path | None = None,
    ) -> None:
        """Initialize configuration manager.

        Args:
            use_global: If True, use global config only. If False, use local config with global fallback.
            config_dir: Custom directory to store config file (overrides use_global)
            global_dir: Custom location of the global config used as fallback
        """
        global_dir = Path(global_dir) if global_dir is not None else Path.home() / CONFIG_DIR_NAME
        if config_dir is not None:
            self.config_dir = Path(config_dir)
            self.is_global = use_global
        elif use_global:
            self.config_dir = global_dir
            self.is_global = True
        else:
            self.config_dir = Path.cwd() / CONFIG_DIR_NAME
            self.is_global = False

        self.config_file = self.config_dir / "config.yaml"
        self._config: dict[str, Any] = self._load()

        # For local config, also load global config as fallback
        self._global_config: dict[str, Any] = {}
        if not self.is_global:
            global_config_file = global_dir / "config.yaml"
            if global_config_file.exists() and global_config_file != self.config_file:
                try:
                    with open(global_config_file, "r") as f:
                        self._global_config = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    logger.warning("Failed to load global config", error=str(e))

        logger.debug("Config initialized", config_file=str(self.config_file), is_global=self.is_global)

    def _load(self) -> dict[str, Any]:
        """Load configuration from YAML file.

        Returns:
            Configuration dictionary
        """
        if not self.config_file.exists():
            logger.debug("Config file does not exist, initializing empty config")
            return {}

        try:
            with open(self.config_file, "r") as f:
                config = yaml.safe_load(f) or {}
                logger.debug("Config loaded successfully", keys=list(config.keys()))
                return config
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load config", error=str(e))
            raise ValueError(f"Failed to load config from {self.config_file}: {e}") from e

    def _save(self) -> None:
        """Save configuration to YAML file."""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w") as f:
                yaml.safe_dump(self._config, f, default_flow_style=False, sort_keys=False)
            logger.debug("Config saved successfully")
        except OSError as e:
            logger.error("Failed to save config", error=str(e))
            raise ValueError(f"Failed to save config to {self.config_file}: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value.

        For local config, checks local config first, then falls back to global config.
        """
        if key in self._config:
            logger.debug("Getting config value from local", key=key)
            return self._config[key]

        if not self.is_global and key in self._global_config:
            logger.debug("Getting config value from global", key=key)
            return self._global_config[key]

        logger.debug("Config value not found", key=key)
        return default

    def set(self, key: str, value: Any) -> Any:
        """Validate and store a setting.

        Portal settings (``api.*`` and ``portal.*``) are converted before
        saving, so a malformed value never reaches the config file.

        Args:
            key: Configuration key, e.g. portal.page_size
            value: Raw value

        Returns:
            The value as stored

        Raises:
            ValueError: If the value is rejected; the file is left unchanged
        """
        converted = convert_setting(key, value)
        logger.debug("Setting config value", key=key, config_file=str(self.config_file))
        self._config[key] = converted
        self._save()
        return converted

    def unset(self, key: str) -> bool:
        """Remove a setting from this scope.

        Returns:
            True if the key was present and removed
        """
        if key not in self._config:
            logger.debug("Config value not set in this scope", key=key)
            return False
        logger.debug("Unsetting config value", key=key)
        del self._config[key]
        self._save()
        return True

    def source(self, key: str) -> str | None:
        """Name where a key's effective value comes from.

        Returns:
            "local", "global" or "default" (a built-in portal default), or None if unset
        """
        if key in self._config:
            return "global" if self.is_global else "local"
        if not self.is_global and key in self._global_config:
            return "global"
        if setting_default(key) is not None:
            return "default"
        return None

    def list(self) -> dict[str, Any]:
        """List all configuration settings.

        For local config, merges global config with local config (local takes precedence).
        """
        if self.is_global:
            return self._config.copy()
        merged = self._global_config.copy()
        merged.update(self._config)
        return merged


def get_config(use_global: bool = False) -> Config:
    """Get a configuration instance.

    Args:
        use_global: If True, return global config. If False, return local config with global fallback.

    Returns:
        Config instance
    """
    return Config(use_global=use_global)


def _base_url(value: Any) -> str:
    url = str(value).strip()
    if not url.startswith(("http://", "https://")):
        raise ValueError("must be an http:// or https:// URL")
    return url


def _positive_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("must be a positive integer")
    try:
        number = float(str(value).strip())
    except ValueError:
        raise ValueError("must be a positive integer") from None
    if not number.is_integer() or number <= 0:
        raise ValueError("must be a positive integer")
    return int(number)


def _positive_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError("must be a positive number of seconds")
    try:
        number = float(str(value).strip())
    except ValueError:
        raise ValueError("must be a positive number of seconds") from None
    if number <= 0:
        raise ValueError("must be a positive number of seconds")
    return number


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off"):
        return False
    raise ValueError("must be true or false")


# Known settings: key -> (converter, default). A default of None means required.
SETTINGS: dict[str, tuple[Callable[[Any], Any], Any]] = {
    "api.base_url": (_base_url, None),
    "api.timeout": (_positive_float, 10.0),
    "portal.page_size": (_positive_int, 10),
    "portal.success_delay": (_positive_float, 3.0),
    "portal.error_delay": (_positive_float, 5.0),
    "portal.discard_stale_loads": (_as_bool, False),
}

SETTING_PREFIXES = ("api.", "portal.")


def convert_setting(key: str, value: Any) -> Any:
    """Convert a raw setting value to the type the portal uses.

    Keys outside the ``api.`` and ``portal.`` namespaces are passed through.

    Args:
        key: Configuration key
        value: Raw value, usually text from the command line

    Returns:
        The converted value

    Raises:
        ValueError: If the key is an unknown portal setting or the value is malformed
    """
    if key not in SETTINGS:
        if key.startswith(SETTING_PREFIXES):
            raise ValueError(f"Unknown setting: {key}. Choose from: {', '.join(SETTINGS)}")
        return value
    converter, _default = SETTINGS[key]
    try:
        return converter(value)
    except ValueError as e:
        raise ValueError(f"Invalid value for {key}: {e}") from e


def setting_default(key: str) -> Any:
    """Return the built-in default of a known setting, or None."""
    return SETTINGS[key][1] if key in SETTINGS else None


@dataclass(frozen=True)
class PortalSettings:
    """Typed view of the settings the portal needs."""

    base_url: str
    timeout: float = 10.0
    page_size: int = 10
    success_delay: float = 3.0
    error_delay: float = 5.0
    discard_stale_loads: bool = False

    @classmethod
    def from_config(cls, config: Config) -> "PortalSettings":
        """Read and validate settings from a Config.

        Values are converted with the same rules ``portal config set`` applies,
        so a hand-edited config file is checked as strictly as the command.

        Raises:
            ValueError: If the base URL is missing or a value is malformed
        """
        if not config.get("api.base_url"):
            raise ValueError(
                "API base URL not configured. Set it using:\n"
                "  portal config set api.base_url https://host/api"
            )
        values = {key: convert_setting(key, config.get(key, setting_default(key))) for key in SETTINGS}
        return cls(
            base_url=values["api.base_url"],
            timeout=values["api.timeout"],
            page_size=values["portal.page_size"],
            success_delay=values["portal.success_delay"],
            error_delay=values["portal.error_delay"],
            discard_stale_loads=values["portal.discard_stale_loads"],
        )
