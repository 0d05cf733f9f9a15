"""
Configuration Management - YAML-based configuration with environment overrides
=============================================================================

This module handles all configuration aspects including:
- Loading from YAML files
- Environment variable overrides
- Default values
- Configuration validation
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional, List
from dataclasses import dataclass, field, asdict

from .exceptions import ConfigError


DEFAULT_HINTS = [
    "Tell DumbOpenAI about your childhood…",
    "Tell DumbOpenAI what makes you happy…",
    "Tell DumbOpenAI your problems…",
    "Tell DumbOpenAI about your family…",
]


@dataclass
class ResponderConfig:
    """
    Responder configuration.

    Controls where rule data comes from and how many conversation
    sessions may be kept alive at once.
    """
    # Optional YAML rules file; empty means the built-in rules
    rules_file: str = ""

    # Session handling
    max_sessions: int = 1000
    session_ttl_seconds: int = 3600  # 0 disables expiry

    def validate(self) -> None:
        """Validate responder configuration parameters."""
        if self.max_sessions < 1:
            raise ConfigError(f"max_sessions must be at least 1, got {self.max_sessions}")

        if self.session_ttl_seconds < 0:
            raise ConfigError("session_ttl_seconds cannot be negative")

        if self.rules_file and not Path(self.rules_file).expanduser().is_file():
            raise ConfigError(
                f"Rules file not found: {self.rules_file}",
                {"path": self.rules_file}
            )


@dataclass
class UIConfig:
    """
    User interface configuration.

    Controls settings for both the terminal UI (TUI) and web UI,
    including server settings and reply pacing.
    """
    # Web UI settings
    web_host: str = "127.0.0.1"
    web_port: int = 8080
    web_debug: bool = False

    # Reply pacing
    reply_delay: float = 1.5        # seconds before the reply starts
    stream_interval: float = 0.05   # seconds per streamed character

    # Input placeholder rotation
    hint_interval: float = 3.0
    hints: List[str] = field(default_factory=lambda: list(DEFAULT_HINTS))

    def validate(self) -> None:
        """Validate UI configuration."""
        if self.web_port < 1 or self.web_port > 65535:
            raise ConfigError(f"Invalid web port: {self.web_port}")

        if self.reply_delay < 0:
            raise ConfigError("reply_delay cannot be negative")

        if self.stream_interval < 0:
            raise ConfigError("stream_interval cannot be negative")

        if self.hint_interval <= 0:
            raise ConfigError(f"hint_interval must be positive, got {self.hint_interval}")

        if not self.hints:
            raise ConfigError("At least one placeholder hint is required")


@dataclass
class Config:
    """
    Main configuration container.

    Aggregates all configuration sections into a single object
    and provides methods for loading, saving, and validating.
    """
    # Application settings
    app_name: str = "DumbOpenAI"
    version: str = "1.0.0"
    debug: bool = False

    # Configuration sections
    responder: ResponderConfig = field(default_factory=ResponderConfig)
    ui: UIConfig = field(default_factory=UIConfig)

    # Paths (set at runtime)
    config_dir: str = ""
    data_dir: str = ""
    log_dir: str = ""

    def validate(self) -> None:
        """
        Validate all configuration sections.

        Raises:
            ConfigError: If any configuration section is invalid
        """
        self.responder.validate()
        self.ui.validate()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "app_name": self.app_name,
            "version": self.version,
            "debug": self.debug,
            "responder": asdict(self.responder),
            "ui": asdict(self.ui),
        }


def get_default_config_dir() -> Path:
    """
    Get the default configuration directory path.

    Returns:
        Path to the configuration directory
    """
    if "DOCTOR_CONFIG_DIR" in os.environ:
        return Path(os.environ["DOCTOR_CONFIG_DIR"])

    if "XDG_CONFIG_HOME" in os.environ:
        return Path(os.environ["XDG_CONFIG_HOME"]) / "doctor-responder"

    return Path.home() / ".config" / "doctor-responder"


def get_default_data_dir() -> Path:
    """
    Get the default data directory path.

    Returns:
        Path to the data directory
    """
    if "DOCTOR_DATA_DIR" in os.environ:
        return Path(os.environ["DOCTOR_DATA_DIR"])

    if "XDG_DATA_HOME" in os.environ:
        return Path(os.environ["XDG_DATA_HOME"]) / "doctor-responder"

    return Path.home() / ".local" / "share" / "doctor-responder"


def load_config(config_path: Optional[str] = None, load_env: bool = True) -> Config:
    """
    Load configuration from YAML file with environment variable overrides.

    This function loads configuration in the following order:
    1. Default values from dataclass
    2. Values from YAML file
    3. Environment variable overrides

    Args:
        config_path: Path to configuration file (optional)
        load_env: Whether to load environment variable overrides

    Returns:
        Config object with loaded values

    Raises:
        ConfigError: If configuration is invalid or cannot be loaded
    """
    config = Config()

    config.config_dir = str(get_default_config_dir())
    config.data_dir = str(get_default_data_dir())
    config.log_dir = str(Path(config.data_dir) / "logs")

    if config_path:
        yaml_path = Path(config_path)
        if not yaml_path.exists():
            raise ConfigError("Config file not found", {"path": str(yaml_path)})
    else:
        yaml_path = Path(config.config_dir) / "config.yaml"

    if yaml_path.exists():
        try:
            with open(yaml_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config file: {e}", {"path": str(yaml_path)})
        except IOError as e:
            raise ConfigError(f"Failed to read config file: {e}", {"path": str(yaml_path)})

        if not isinstance(yaml_config, dict):
            raise ConfigError("Config file must contain a mapping", {"path": str(yaml_path)})

        _apply_yaml_config(config, yaml_config)

    if load_env:
        _apply_env_overrides(config)

    config.validate()

    return config


def _apply_yaml_config(config: Config, yaml_config: Dict[str, Any]) -> None:
    """
    Apply YAML configuration values to Config object.

    Unknown keys are ignored.

    Args:
        config: Config object to update
        yaml_config: Dictionary of configuration values from YAML
    """
    for key in ("app_name", "version", "debug"):
        if key in yaml_config:
            _set_value(config, key, yaml_config[key], key)

    for section in ("responder", "ui"):
        values = yaml_config.get(section)
        if not values:
            continue
        if not isinstance(values, dict):
            raise ConfigError(f"Config section '{section}' must be a mapping")

        section_obj = getattr(config, section)
        for key, value in values.items():
            if hasattr(section_obj, key):
                _set_value(section_obj, key, value, f"{section}.{key}")


def _set_value(target: Any, key: str, value: Any, name: str) -> None:
    """
    Set a config value, converting it to the type of the current value.

    Numbers may be given as numeric strings; booleans must be real YAML
    booleans.

    Raises:
        ConfigError: If the value cannot be used for this setting
    """
    current = getattr(target, key)
    expected = type(current)

    if expected is bool:
        if isinstance(value, bool):
            setattr(target, key, value)
            return
    elif expected in (int, float):
        if not isinstance(value, bool):
            try:
                setattr(target, key, expected(value))
                return
            except (TypeError, ValueError):
                pass
    elif expected is list:
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            setattr(target, key, list(value))
            return
    elif value is None:
        setattr(target, key, "")
        return
    elif isinstance(value, (str, int, float)) and not isinstance(value, bool):
        setattr(target, key, str(value))
        return

    raise ConfigError(
        f"Invalid value for {name}: {value!r} (expected {expected.__name__})",
        {"key": name}
    )


def _apply_env_overrides(config: Config) -> None:
    """
    Apply environment variable overrides to Config object.

    Environment variables follow the pattern: DOCTOR_SECTION_KEY
    For example: DOCTOR_RESPONDER_RULES_FILE, DOCTOR_UI_WEB_PORT

    Args:
        config: Config object to update
    """
    env_mappings = {
        "DOCTOR_DEBUG": (None, "debug", bool),

        # Responder settings
        "DOCTOR_RESPONDER_RULES_FILE": ("responder", "rules_file"),
        "DOCTOR_RESPONDER_MAX_SESSIONS": ("responder", "max_sessions", int),
        "DOCTOR_RESPONDER_SESSION_TTL_SECONDS": ("responder", "session_ttl_seconds", int),

        # UI settings
        "DOCTOR_UI_WEB_HOST": ("ui", "web_host"),
        "DOCTOR_UI_WEB_PORT": ("ui", "web_port", int),
        "DOCTOR_UI_WEB_DEBUG": ("ui", "web_debug", bool),
        "DOCTOR_UI_REPLY_DELAY": ("ui", "reply_delay", float),
        "DOCTOR_UI_STREAM_INTERVAL": ("ui", "stream_interval", float),
    }

    for env_var, mapping in env_mappings.items():
        value = os.environ.get(env_var)
        if value is None:
            continue

        section = mapping[0]
        key = mapping[1]
        converter = mapping[2] if len(mapping) > 2 else str

        target = getattr(config, section) if section else config

        if converter == bool:
            converted = value.lower() in ("true", "1", "yes", "on")
        else:
            try:
                converted = converter(value)
            except ValueError:
                raise ConfigError(
                    f"Invalid value for {env_var}: {value!r}",
                    {"variable": env_var}
                )

        setattr(target, key, converted)


def save_config(config: Config, config_path: Optional[str] = None) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Config object to save
        config_path: Path to save configuration (optional)

    Raises:
        ConfigError: If configuration cannot be saved
    """
    if config_path:
        yaml_path = Path(config_path)
    else:
        yaml_path = Path(config.config_dir) / "config.yaml"

    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False,
                      sort_keys=False, allow_unicode=True)
    except IOError as e:
        raise ConfigError(f"Failed to save config file: {e}", {"path": str(yaml_path)})


def create_default_config(config_dir: Optional[str] = None) -> Config:
    """
    Create a default configuration file with sensible defaults.

    Creates the configuration directory structure and writes a
    default config.yaml file that can be customized.

    Args:
        config_dir: Directory to create configuration in (optional)

    Returns:
        Config object with default values
    """
    config = Config()

    if config_dir:
        config.config_dir = config_dir
        config.data_dir = str(Path(config_dir) / "data")
        config.log_dir = str(Path(config_dir) / "logs")
    else:
        config.config_dir = str(get_default_config_dir())
        config.data_dir = str(get_default_data_dir())
        config.log_dir = str(Path(config.data_dir) / "logs")

    Path(config.config_dir).mkdir(parents=True, exist_ok=True)
    Path(config.data_dir).mkdir(parents=True, exist_ok=True)
    Path(config.log_dir).mkdir(parents=True, exist_ok=True)

    save_config(config)

    return config
