"""
Configuration loading for cvmark tooling.

Settings come from three layers, later ones winning:

1. DEFAULT_CONFIG
2. A YAML or JSON config file (CVMARK_CONFIG_PATH or an explicit path)
3. Explicit overrides (typically command line options); None values are skipped

Examples:
    >>> config = load_config(Path("cvmark.yaml"), overrides={"format": "rirekisho"})
    >>> config["format"]
    'rirekisho'
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

from cvmark.contexts.parsing.section_registry import OutputFormat

DEFAULT_CONFIG: Dict[str, Any] = {
    "format": OutputFormat.CV.value,
    "log_level": "INFO",
    "log_dir": None,
    "env_file": None,
}

VALID_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class ConfigError(ValueError):
    """
    Exception raised when a configuration file or value is invalid.

    Attributes:
        message: Error description
        path: Config file the value came from, if any
        key: Offending config key, if any
    """

    def __init__(self, message: str, path: Optional[Path] = None, key: Optional[str] = None):
        self.message = message
        self.path = path
        self.key = key

        parts = [message]
        if key:
            parts.append(f"Key: {key}")
        if path:
            parts.append(f"Config file: {path}")

        super().__init__("\n".join(parts))


def default_config_path() -> Optional[Path]:
    """Config path from the CVMARK_CONFIG_PATH environment variable, if set."""
    value = os.getenv("CVMARK_CONFIG_PATH")
    return Path(value) if value else None


def load_config(
    config_path: Path = None,
    overrides: Dict[str, Any] = None,
) -> Dict[str, Any]:
    """
    Load and merge cvmark settings.

    Args:
        config_path: Optional YAML/JSON config file (defaults to CVMARK_CONFIG_PATH)
        overrides: Values that take precedence over file and defaults

    Returns:
        Plain dict with every key of DEFAULT_CONFIG

    Raises:
        ConfigError: If the file is missing or malformed, or a value is invalid
    """
    if config_path is None:
        config_path = default_config_path()

    merged = OmegaConf.create(DEFAULT_CONFIG)

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigError("Configuration file not found", path=config_path)
        try:
            file_config = OmegaConf.load(config_path)
        except Exception as e:
            raise ConfigError(f"Could not read configuration file: {e}", path=config_path) from e
        if not OmegaConf.is_dict(file_config):
            raise ConfigError("Configuration file must contain a mapping", path=config_path)
        merged = OmegaConf.merge(merged, file_config)

    if overrides:
        present = {key: value for key, value in overrides.items() if value is not None}
        merged = OmegaConf.merge(merged, OmegaConf.create(present))

    config = OmegaConf.to_container(merged, resolve=True)
    _check_config(config, config_path)
    return config


def _check_config(config: Dict[str, Any], config_path: Optional[Path]) -> None:
    valid_formats = [f.value for f in OutputFormat]
    if config["format"] not in valid_formats:
        raise ConfigError(
            f"Invalid format '{config['format']}'. Expected one of: {', '.join(valid_formats)}",
            path=config_path,
            key="format",
        )

    level = str(config["log_level"]).upper()
    if level not in VALID_LOG_LEVELS:
        raise ConfigError(
            f"Invalid log level '{config['log_level']}'",
            path=config_path,
            key="log_level",
        )
    config["log_level"] = level


def load_env_file(env_path: Path) -> bool:
    """
    Load metadata fallbacks from a dotenv file.

    Variables already present in the environment are kept.

    Args:
        env_path: Path to the .env file

    Returns:
        True if at least one variable was read

    Raises:
        ConfigError: If the file does not exist
    """
    env_path = Path(env_path)
    if not env_path.exists():
        raise ConfigError("Environment file not found", path=env_path)
    return load_dotenv(env_path, override=False)
