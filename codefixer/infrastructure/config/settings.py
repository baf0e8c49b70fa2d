"""Provides functions for loading and accessing configuration settings.

Supports loading from a YAML configuration file (~/.codefixer/config.yaml),
a .env file and environment variables. Command-line flags are applied on top
of these values by the CLI.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from codefixer.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".codefixer"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"
ENV_PREFIX = "CODEFIXER_"

DEFAULTS: Dict[str, Any] = {
    "ollama.model": "codellama",
    "ollama.api_url": "http://localhost:11434/api/generate",
    "ollama.timeout_minutes": 30,
    "fix.max_chars": 10000,
    "fix.extensions": [".cs"],
    "fix.excluded_folders": ["bin", "obj"],
    "logging.level": "INFO",
    "logging.file": None,
    "logging.format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Turns nested YAML mappings into dotted keys ({'a': {'b': 1}} -> {'a.b': 1})."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, prefix=f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


def env_var_name(key: str) -> str:
    """Environment variable consulted for a dotted key, e.g. CODEFIXER_OLLAMA_MODEL."""
    return ENV_PREFIX + key.upper().replace(".", "_")


def load_configuration(config_file: Optional[Path] = None, env_file: Optional[Path] = None) -> None:
    """Loads configuration from the YAML file and the .env file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Built-in defaults

    Args:
        config_file: Path to the YAML configuration file (~/.codefixer/config.yaml if None).
        env_file: Path to the .env file (searches upwards from cwd if None).
    """
    global _config, _loaded
    if _loaded:
        logger.debug("Configuration already loaded.")
        return

    _config = {}
    config_file = config_file or DEFAULT_CONFIG_FILE

    # 1. YAML file (lowest priority)
    if config_file.exists():
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a mapping.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. .env file (override=False: real environment variables take precedence)
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path and load_dotenv(dotenv_path=dotenv_path, override=False):
        logger.info(f"Loaded environment variables from: {dotenv_path}")

    _loaded = True
    logger.debug("Configuration loading process completed.")


def reset_configuration() -> None:
    """Forgets loaded values so the next load_configuration reads the sources again."""
    global _config, _loaded
    _config = {}
    _loaded = False


def _coerce_env_value(value: str) -> Any:
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    try:
        if "." in value:
            return float(value)
        return int(value)
    except (ValueError, TypeError):
        return value


def get_config(key: str, default: Any = None) -> Any:
    """Get a configuration value by dotted key.

    Priority:
    1. Test configuration (if set)
    2. Environment variable (CODEFIXER_<KEY>)
    3. YAML config
    4. `default`, then the built-in default
    """
    if key in _test_config:
        return _test_config[key]

    env_key = env_var_name(key)
    if env_key in os.environ:
        return _coerce_env_value(os.environ[env_key])

    if key in _config:
        return _config[key]

    if default is not None:
        return default
    return DEFAULTS.get(key)


def get_list(key: str) -> List[str]:
    """Gets a list setting; comma-separated strings (from env vars) are split."""
    value = get_config(key)
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    raise ConfigurationError(f"Setting '{key}' must be a list, got {type(value).__name__}.")


def get_int(key: str) -> int:
    value = get_config(key)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Setting '{key}' must be an integer, got {value!r}.") from e


def get_float(key: str) -> float:
    value = get_config(key)
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Setting '{key}' must be a number, got {value!r}.") from e


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None


# --- Convenience Functions ---

def get_default_model() -> str:
    return str(get_config("ollama.model"))


def get_api_url() -> str:
    return str(get_config("ollama.api_url"))


def get_timeout_minutes() -> float:
    return get_float("ollama.timeout_minutes")


def get_max_chars() -> int:
    return get_int("fix.max_chars")


def get_extensions() -> List[str]:
    return get_list("fix.extensions")


def get_excluded_folders() -> List[str]:
    return get_list("fix.excluded_folders")


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """Set configuration values that override every other source."""
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")
