"""Configuration management for gcli.

Handles loading and saving YAML configuration from ~/.config/google-cli/.
"""

import os
import yaml
import logging
from pathlib import Path

from .exceptions import ConfigError

logger = logging.getLogger(__name__)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    env_path = os.getenv("GCLI_CONFIG_DIR")
    if env_path:
        return Path(env_path)
    return Path.home() / ".config" / "google-cli"


def get_config_file_path() -> Path:
    """
    Get the path to the config file, respecting the GCLI_CONFIG_FILE env var.
    """
    env_path = os.getenv("GCLI_CONFIG_FILE")
    if env_path:
        return Path(env_path)
    return get_config_dir() / "config.yaml"


def get_tokens_dir() -> Path:
    """Get the directory holding one OAuth token file per account."""
    return get_config_dir() / "tokens"


def get_scheduled_file_path() -> Path:
    """
    Get the path to the scheduled-email store, respecting GCLI_SCHEDULED_FILE.
    """
    env_path = os.getenv("GCLI_SCHEDULED_FILE")
    if env_path:
        return Path(env_path)
    return get_config_dir() / "scheduled.json"


def ensure_config_dir():
    """Create the config and tokens directories (owner-only) if missing."""
    get_config_dir().mkdir(mode=0o700, parents=True, exist_ok=True)
    get_tokens_dir().mkdir(mode=0o700, parents=True, exist_ok=True)


def _default_config() -> dict:
    return {"default_account": None, "accounts": {}}


def load_config() -> dict:
    """
    Load the gcli configuration from the config file.

    A missing file yields the default (empty) configuration.

    Raises:
        ConfigError: If the file exists but is not valid YAML
    """
    config_file = get_config_file_path()
    if not config_file.exists():
        logger.debug(f"Config file not found at {config_file}, using default config.")
        return _default_config()

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Error loading config file {config_file}: {e}")
        raise ConfigError(f"failed to parse config file {config_file}: {e}") from e

    if config is None:
        return _default_config()
    if not isinstance(config, dict):
        raise ConfigError(f"failed to parse config file {config_file}: expected a mapping")

    merged = _deep_merge(_default_config(), config)
    if merged.get("accounts") is None:
        merged["accounts"] = {}
    return merged


def save_config(config_data: dict):
    """Save the gcli configuration to the config file."""
    config_file = get_config_file_path()
    ensure_config_dir()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    with open(config_file, 'w') as f:
        yaml.safe_dump(config_data, f, default_flow_style=False)
    os.chmod(config_file, 0o600)
    logger.debug(f"Configuration saved to {config_file}")


def _deep_merge(base: dict, new: dict) -> dict:
    """Recursively merge dictionary `new` into `base`."""
    for k, v in new.items():
        if k in base and isinstance(base[k], dict) and isinstance(v, dict):
            base[k] = _deep_merge(base[k], v)
        else:
            base[k] = v
    return base
