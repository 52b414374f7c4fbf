# promptassembler/config/loader.py
import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from loguru import logger

from .schema import AppConfig
from .paths import get_user_config_file

_cached_config: Optional[AppConfig] = None

def _read_json(config_path: Path, backup_corrupted: bool) -> dict:
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            logger.error(f"Config file {config_path} does not contain a JSON object, ignoring it.")
            return {}
        return data
    except (json.JSONDecodeError, OSError) as e:
        logger.error(f"Failed to load config file {config_path}: {e}")
        if backup_corrupted and isinstance(e, json.JSONDecodeError):
            try:
                backup_path = config_path.with_suffix(".json.corrupted")
                backup_path.unlink(missing_ok=True)
                config_path.rename(backup_path)
                logger.info(f"Backed up corrupted config to: {backup_path}")
            except OSError as backup_err:
                logger.error(f"Failed to backup corrupted config: {backup_err}")
        return {}

def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Loads the application configuration.

    An explicit config_path (CLI --config or a workspace .promptassembler.json) wins
    over the user config file. Invalid files fall back to defaults.
    """
    global _cached_config
    if config_path is None and _cached_config:
        return _cached_config

    loaded_data = {}
    if config_path is not None:
        if config_path.is_file():
            logger.info(f"Loading configuration from: {config_path}")
            loaded_data = _read_json(config_path, backup_corrupted=False)
        else:
            logger.warning(f"Config file {config_path} not found, using defaults.")
    else:
        user_path = get_user_config_file()
        if user_path.exists():
            logger.info(f"Loading user configuration from: {user_path}")
            loaded_data = _read_json(user_path, backup_corrupted=True)
        else:
            logger.info("No user config found. Using default settings.")

    try:
        config = AppConfig(**loaded_data)
        logger.debug("Configuration loaded successfully.")
    except ValidationError as e:
        logger.error(f"Configuration validation failed: {e}")
        logger.warning("Falling back to default configuration.")
        config = AppConfig()

    if config_path is None:
        _cached_config = config
    return config

def save_config(config: AppConfig, config_path: Optional[Path] = None) -> bool:
    """Saves the configuration using an atomic write via NamedTemporaryFile."""
    config_path = config_path or get_user_config_file()
    logger.info(f"Saving configuration to: {config_path}")
    temp_file_path: Optional[Path] = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        # Temp file lives next to the target so os.replace stays atomic
        with tempfile.NamedTemporaryFile(
            mode='w',
            encoding='utf-8',
            dir=config_path.parent,
            prefix=f".{config_path.name}_tmp",
            suffix=".json",
            delete=False
        ) as temp_f:
            temp_file_path = Path(temp_f.name)
            temp_f.write(config.model_dump_json(indent=4))
            temp_f.flush()
            os.fsync(temp_f.fileno())

        os.replace(temp_file_path, config_path)
        temp_file_path = None
        logger.info("Configuration saved successfully.")
        return True
    except (OSError, TypeError) as e:
        logger.error(f"Failed to save configuration to {config_path}: {e}")
        return False
    finally:
        if temp_file_path and temp_file_path.exists():
            logger.warning(f"Cleaning up leftover temporary config file: {temp_file_path}")
            try: temp_file_path.unlink()
            except OSError as unlink_err: logger.error(f"Failed to remove temporary config file {temp_file_path}: {unlink_err}")

def get_config() -> AppConfig:
    """Returns the cached configuration object, loading if necessary."""
    if _cached_config is None:
        return load_config()
    return _cached_config

def reset_config_cache() -> None:
    global _cached_config
    _cached_config = None
