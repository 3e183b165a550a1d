import yaml
import os
import logging
from typing import Optional
from dotenv import load_dotenv

from music_remote.utils.constants import RECONNECT_DELAY, TICK_INTERVAL, WS_PATH
from music_remote.utils.exceptions import ConfigError

"""
Configuration management for the music remote.

Configuration is read from environment variables (optionally loaded from a
.env file) and from an optional YAML file whose values take precedence.
"""

DEFAULT_CONFIG_PATH = os.path.join('config', 'config.yaml')


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


def default_config() -> dict:
    """
    Defaults drawn from the environment.

    Returns:
        dict: Configuration before the YAML file is applied
    """
    return {
        'origin': os.getenv('MUSIC_REMOTE_ORIGIN', 'http://localhost:3000'),
        'ws_path': os.getenv('MUSIC_REMOTE_WS_PATH', WS_PATH),
        'search_base': os.getenv('NEXT_PUBLIC_WEBSOCKET_URL', ''),
        'user_id': os.getenv('MUSIC_REMOTE_USER_ID'),
        'user_image_url': os.getenv('MUSIC_REMOTE_USER_IMAGE_URL'),
        'access_token': os.getenv('MUSIC_REMOTE_ACCESS_TOKEN'),
        'require_access_token': _env_bool('MUSIC_REMOTE_REQUIRE_TOKEN', 'true'),
        'reconnect_delay': os.getenv('MUSIC_REMOTE_RECONNECT_DELAY', RECONNECT_DELAY),
        'tick_interval': os.getenv('MUSIC_REMOTE_TICK_INTERVAL', TICK_INTERVAL),
        'log_level': os.getenv('LOG_LEVEL', 'INFO'),
        'log_dir': os.getenv('MUSIC_REMOTE_LOG_DIR', 'logs'),
        'debug': _env_bool('DEBUG', 'false'),
    }


def _validate(config: dict) -> dict:
    for key in ('reconnect_delay', 'tick_interval'):
        try:
            config[key] = float(config[key])
        except (TypeError, ValueError):
            raise ConfigError(f"{key} must be a number, got {config[key]!r}")
        if config[key] <= 0:
            raise ConfigError(f"{key} must be positive, got {config[key]}")

    origin = config.get('origin') or ''
    if not origin.startswith(('http://', 'https://')):
        raise ConfigError(f"origin must be an http or https URL, got {origin!r}")

    if config.get('user_id') is not None:
        config['user_id'] = str(config['user_id'])
    config['require_access_token'] = bool(config.get('require_access_token'))
    config['debug'] = bool(config.get('debug'))
    if config['debug']:
        config['log_level'] = 'DEBUG'
    return config


def load_config(config_path: Optional[str] = None, env_path: Optional[str] = None) -> dict:
    """
    Loads configuration from the environment and an optional config.yaml.

    Args:
        config_path: YAML file to read. Defaults to config/config.yaml
        env_path: .env file to load before reading the environment

    Returns:
        dict: Validated configuration

    Raises:
        ConfigError: If a value is invalid or the YAML file cannot be parsed
    """
    logger = logging.getLogger(__name__)

    env_path = env_path or '.env'
    if os.path.exists(env_path):
        logger.debug(f"Loading .env file from: {env_path}")
        load_dotenv(env_path)

    config = default_config()

    config_path = config_path or os.getenv('MUSIC_REMOTE_CONFIG', DEFAULT_CONFIG_PATH)
    if os.path.exists(config_path):
        logger.debug(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                yaml_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Error loading {config_path}: {e}")
        if yaml_config is not None and not isinstance(yaml_config, dict):
            raise ConfigError(f"{config_path} must contain a mapping")
        # YAML values override the environment defaults
        config = {**config, **(yaml_config or {})}

    return _validate(config)
