"""Configuration loading.

Settings come from a YAML or JSON file layered over built-in defaults, with
``RELEASE_METRICS_ROOT`` (environment or ``.env``) overriding the metrics root.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import dotenv
import yaml
from loguru import logger

from .errors import ConfigError


DEFAULT_CONFIG_PATH = "config/metrics_config.yaml"
ROOT_ENV_VAR = "RELEASE_METRICS_ROOT"

DEFAULT_CONFIG: Dict[str, Any] = {
    'metrics': {
        'root': 'metrics',
        'summary_stats_dir': 'theme_column_summary_stats',
        'top_countries': 50,
        'parallel': True,
        'max_concurrent_files': 8,
        'verify_tolerance_percent': 2.0,
    },
    'server': {
        'host': 'localhost',
        'port': 3000,
    },
    'llm': {
        'model': 'gpt-4o-mini',
        'temperature': 0.3,
        'api_base_url': None,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str] = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """Load configuration from file, falling back to defaults.

    Supports both JSON and YAML formats. Format is auto-detected by file extension.

    Args:
        config_path: Path to the configuration file. ``None`` skips the file.

    Returns:
        Configuration dictionary

    Raises:
        ConfigError: If the file exists but cannot be read or parsed
    """
    dotenv.load_dotenv()
    config = copy.deepcopy(DEFAULT_CONFIG)

    config_file = Path(config_path) if config_path else None
    if config_file is not None and config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                if config_file.suffix.lower() in ['.yaml', '.yml']:
                    config_data = yaml.safe_load(f)
                else:
                    config_data = json.load(f)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to load config from {config_path}: {e}") from e

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigError(f"Config {config_path} must be a mapping at the top level")

        config = _deep_merge(config, config_data)
        for section in DEFAULT_CONFIG:
            if not isinstance(config[section], dict):
                raise ConfigError(f"Config section '{section}' in {config_path} must be a mapping")
        logger.info(f"Loaded config from {config_path}")
    elif config_file is not None:
        logger.info(f"Config file {config_path} not found, using defaults")

    env_root = os.environ.get(ROOT_ENV_VAR)
    if env_root:
        config['metrics']['root'] = env_root

    return config
