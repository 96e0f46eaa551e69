"""
Configuration loader module for EPUB Narrator.

Loads the YAML configuration, fills in defaults, interpolates environment
variables and validates the result.
"""

import copy
import os
import re
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

from epub_narrator.utils.validation import ConfigError, validate_config


PACKAGED_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "narrator.yaml"
CONFIG_ENV_VAR = "NARRATOR_CONFIG"

_ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')

DEFAULT_CONFIG: Dict[str, Any] = {
    "narrator": {
        "max_chars": 500,
        "workers": 1,
    },
    "extract": {
        "allowed_extensions": [".xhtml", ".html"],
        "fragment_dir": "xhtml",
    },
    "paths": {
        "work_dir": "tmp",
        "output_dir": "output",
        "jobs_dir": "jobs/processing/speech",
        "finished_audio_dir": "jobs/finished/speech",
    },
    "jobs": {
        "workflow_id": "T2S_default",
        "priority": 5,
        "voice_sample": "",
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
}


def load_env_file(env_path: str = ".env") -> None:
    """Load environment variables from a .env file if it exists.

    Existing environment variables win over values in the file.
    """
    env_file = Path(env_path)
    if not env_file.exists():
        return
    with open(env_file, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith('#') and '=' in line:
                key, value = line.split('=', 1)
                os.environ.setdefault(key.strip(), value.strip())


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load and validate the narrator configuration.

    Resolution order: explicit path, then the NARRATOR_CONFIG environment
    variable, then the configuration shipped with the package.

    Args:
        path: Optional path to a YAML configuration file.

    Returns:
        Validated configuration dictionary with defaults applied.

    Raises:
        ConfigError: If the file is missing, is not valid YAML, or holds
            invalid values.

    Examples:
        >>> config = load_config()
        >>> print(config["narrator"]["max_chars"])
        500
    """
    load_env_file()

    config_path = path or os.getenv(CONFIG_ENV_VAR) or str(PACKAGED_CONFIG_PATH)

    if not os.path.exists(config_path):
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {config_path}: {e}")

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    config = _merge_defaults(DEFAULT_CONFIG, _interpolate_env_vars(raw))
    config = validate_config(config)
    config["_config_path"] = config_path
    return config


def _merge_defaults(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge overrides onto a copy of defaults."""
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_defaults(merged[key], value)
        else:
            merged[key] = value
    return merged


def _interpolate_env_vars(obj):
    """Recursively interpolate environment variables in config values.

    Replaces ${VAR} or ${VAR:-default} with environment variable values.
    """
    if isinstance(obj, dict):
        return {key: _interpolate_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_interpolate_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        def replace_var(match):
            var_expr = match.group(1)
            if ':-' in var_expr:
                var_name, default_value = var_expr.split(':-', 1)
                return os.getenv(var_name, default_value)
            return os.getenv(var_expr, match.group(0))  # leave unresolved as-is

        return _ENV_VAR_PATTERN.sub(replace_var, obj)
    else:
        return obj
