"""
Validation utilities for EPUB Narrator.

Checks chunking parameters and the loaded configuration before any
processing starts.
"""

from typing import Dict, Any


REQUIRED_SECTIONS = ("narrator", "extract", "paths", "jobs", "logging")
REQUIRED_PATH_KEYS = ("work_dir", "output_dir", "jobs_dir", "finished_audio_dir")
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigError(ValueError):
    """Raised when configuration or a caller-supplied setting is invalid."""


def validate_max_chars(max_chars: Any) -> int:
    """Validate the maximum chunk length.

    Args:
        max_chars: Maximum number of characters (codepoints) per chunk.

    Returns:
        The validated value.

    Raises:
        ConfigError: If max_chars is not a positive integer.

    Examples:
        >>> validate_max_chars(500)
        500
    """
    # bool is an int subclass but never a meaningful length
    if isinstance(max_chars, bool) or not isinstance(max_chars, int):
        raise ConfigError(f"max_chars must be an integer, got {type(max_chars).__name__}")
    if max_chars <= 0:
        raise ConfigError(f"max_chars must be greater than 0, got {max_chars}")
    return max_chars


def validate_workers(workers: Any) -> int:
    """Validate the worker count used for parallel fragment processing."""
    if isinstance(workers, bool) or not isinstance(workers, int):
        raise ConfigError(f"workers must be an integer, got {type(workers).__name__}")
    if workers < 1:
        raise ConfigError(f"workers must be at least 1, got {workers}")
    return workers


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a merged configuration dictionary.

    Args:
        config: Configuration with defaults already applied.

    Returns:
        The same dictionary, with normalized extension list.

    Raises:
        ConfigError: If a section or key is missing or holds an invalid value.
    """
    for section in REQUIRED_SECTIONS:
        if section not in config or not isinstance(config[section], dict):
            raise ConfigError(f"Missing required section: {section}")

    validate_max_chars(config["narrator"].get("max_chars"))
    validate_workers(config["narrator"].get("workers"))

    for key in REQUIRED_PATH_KEYS:
        if not config["paths"].get(key):
            raise ConfigError(f"Missing required path key: {key}")

    extensions = config["extract"].get("allowed_extensions")
    if not isinstance(extensions, list) or not extensions:
        raise ConfigError("extract.allowed_extensions must be a non-empty list")
    # Accept "xhtml" as well as ".xhtml"
    config["extract"]["allowed_extensions"] = [
        ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions
    ]

    if not config["extract"].get("fragment_dir"):
        raise ConfigError("Missing required extract key: fragment_dir")

    priority = config["jobs"].get("priority")
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise ConfigError(f"jobs.priority must be an integer, got {priority!r}")

    level = str(config["logging"].get("level", "")).upper()
    if level not in VALID_LOG_LEVELS:
        raise ConfigError(f"Invalid log level: {config['logging'].get('level')}")
    config["logging"]["level"] = level

    return config
