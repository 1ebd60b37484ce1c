"""
Configuration loader for option-mark recognition.

Reads the ``recognition`` section of the shared alignment config.yaml.
"""

import logging
from pathlib import Path

import yaml

from src.mark_recognition.types import RecognitionConfig
from src.sheet_alignment.config_loader import DEFAULT_CONFIG_PATH

logger = logging.getLogger(__name__)


def load_recognition_config(config_path: Path = DEFAULT_CONFIG_PATH) -> RecognitionConfig:
    """
    Load recognition configuration from YAML file.

    A file without a ``recognition`` section yields the defaults.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If values are invalid.
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    section = raw.get("recognition") or {}
    defaults = RecognitionConfig()
    try:
        config = RecognitionConfig(
            binary_threshold=int(section.get("binary_threshold", defaults.binary_threshold)),
            min_option_area=float(section.get("min_option_area", defaults.min_option_area)),
            max_option_area=float(section.get("max_option_area", defaults.max_option_area)),
            min_circularity=float(section.get("min_circularity", defaults.min_circularity)),
            row_tolerance=float(section.get("row_tolerance", defaults.row_tolerance)),
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid configuration file: {e}") from e

    validate_recognition_config(config)
    logger.debug(f"Loaded recognition config from {config_path}")
    return config


def validate_recognition_config(config: RecognitionConfig) -> None:
    """
    Raises:
        ValueError: If any configuration value is invalid.
    """
    if not 0 <= config.binary_threshold <= 255:
        raise ValueError("binary_threshold must be within [0, 255]")
    if config.min_option_area <= 0:
        raise ValueError("min_option_area must be positive")
    if config.max_option_area <= config.min_option_area:
        raise ValueError("max_option_area must be greater than min_option_area")
    if not 0 <= config.min_circularity <= 1:
        raise ValueError("min_circularity must be within [0, 1]")
    if config.row_tolerance < 0:
        raise ValueError("row_tolerance cannot be negative")
