"""
Configuration loader for the Sheet Alignment module.

Loads and validates configuration from config.yaml file.
"""

import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from src.sheet_alignment.types import (
    AlignmentConfig,
    DetectionConfig,
    FallbackConfig,
    PreprocessConfig,
    WarpConfig,
)

logger = logging.getLogger(__name__)

# Default configuration path (relative to this file)
DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"

VALID_INTERPOLATIONS = ["linear", "cubic", "nearest", "area", "lanczos"]


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> AlignmentConfig:
    """
    Load alignment configuration from YAML file.

    Args:
        config_path: Path to the configuration YAML file.

    Returns:
        Validated AlignmentConfig object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config is invalid or missing required fields.

    Example:
        >>> config = load_config()
        >>> print(config.detection.dedup_threshold)
        10.0
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.debug(f"Loading alignment config from {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw_config = yaml.safe_load(f)

    try:
        config = _parse_config(raw_config)
        _validate_config(config)
        logger.info("Successfully loaded alignment configuration")
        return config
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid configuration file: {e}") from e


def _parse_config(raw: Dict[str, Any]) -> AlignmentConfig:
    """Parse raw dictionary into structured config objects."""
    pre = raw["preprocess"]
    det = raw["detection"]
    fb = raw["fallback"]
    warp = raw.get("warp", {})

    return AlignmentConfig(
        preprocess=PreprocessConfig(
            adaptive_block_size=int(pre["adaptive_block_size"]),
            adaptive_c=float(pre["adaptive_c"]),
            fixed_threshold=int(pre["fixed_threshold"]),
            min_contour_area=float(pre["min_contour_area"]),
        ),
        detection=DetectionConfig(
            hough_rho=float(det["hough_rho"]),
            hough_theta_deg=float(det["hough_theta_deg"]),
            hough_threshold=int(det["hough_threshold"]),
            min_line_length=float(det["min_line_length"]),
            max_line_gap=float(det["max_line_gap"]),
            min_quad_area=float(det["min_quad_area"]),
            approx_epsilon_ratio=float(det["approx_epsilon_ratio"]),
            dedup_threshold=float(det["dedup_threshold"]),
            min_points=int(det.get("min_points", 4)),
        ),
        fallback=FallbackConfig(
            min_frame_area_ratio=float(fb["min_frame_area_ratio"]),
            approx_epsilon_ratio=float(fb["approx_epsilon_ratio"]),
        ),
        warp=WarpConfig(
            interpolation=str(warp.get("interpolation", "linear")),
            border_value=int(warp.get("border_value", 0)),
        ),
    )


def _validate_config(config: AlignmentConfig) -> None:
    """
    Validate configuration values for logical consistency.

    Raises:
        ValueError: If any configuration value is invalid.
    """
    pre = config.preprocess
    if pre.adaptive_block_size < 3 or pre.adaptive_block_size % 2 == 0:
        raise ValueError(
            f"adaptive_block_size must be an odd number >= 3, got {pre.adaptive_block_size}"
        )
    if not 0 <= pre.fixed_threshold <= 255:
        raise ValueError("fixed_threshold must be within [0, 255]")
    if pre.min_contour_area < 0:
        raise ValueError("min_contour_area cannot be negative")

    det = config.detection
    if det.hough_rho <= 0 or det.hough_theta_deg <= 0:
        raise ValueError("Hough accumulator resolutions must be positive")
    if det.hough_threshold < 1:
        raise ValueError("hough_threshold must be at least 1")
    if det.min_line_length < 0 or det.max_line_gap < 0:
        raise ValueError("Line length and gap cannot be negative")
    if det.min_quad_area < 0:
        raise ValueError("min_quad_area cannot be negative")
    if det.dedup_threshold <= 0:
        raise ValueError("dedup_threshold must be positive")
    if det.min_points < 4:
        raise ValueError("min_points must be at least 4 for a homography")

    for name, ratio in (
        ("detection.approx_epsilon_ratio", det.approx_epsilon_ratio),
        ("fallback.approx_epsilon_ratio", config.fallback.approx_epsilon_ratio),
        ("fallback.min_frame_area_ratio", config.fallback.min_frame_area_ratio),
    ):
        if not 0 < ratio <= 1:
            raise ValueError(f"{name} must be in (0, 1], got {ratio}")

    if config.warp.interpolation not in VALID_INTERPOLATIONS:
        raise ValueError(
            f"Invalid interpolation: {config.warp.interpolation}. "
            f"Must be one of {VALID_INTERPOLATIONS}"
        )
    if not 0 <= config.warp.border_value <= 255:
        raise ValueError("border_value must be within [0, 255]")

    logger.debug("Configuration validation passed")
