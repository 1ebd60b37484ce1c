"""
Shared Utilities

Common functions used across all modules.
"""

from src.utils.io import load_json, save_image, save_json
from src.utils.visualization import (
    draw_feature_points,
    draw_option_marks,
    plot_alignment_comparison,
)

__all__ = [
    "load_json",
    "save_json",
    "save_image",
    "draw_feature_points",
    "draw_option_marks",
    "plot_alignment_comparison",
]
