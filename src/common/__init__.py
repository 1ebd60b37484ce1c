"""
Common types and utilities shared across all modules.

This module provides standardized data types for the answer-sheet pipeline,
ensuring consistency and type safety across alignment and mark recognition.
"""

from src.common.types import Point2D, RasterImage, array_to_points, points_to_array

__all__ = ["RasterImage", "Point2D", "array_to_points", "points_to_array"]
