"""
Geometry utilities for the Sheet Alignment module.

Point deduplication, corner ordering and contour helpers shared by the
feature detector and the fallback aligner.
"""

import logging
from typing import List, Tuple, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def as_point_array(points: Union[np.ndarray, list]) -> np.ndarray:
    """Convert points to a float32 array of shape (N, 2)."""
    return np.asarray(points, dtype=np.float32).reshape(-1, 2)


def dedup_points(points: Union[np.ndarray, list], threshold: float = 10.0) -> np.ndarray:
    """
    Remove near-duplicate points, keeping the first occurrence.

    A point is dropped when some already-kept point differs from it by
    strictly less than ``threshold`` on BOTH axes. Kept points retain their
    input order.

    Args:
        points: Candidate points, shape (N, 2).
        threshold: Per-axis merge distance in pixels (exclusive).

    Returns:
        Float32 array of shape (M, 2), M <= N.

    Example:
        >>> dedup_points([[0, 0], [9, 9], [10, 0]])
        array([[ 0.,  0.],
               [10.,  0.]], dtype=float32)
    """
    pts = as_point_array(points)
    unique = np.empty_like(pts)
    count = 0

    for point in pts:
        if count:
            deltas = np.abs(unique[:count] - point)
            if np.any((deltas[:, 0] < threshold) & (deltas[:, 1] < threshold)):
                continue
        unique[count] = point
        count += 1

    logger.debug(f"Deduplicated {len(pts)} candidate points to {count}")
    return unique[:count].copy()


def rectangle_corners(width: int, height: int) -> np.ndarray:
    """
    Corners of a width x height rectangle in canonical order.

    Returns:
        Float32 array [(0, 0), (W, 0), (W, H), (0, H)].
    """
    return np.array(
        [[0, 0], [width, 0], [width, height], [0, height]],
        dtype=np.float32,
    )


def sort_corners_by_angle(corners: Union[np.ndarray, list]) -> np.ndarray:
    """
    Order points by their angle around the centroid.

    Angles are measured with atan2 in image coordinates (y down), ascending,
    which yields a consistent cyclic order. The starting corner is whichever
    has the smallest angle; it is not guaranteed to be top-left.

    Args:
        corners: Points of shape (N, 2).

    Returns:
        Float32 array of the same points, angularly sorted.
    """
    pts = as_point_array(corners)
    center = pts.mean(axis=0)
    angles = np.arctan2(pts[:, 1] - center[1], pts[:, 0] - center[0])
    order = np.argsort(angles, kind="stable")
    return pts[order]


def find_external_contours(binary: np.ndarray) -> List[np.ndarray]:
    """Find outermost contours of a binary mask (simple chain approximation)."""
    contours, _ = cv2.findContours(binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    return list(contours)


def count_valid_contours(binary: np.ndarray, min_area: float = 10.0) -> int:
    """Count external contours whose area is strictly greater than ``min_area``."""
    contours = find_external_contours(binary)
    return sum(1 for contour in contours if cv2.contourArea(contour) > min_area)


def approximate_polygon(contour: np.ndarray, epsilon_ratio: float = 0.02) -> np.ndarray:
    """
    Approximate a closed contour with epsilon = ratio * perimeter.

    Returns:
        Float32 array of vertices, shape (K, 2).
    """
    epsilon = epsilon_ratio * cv2.arcLength(contour, True)
    approx = cv2.approxPolyDP(contour, epsilon, True)
    return as_point_array(approx)


def largest_contour(contours: List[np.ndarray]) -> Tuple[int, float]:
    """
    Index and area of the largest contour.

    Returns:
        (index, area), or (-1, 0.0) when ``contours`` is empty.
    """
    best_index, best_area = -1, 0.0
    for i, contour in enumerate(contours):
        area = cv2.contourArea(contour)
        if area > best_area:
            best_index, best_area = i, area
    return best_index, float(best_area)
