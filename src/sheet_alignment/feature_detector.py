"""
Feature point detection for the Sheet Alignment module.

Collects candidate registration points from a binary mask using two
independent sources, then merges and deduplicates them:

1. Endpoints of probabilistic Hough line segments
2. Corners of external contours that approximate to quadrilaterals
"""

import logging
from typing import Optional

import cv2
import numpy as np

from src.sheet_alignment.geometry import (
    approximate_polygon,
    dedup_points,
    find_external_contours,
)
from src.sheet_alignment.resources import buffer_scope
from src.sheet_alignment.types import DetectionConfig, DetectionResult

logger = logging.getLogger(__name__)


class FeatureDetector:
    """
    Line-segment and contour-corner extractor.

    ``detect`` never raises: any internal fault is logged and reported as an
    unsuccessful DetectionResult with no points.

    Example:
        >>> detector = FeatureDetector()
        >>> result = detector.detect(binary)
        >>> if result.success:
        ...     print(result.points[:4])
    """

    def __init__(self, config: Optional[DetectionConfig] = None):
        self.config = config or DetectionConfig()

    def line_endpoints(self, binary: np.ndarray) -> np.ndarray:
        """Both endpoints of every detected segment, shape (2 * L, 2)."""
        cfg = self.config
        lines = cv2.HoughLinesP(
            binary,
            cfg.hough_rho,
            np.deg2rad(cfg.hough_theta_deg),
            cfg.hough_threshold,
            minLineLength=cfg.min_line_length,
            maxLineGap=cfg.max_line_gap,
        )
        if lines is None:
            return np.zeros((0, 2), dtype=np.float32)
        return lines.reshape(-1, 2).astype(np.float32)

    def contour_corners(self, binary: np.ndarray) -> np.ndarray:
        """Vertices of external contours that approximate to 4-gons, shape (4 * Q, 2)."""
        cfg = self.config
        corners = []
        for contour in find_external_contours(binary):
            if cv2.contourArea(contour) <= cfg.min_quad_area:
                continue
            approx = approximate_polygon(contour, cfg.approx_epsilon_ratio)
            if len(approx) == 4:
                corners.append(approx)

        if not corners:
            return np.zeros((0, 2), dtype=np.float32)
        return np.concatenate(corners, axis=0)

    def detect(self, binary: np.ndarray) -> DetectionResult:
        """
        Extract deduplicated feature points from a binary mask.

        Contour corners come first, followed by line endpoints, so that
        quadrilateral corners win over nearby segment endpoints during
        deduplication.

        Args:
            binary: Single-channel uint8 mask.

        Returns:
            DetectionResult with success True iff at least ``min_points``
            unique points were found.
        """
        try:
            with buffer_scope("detect") as scope:
                endpoints = scope.acquire("line_endpoints", self.line_endpoints(binary))
                corners = scope.acquire("contour_corners", self.contour_corners(binary))
                logger.debug(
                    f"Candidates: {len(corners)} contour corners, "
                    f"{len(endpoints)} line endpoints"
                )

                merged = scope.acquire("merged", np.concatenate([corners, endpoints], axis=0))
                points = dedup_points(merged, self.config.dedup_threshold)
        except Exception as e:
            logger.error(f"Feature detection failed: {e}")
            return DetectionResult(points=np.zeros((0, 2), dtype=np.float32), success=False)

        success = len(points) >= self.config.min_points
        log = logger.info if success else logger.warning
        log(f"Detected {len(points)} unique feature points (success={success})")
        return DetectionResult(points=points, success=success)
