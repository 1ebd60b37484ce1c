"""
Data types and structures for the Sheet Alignment module.

Provides type-safe containers for configuration, session state and results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

from src.common.types import Point2D, array_to_points


class AlignerState(Enum):
    """Lifecycle of a SheetAligner."""

    UNINITIALIZED = "Uninitialized"
    INITIALIZING = "Initializing"
    READY = "Ready"
    ALIGNING = "Aligning"
    FAILED = "Failed"


class AlignmentMethod(Enum):
    """Which path produced an alignment."""

    PRIMARY = "Primary"  # Feature points + homography
    FALLBACK = "Fallback"  # Largest outer frame contour
    NONE = "None"


class FailureKind(Enum):
    """Tags carried by failed results."""

    NONE = "None"
    NOT_INITIALIZED = "Not Initialized"
    INPUT_ERROR = "Input Error"
    PREPROCESS_ERROR = "Preprocess Error"
    DETECTION_FAILURE = "Detection Failure"
    NO_OUTER_FRAME_FOUND = "No Outer Frame Found"
    NOT_QUADRILATERAL = "Not Quadrilateral"
    TRANSFORM_ERROR = "Transform Error"
    UNEXPECTED = "Unexpected Error"


@dataclass
class PreprocessConfig:
    """Configuration for binarization candidates and their scoring."""

    adaptive_block_size: int = 11
    adaptive_c: float = 2.0
    fixed_threshold: int = 128
    min_contour_area: float = 10.0  # Scoring: contours strictly larger count


@dataclass
class DetectionConfig:
    """Configuration for line-segment and contour-corner extraction."""

    hough_rho: float = 1.0  # Accumulator distance resolution (px)
    hough_theta_deg: float = 1.0  # Accumulator angle resolution (degrees)
    hough_threshold: int = 50
    min_line_length: float = 50.0
    max_line_gap: float = 10.0
    min_quad_area: float = 100.0
    approx_epsilon_ratio: float = 0.02  # Fraction of contour perimeter
    dedup_threshold: float = 10.0
    min_points: int = 4


@dataclass
class FallbackConfig:
    """Configuration for outer-frame fallback alignment."""

    min_frame_area_ratio: float = 0.10
    approx_epsilon_ratio: float = 0.02


@dataclass
class WarpConfig:
    """Configuration for perspective resampling."""

    interpolation: str = "linear"
    border_value: int = 0


@dataclass
class AlignmentConfig:
    """Complete sheet alignment configuration."""

    preprocess: PreprocessConfig = field(default_factory=PreprocessConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    fallback: FallbackConfig = field(default_factory=FallbackConfig)
    warp: WarpConfig = field(default_factory=WarpConfig)


@dataclass
class DetectionResult:
    """
    Output of feature detection.

    Attributes:
        points: Deduplicated feature points, float32 array of shape (N, 2),
            in order of first occurrence.
        success: True iff at least ``min_points`` unique points were found.
    """

    points: np.ndarray
    success: bool

    @property
    def count(self) -> int:
        return int(len(self.points))

    def as_points(self) -> List[Point2D]:
        return array_to_points(self.points)

    def require(self, min_points: int = 4) -> np.ndarray:
        """
        Return the points, or raise DetectionFailure if detection failed.

        Raises:
            DetectionFailure: If unsuccessful or fewer than ``min_points``.
        """
        from src.sheet_alignment.exceptions import DetectionFailure

        if not self.success or self.count < min_points:
            raise DetectionFailure(
                f"Found {self.count} feature points, need at least {min_points}"
            )
        return self.points


@dataclass(frozen=True)
class TemplateSession:
    """
    Reference geometry captured from the template image.

    Attributes:
        template_points: Feature points (N >= 4), float32 array (N, 2).
        template_size: (width, height) of the template in pixels.
        used_corner_fallback: True when detection failed and the four image
            corners were recorded instead.
    """

    template_points: np.ndarray
    template_size: Tuple[int, int]
    used_corner_fallback: bool = False

    @property
    def width(self) -> int:
        return self.template_size[0]

    @property
    def height(self) -> int:
        return self.template_size[1]

    @property
    def point_count(self) -> int:
        return int(len(self.template_points))


@dataclass
class AlignmentResult:
    """
    Output from the alignment pipeline.

    Attributes:
        success: True if an aligned image was produced.
        image: Aligned image with the template's exact dimensions
            (None on failure, never partial).
        error: Human-readable reason on failure, None otherwise.
        method: Which path produced the result.
        failure: Specific failure tag, FailureKind.NONE on success.
    """

    success: bool
    image: Optional[np.ndarray] = None
    error: Optional[str] = None
    method: AlignmentMethod = AlignmentMethod.NONE
    failure: FailureKind = FailureKind.NONE

    @classmethod
    def ok(cls, image: np.ndarray, method: AlignmentMethod) -> "AlignmentResult":
        return cls(success=True, image=image, method=method)

    @classmethod
    def fail(
        cls,
        failure: FailureKind,
        error: str,
        method: AlignmentMethod = AlignmentMethod.NONE,
    ) -> "AlignmentResult":
        return cls(success=False, error=error, method=method, failure=failure)

    def is_success(self) -> bool:
        return self.success

    def get_error_message(self) -> str:
        """Get human-readable outcome message."""
        if self.success:
            return f"Aligned via {self.method.value.lower()} path"
        return f"{self.failure.value}: {self.error}"
