"""
Answer-Sheet Alignment

Registers photographed or scanned answer sheets to a reference template so
that option marks can be read at fixed template coordinates.

Pipeline stages:
1. Preprocessing (grayscale + best-of-three binarization)
2. Feature detection (Hough segment endpoints + quadrilateral corners)
3. Homography estimation and perspective warp (primary path)
4. Outer-frame fallback when feature detection fails
"""

from src.sheet_alignment.config_loader import load_config
from src.sheet_alignment.exceptions import (
    AlignmentError,
    DetectionFailure,
    FallbackFailure,
    ImageLoadError,
    InputError,
    NoOuterFrameFound,
    NotQuadrilateral,
    PreprocessError,
    TransformError,
)
from src.sheet_alignment.fallback import FallbackAligner
from src.sheet_alignment.feature_detector import FeatureDetector
from src.sheet_alignment.geometry import dedup_points, sort_corners_by_angle
from src.sheet_alignment.image_loader import load_image
from src.sheet_alignment.preprocessor import Preprocessor
from src.sheet_alignment.processor import SheetAligner
from src.sheet_alignment.transform import compute_homography, warp_to_template
from src.sheet_alignment.types import (
    AlignerState,
    AlignmentConfig,
    AlignmentMethod,
    AlignmentResult,
    DetectionResult,
    FailureKind,
    TemplateSession,
)

__all__ = [
    "SheetAligner",
    "Preprocessor",
    "FeatureDetector",
    "FallbackAligner",
    "compute_homography",
    "warp_to_template",
    "dedup_points",
    "sort_corners_by_angle",
    "load_image",
    "load_config",
    "AlignerState",
    "AlignmentConfig",
    "AlignmentMethod",
    "AlignmentResult",
    "DetectionResult",
    "FailureKind",
    "TemplateSession",
    "AlignmentError",
    "InputError",
    "ImageLoadError",
    "PreprocessError",
    "DetectionFailure",
    "FallbackFailure",
    "NoOuterFrameFound",
    "NotQuadrilateral",
    "TransformError",
]
