"""
Main processor for the Sheet Alignment module.

Owns the template session and orchestrates the pipeline:
1. Preprocessing (grayscale + best-of-three binarization)
2. Feature detection (line endpoints + quadrilateral corners)
3. Primary alignment (4-point homography + perspective warp)
4. Fallback alignment (largest outer frame) when 2 or 3 fails

All faults are caught at the public boundary and reported as tagged
AlignmentResult objects.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

from src.common.types import RasterImage
from src.sheet_alignment.config_loader import load_config
from src.sheet_alignment.exceptions import (
    AlignmentError,
    DetectionFailure,
    TransformError,
)
from src.sheet_alignment.fallback import FallbackAligner
from src.sheet_alignment.feature_detector import FeatureDetector
from src.sheet_alignment.geometry import rectangle_corners
from src.sheet_alignment.image_loader import ImageSource, load_image
from src.sheet_alignment.preprocessor import Preprocessor
from src.sheet_alignment.resources import buffer_scope
from src.sheet_alignment.transform import compute_homography, warp_to_template
from src.sheet_alignment.types import (
    AlignerState,
    AlignmentConfig,
    AlignmentMethod,
    AlignmentResult,
    FailureKind,
    TemplateSession,
)

logger = logging.getLogger(__name__)


class SheetAligner:
    """
    Aligns answer-sheet photos to a reference template.

    A SheetAligner holds one template session. It is initialized once with
    the template and then reused for any number of samples. Instances are
    independent of each other. Calls on one instance must be serialized by
    the caller.

    Example:
        >>> aligner = SheetAligner()
        >>> await aligner.initialize_with_template("template.png")
        True
        >>> result = await aligner.align_user_image("photo.jpg")
        >>> if result.success:
        ...     cv2.imwrite("aligned.png", result.image)
    """

    def __init__(
        self,
        config: Optional[AlignmentConfig] = None,
        config_path: Optional[Path] = None,
    ):
        """
        Initialize the aligner.

        Args:
            config: Pre-loaded configuration object. If None, will load from file.
            config_path: Path to config file. If None, uses default location.
        """
        if config is not None:
            self.config = config
            logger.info("Using provided configuration")
        else:
            self.config = load_config(config_path) if config_path else load_config()
            logger.info("Loaded configuration from file")

        self.preprocessor = Preprocessor(self.config.preprocess)
        self.detector = FeatureDetector(self.config.detection)
        self.state = AlignerState.UNINITIALIZED
        self.session: Optional[TemplateSession] = None
        self.last_error: Optional[str] = None

    @property
    def ready(self) -> bool:
        return self.state == AlignerState.READY and self.session is not None

    async def initialize_with_template(self, image: ImageSource) -> bool:
        """
        Record the template's feature points and size.

        If fewer than 4 feature points are found, the four image corners
        are recorded instead.

        Args:
            image: Template as RasterImage, ndarray, file path or encoded bytes.

        Returns:
            True if the aligner is READY, False if initialization FAILED.
        """
        logger.info("=" * 60)
        logger.info("Initializing template session")
        logger.info("=" * 60)
        self.state = AlignerState.INITIALIZING
        self.session = None

        try:
            template = await load_image(image)
            self.session = self._build_session(template)
        except AlignmentError as e:
            return self._fail_initialization(str(e))
        except Exception as e:
            logger.exception("Unexpected fault during template initialization")
            return self._fail_initialization(f"Unexpected error: {e}")

        self.state = AlignerState.READY
        self.last_error = None
        logger.info(
            f"Template session ready: {self.session.width}x{self.session.height}, "
            f"{self.session.point_count} feature points"
        )
        return True

    def _build_session(self, template: RasterImage) -> TemplateSession:
        with buffer_scope("template") as scope:
            binary = scope.acquire("binary", self.preprocessor.binarize(template))
            detection = self.detector.detect(binary)

        if detection.success:
            return TemplateSession(
                template_points=detection.points,
                template_size=template.size,
            )

        logger.warning(
            f"Template feature detection found {detection.count} points; "
            "using the four image corners instead"
        )
        return TemplateSession(
            template_points=rectangle_corners(*template.size),
            template_size=template.size,
            used_corner_fallback=True,
        )

    def _fail_initialization(self, reason: str) -> bool:
        logger.error(f"Template initialization failed: {reason}")
        self.state = AlignerState.FAILED
        self.session = None
        self.last_error = reason
        return False

    async def align_user_image(self, image: ImageSource) -> AlignmentResult:
        """
        Align a sample image to the template.

        Args:
            image: Sample as RasterImage, ndarray, file path or encoded bytes.

        Returns:
            AlignmentResult. On success ``image`` has exactly the template's
            dimensions; on failure ``image`` is None and ``error`` explains why.
        """
        if not self.ready:
            logger.warning(f"align_user_image called in state {self.state.value}")
            return AlignmentResult.fail(
                FailureKind.NOT_INITIALIZED,
                f"Aligner is not ready for alignment (state: {self.state.value})",
            )

        self.state = AlignerState.ALIGNING
        try:
            sample = await load_image(image)
            return self._align(sample)
        except AlignmentError as e:
            logger.error(f"Alignment failed: {e}")
            return AlignmentResult.fail(e.kind, str(e))
        except Exception as e:
            logger.exception("Unexpected fault during alignment")
            return AlignmentResult.fail(FailureKind.UNEXPECTED, str(e))
        finally:
            # A re-initialization during decode owns the state from here
            if self.state == AlignerState.ALIGNING:
                self.state = AlignerState.READY

    def _align(self, sample: RasterImage) -> AlignmentResult:
        logger.info("=" * 60)
        logger.info(f"Aligning sample {sample.width}x{sample.height}")
        logger.info("=" * 60)

        with buffer_scope("align") as scope:
            binary = scope.acquire("binary", self.preprocessor.binarize(sample))
            detection = self.detector.detect(binary)

        try:
            sample_points = detection.require(self.config.detection.min_points)
            aligned = self._primary_align(sample.to_numpy(), sample_points)
            logger.info("Alignment PASSED via primary path")
            return AlignmentResult.ok(aligned, AlignmentMethod.PRIMARY)
        except (DetectionFailure, TransformError) as e:
            logger.warning(f"Primary alignment unavailable ({e}); trying fallback")

        fallback = FallbackAligner(
            self.session.template_size, self.config.fallback, self.config.warp
        )
        result = fallback.align(sample)
        if result.success:
            logger.info("Alignment PASSED via fallback path")
        return result

    def _primary_align(self, image: np.ndarray, sample_points: np.ndarray) -> np.ndarray:
        # Correspondence is positional: i-th sample point maps to i-th template point
        with buffer_scope("primary") as scope:
            matrix = scope.acquire(
                "homography",
                compute_homography(sample_points[:4], self.session.template_points[:4]),
            )
            return warp_to_template(
                image,
                matrix,
                self.session.template_size,
                interpolation=self.config.warp.interpolation,
                border_value=self.config.warp.border_value,
            )

    def get_status(self) -> Dict[str, Any]:
        """Snapshot of the aligner state for status displays."""
        return {
            "state": self.state.value,
            "ready": self.ready,
            "template_size": self.session.template_size if self.session else None,
            "template_points": self.session.point_count if self.session else 0,
            "used_corner_fallback": (
                self.session.used_corner_fallback if self.session else False
            ),
            "last_error": self.last_error,
        }

    def cleanup(self) -> None:
        """Tear down the template session."""
        self.session = None
        self.state = AlignerState.UNINITIALIZED
        self.last_error = None
        logger.info("Template session cleared")
