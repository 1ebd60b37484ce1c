"""
Outer-frame fallback alignment.

Used when feature detection cannot find enough registration points. The
sheet is assumed to be the largest bright region in the frame; its outline is
approximated to a quadrilateral and warped onto the template rectangle.
"""

import logging
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from src.common.types import RasterImage
from src.sheet_alignment.exceptions import (
    FallbackFailure,
    NoOuterFrameFound,
    NotQuadrilateral,
    PreprocessError,
    TransformError,
)
from src.sheet_alignment.geometry import (
    approximate_polygon,
    find_external_contours,
    largest_contour,
    rectangle_corners,
    sort_corners_by_angle,
)
from src.sheet_alignment.preprocessor import to_grayscale
from src.sheet_alignment.resources import buffer_scope
from src.sheet_alignment.transform import compute_homography, warp_to_template
from src.sheet_alignment.types import (
    AlignmentMethod,
    AlignmentResult,
    FallbackConfig,
    WarpConfig,
)

logger = logging.getLogger(__name__)


def global_threshold(gray: np.ndarray) -> np.ndarray:
    """
    Otsu binarization; a zero-variance frame has no foreground.

    Otsu on a uniform image degenerates to threshold 0, which would turn a
    blank white frame into one frame-sized region.
    """
    if int(gray.min()) == int(gray.max()):
        return np.zeros_like(gray)
    _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    return binary


class FallbackAligner:
    """
    Largest-quadrilateral-contour alignment onto a fixed template rectangle.

    Args:
        template_size: (width, height) of the output canvas.
        config: Frame area and polygon approximation settings.
        warp_config: Interpolation and background settings.

    Example:
        >>> aligner = FallbackAligner((800, 600))
        >>> result = aligner.align(photo)
        >>> result.failure
        <FailureKind.NONE: 'None'>
    """

    def __init__(
        self,
        template_size: Tuple[int, int],
        config: Optional[FallbackConfig] = None,
        warp_config: Optional[WarpConfig] = None,
    ):
        self.template_size = (int(template_size[0]), int(template_size[1]))
        self.config = config or FallbackConfig()
        self.warp_config = warp_config or WarpConfig()

    def find_frame_corners(self, image: np.ndarray) -> np.ndarray:
        """
        Locate the 4 corners of the outer frame, angularly sorted.

        Raises:
            NoOuterFrameFound: If no contour covers the minimum frame area.
            NotQuadrilateral: If the largest contour does not reduce to 4 vertices.
        """
        frame_area = image.shape[0] * image.shape[1]
        min_area = frame_area * self.config.min_frame_area_ratio

        with buffer_scope("fallback") as scope:
            gray = scope.acquire("gray", to_grayscale(image))
            binary = scope.acquire("binary", global_threshold(gray))
            contours = scope.acquire("contours", find_external_contours(binary))

            index, area = largest_contour(contours)
            if index < 0 or area < min_area:
                raise NoOuterFrameFound(
                    f"Largest contour area {area:.0f}px² is below "
                    f"{self.config.min_frame_area_ratio:.0%} of the frame ({min_area:.0f}px²)"
                )

            approx = approximate_polygon(contours[index], self.config.approx_epsilon_ratio)
            if len(approx) != 4:
                raise NotQuadrilateral(
                    f"Outer frame approximates to {len(approx)} vertices, expected 4"
                )

        corners = sort_corners_by_angle(approx)
        logger.info(f"Outer frame found: area={area:.0f}px², corners={corners.tolist()}")
        return corners

    def align(self, sample: Union[RasterImage, np.ndarray]) -> AlignmentResult:
        """
        Align a sample by its outer frame.

        Returns:
            AlignmentResult with method FALLBACK. Failures are returned as
            tagged results, never raised.
        """
        image = sample.to_numpy() if isinstance(sample, RasterImage) else sample
        logger.info("Using outer-frame fallback alignment")

        try:
            src = self.find_frame_corners(image)
            dst = rectangle_corners(*self.template_size)
            matrix = compute_homography(src, dst)
            aligned = warp_to_template(
                image,
                matrix,
                self.template_size,
                interpolation=self.warp_config.interpolation,
                border_value=self.warp_config.border_value,
            )
        except (FallbackFailure, PreprocessError, TransformError) as e:
            logger.warning(f"Fallback alignment failed: {e}")
            return AlignmentResult.fail(e.kind, str(e), method=AlignmentMethod.FALLBACK)

        return AlignmentResult.ok(aligned, AlignmentMethod.FALLBACK)
