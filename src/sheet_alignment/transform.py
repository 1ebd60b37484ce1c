"""
Perspective transform utilities.

Computes exact 4-point homographies and resamples images into the
template's coordinate frame.
"""

import logging
from typing import Tuple, Union

import cv2
import numpy as np

from src.sheet_alignment.exceptions import TransformError
from src.sheet_alignment.geometry import as_point_array

logger = logging.getLogger(__name__)

INTERPOLATION_FLAGS = {
    "linear": cv2.INTER_LINEAR,
    "cubic": cv2.INTER_CUBIC,
    "nearest": cv2.INTER_NEAREST,
    "area": cv2.INTER_AREA,
    "lanczos": cv2.INTER_LANCZOS4,
}


def compute_homography(
    src_points: Union[np.ndarray, list], dst_points: Union[np.ndarray, list]
) -> np.ndarray:
    """
    Solve the projective transform mapping 4 source points onto 4 destinations.

    Correspondences are positional: ``src_points[i]`` maps to
    ``dst_points[i]``. Only the first 4 entries of each input are used.
    No ordering, convexity or collinearity checks are made, so implausible
    inputs yield an unusable (but finite) matrix.

    Args:
        src_points: At least 4 points, shape (N, 2).
        dst_points: At least 4 points, shape (M, 2).

    Returns:
        3x3 float64 homography matrix.

    Raises:
        TransformError: If fewer than 4 points are given or the linear
            system cannot be solved.

    Example:
        >>> square = [[0, 0], [1, 0], [1, 1], [0, 1]]
        >>> compute_homography(square, square)
        array([[1., 0., 0.],
               [0., 1., 0.],
               [0., 0., 1.]])
    """
    src = as_point_array(src_points)
    dst = as_point_array(dst_points)
    if len(src) < 4 or len(dst) < 4:
        raise TransformError(
            f"Need 4 source and 4 destination points, got {len(src)} and {len(dst)}"
        )

    try:
        matrix = cv2.getPerspectiveTransform(src[:4], dst[:4])
    except cv2.error as e:
        raise TransformError(f"Homography solve failed: {e}") from e

    if matrix is None or matrix.shape != (3, 3) or not np.all(np.isfinite(matrix)):
        raise TransformError("Homography solve produced a non-finite matrix")

    logger.debug(f"Homography:\n{matrix}")
    return matrix


def warp_to_template(
    image: np.ndarray,
    matrix: np.ndarray,
    out_size: Tuple[int, int],
    interpolation: str = "linear",
    border_value: int = 0,
) -> np.ndarray:
    """
    Resample ``image`` through ``matrix`` onto a canvas of exactly ``out_size``.

    Each destination pixel is inverse-mapped into the source. Pixels whose
    source location falls outside the image keep ``border_value``.

    Args:
        image: Source image (H, W) or (H, W, C).
        matrix: 3x3 homography from source to destination coordinates.
        out_size: (width, height) of the output canvas.
        interpolation: One of linear, cubic, nearest, area, lanczos.
        border_value: Fill value for unmapped pixels.

    Returns:
        Warped image of shape (height, width[, C]).

    Raises:
        TransformError: If the size is not positive or OpenCV rejects the
            matrix.
    """
    width, height = int(out_size[0]), int(out_size[1])
    if width <= 0 or height <= 0:
        raise TransformError(f"Invalid output size: {width}x{height}")

    flags = INTERPOLATION_FLAGS.get(interpolation)
    if flags is None:
        raise TransformError(f"Unknown interpolation: {interpolation}")

    channels = 1 if image.ndim == 2 else image.shape[2]
    try:
        warped = cv2.warpPerspective(
            image,
            np.asarray(matrix, dtype=np.float64),
            (width, height),
            flags=flags,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=(border_value,) * max(channels, 1),
        )
    except cv2.error as e:
        raise TransformError(f"Perspective warp failed: {e}") from e

    # OpenCV collapses (H, W, 1) to (H, W)
    if image.ndim == 3 and warped.ndim == 2:
        warped = warped[:, :, np.newaxis]

    logger.info(f"Warped image to {width}x{height}")
    return warped
