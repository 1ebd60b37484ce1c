"""
Preprocessing for the Sheet Alignment module.

Converts an input raster to grayscale, produces three candidate
binarizations and keeps the one with the most valid external contours:

1. Otsu global threshold (maximises between-class variance)
2. Gaussian adaptive threshold (11x11 neighbourhood, constant 2)
3. Fixed mid-gray threshold (128)
"""

import logging
from typing import List, Optional, Sequence, Tuple, Union

import cv2
import numpy as np

from src.common.types import RasterImage
from src.sheet_alignment.exceptions import PreprocessError
from src.sheet_alignment.geometry import count_valid_contours
from src.sheet_alignment.resources import buffer_scope
from src.sheet_alignment.types import PreprocessConfig

logger = logging.getLogger(__name__)

CANDIDATE_NAMES = ("otsu", "adaptive", "fixed")


def to_grayscale(image: Union[RasterImage, np.ndarray]) -> np.ndarray:
    """
    Convert a 1-, 3- or 4-channel image to a single-channel copy.

    3-channel input is treated as BGR, 4-channel as BGRA (alpha dropped).
    Single-channel input is copied unchanged.

    Raises:
        PreprocessError: If the image is missing, empty or has an
            unsupported channel count.
    """
    data = image.to_numpy() if isinstance(image, RasterImage) else image
    if data is None or data.size == 0 or data.ndim < 2:
        raise PreprocessError("Input image is missing or has zero width/height")
    if data.shape[0] == 0 or data.shape[1] == 0:
        raise PreprocessError("Input image has zero width/height")
    if data.dtype != np.uint8:
        raise PreprocessError(f"Expected uint8 pixels, got {data.dtype}")

    if data.ndim == 2:
        return data.copy()

    channels = data.shape[2]
    if channels == 1:
        return data[:, :, 0].copy()
    if channels == 3:
        return cv2.cvtColor(data, cv2.COLOR_BGR2GRAY)
    if channels == 4:
        return cv2.cvtColor(data, cv2.COLOR_BGRA2GRAY)

    raise PreprocessError(f"Unsupported channel count: {channels}")


def select_best_binary(
    candidates: Sequence[np.ndarray], min_contour_area: float = 10.0
) -> Tuple[int, List[Optional[int]]]:
    """
    Pick the candidate mask with the most external contours above ``min_area``.

    Ties keep the earliest candidate. A candidate whose scoring raises is
    skipped; if every candidate fails, index 0 is returned.

    Args:
        candidates: Binary masks to compare.
        min_contour_area: Contours must be strictly larger to count.

    Returns:
        Tuple of (winning_index, scores). ``scores[i]`` is None for a
        candidate that could not be scored.

    Example:
        >>> index, scores = select_best_binary([mask_a, mask_b, mask_c])
        >>> scores
        [2, 5, 3]
        >>> index
        1
    """
    best_index = 0
    best_score = -1
    scores: List[Optional[int]] = []

    for i, candidate in enumerate(candidates):
        try:
            score = count_valid_contours(candidate, min_contour_area)
        except cv2.error as e:
            logger.warning(f"Could not score binarization candidate {i}: {e}")
            scores.append(None)
            continue

        scores.append(score)
        logger.debug(f"Binarization candidate {i}: {score} valid contours")
        if score > best_score:
            best_score = score
            best_index = i

    return best_index, scores


class Preprocessor:
    """
    Grayscale conversion and binarization with quality-based selection.

    Example:
        >>> preprocessor = Preprocessor()
        >>> binary = preprocessor.binarize(cv2.imread("sheet.jpg"))
        >>> binary.dtype, binary.ndim
        (dtype('uint8'), 2)
    """

    def __init__(self, config: Optional[PreprocessConfig] = None):
        self.config = config or PreprocessConfig()
        self.last_scores: List[Optional[int]] = []
        self.last_choice: Optional[str] = None

    def candidates(self, gray: np.ndarray) -> List[np.ndarray]:
        """Produce the three candidate binarizations of a grayscale image."""
        _, otsu = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
        adaptive = cv2.adaptiveThreshold(
            gray,
            255,
            cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
            cv2.THRESH_BINARY,
            self.config.adaptive_block_size,
            self.config.adaptive_c,
        )
        _, fixed = cv2.threshold(
            gray, self.config.fixed_threshold, 255, cv2.THRESH_BINARY
        )
        return [otsu, adaptive, fixed]

    def binarize(self, image: Union[RasterImage, np.ndarray]) -> np.ndarray:
        """
        Binarize an image, keeping the best of three thresholding methods.

        Args:
            image: RasterImage or uint8 array with 1, 3 or 4 channels.

        Returns:
            Single-channel uint8 mask with values {0, 255}, same height and
            width as the input.

        Raises:
            PreprocessError: If the input is missing, has zero width/height,
                or OpenCV rejects it.
        """
        with buffer_scope("preprocess") as scope:
            gray = scope.acquire("gray", to_grayscale(image))
            logger.debug(f"Grayscale image: {gray.shape[1]}x{gray.shape[0]}")

            try:
                masks = self.candidates(gray)
            except cv2.error as e:
                raise PreprocessError(f"Binarization failed: {e}") from e

            for name, mask in zip(CANDIDATE_NAMES, masks):
                scope.acquire(name, mask)
            del masks

            index, scores = select_best_binary(
                [scope.get(name) for name in CANDIDATE_NAMES],
                self.config.min_contour_area,
            )
            self.last_scores = scores
            self.last_choice = CANDIDATE_NAMES[index]
            logger.info(
                f"Selected '{self.last_choice}' binarization "
                f"(valid contour counts: {dict(zip(CANDIDATE_NAMES, scores))})"
            )
            return scope.keep(self.last_choice)
