"""
Option-mark recognition on aligned answer sheets.

Finds dark, roughly round blobs in an aligned sheet and reports them in
reading order (top-to-bottom, then left-to-right within a row).
"""

import logging
import math
from typing import List, Optional, Union

import cv2
import numpy as np

from src.common.types import RasterImage
from src.mark_recognition.config_loader import validate_recognition_config
from src.mark_recognition.types import OptionMark, RecognitionConfig, RecognitionResult
from src.sheet_alignment.exceptions import PreprocessError
from src.sheet_alignment.geometry import find_external_contours
from src.sheet_alignment.preprocessor import to_grayscale
from src.sheet_alignment.resources import buffer_scope

logger = logging.getLogger(__name__)


def circularity(area: float, perimeter: float) -> float:
    """4π·area / perimeter²; 0.0 for a degenerate contour."""
    if perimeter <= 0:
        return 0.0
    return 4.0 * math.pi * area / (perimeter * perimeter)


def sort_marks(marks: List[OptionMark], row_tolerance: float = 20.0) -> List[OptionMark]:
    """
    Order marks top-to-bottom, then left-to-right.

    Marks are grouped into rows: a mark joins the current row when its y is
    within ``row_tolerance`` of the row's first (topmost) mark.
    """
    rows: List[List[OptionMark]] = []
    for mark in sorted(marks, key=lambda m: (m.y, m.x)):
        if rows and abs(mark.y - rows[-1][0].y) < row_tolerance:
            rows[-1].append(mark)
        else:
            rows.append([mark])
    return [mark for row in rows for mark in sorted(row, key=lambda m: m.x)]


class OptionRecognizer:
    """
    Extracts filled option marks from an aligned sheet.

    Example:
        >>> recognizer = OptionRecognizer()
        >>> result = recognizer.recognize(aligned.image)
        >>> [(m.x, m.y) for m in result.marks]
        [(100, 150), (200, 150), (100, 250)]
    """

    def __init__(self, config: Optional[RecognitionConfig] = None):
        self.config = config or RecognitionConfig()
        validate_recognition_config(self.config)

    def analyze_contours(self, contours: List[np.ndarray]) -> List[OptionMark]:
        cfg = self.config
        marks = []
        for contour in contours:
            area = cv2.contourArea(contour)
            if area < cfg.min_option_area or area > cfg.max_option_area:
                continue

            roundness = circularity(area, cv2.arcLength(contour, True))
            if roundness < cfg.min_circularity:
                continue

            x, y, w, h = cv2.boundingRect(contour)
            marks.append(
                OptionMark(
                    x=int(x),
                    y=int(y),
                    width=int(w),
                    height=int(h),
                    area=float(area),
                    circularity=float(roundness),
                    confidence=float(min(1.0, area / cfg.max_option_area)),
                )
            )
        return sort_marks(marks, cfg.row_tolerance)

    def recognize(self, image: Union[RasterImage, np.ndarray]) -> RecognitionResult:
        """
        Find filled marks in an aligned image.

        Returns:
            RecognitionResult; faults are reported with success False.
        """
        try:
            with buffer_scope("recognize") as scope:
                gray = scope.acquire("gray", to_grayscale(image))
                _, binary = cv2.threshold(
                    gray, self.config.binary_threshold, 255, cv2.THRESH_BINARY_INV
                )
                scope.acquire("binary", binary)
                contours = scope.acquire("contours", find_external_contours(binary))
                marks = self.analyze_contours(contours)
        except (PreprocessError, cv2.error) as e:
            logger.error(f"Option recognition failed: {e}")
            return RecognitionResult(success=False, message=f"Recognition failed: {e}")

        logger.info(f"Recognized {len(marks)} option marks")
        return RecognitionResult(
            success=True,
            marks=marks,
            message=f"Recognized {len(marks)} filled option marks",
        )
