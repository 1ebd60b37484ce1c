"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules.
"""

import cv2
import numpy as np
import pytest

TEMPLATE_WIDTH = 800
TEMPLATE_HEIGHT = 600


def draw_answer_sheet(width: int = TEMPLATE_WIDTH, height: int = TEMPLATE_HEIGHT) -> np.ndarray:
    """Synthetic answer sheet: white page, outer frame, 4 corner marks, bubble grid."""
    image = np.full((height, width, 3), 255, dtype=np.uint8)

    cv2.rectangle(image, (30, 30), (width - 31, height - 31), (0, 0, 0), 4)

    mark = 40
    for x, y in [
        (50, 50),
        (width - 50 - mark, 50),
        (width - 50 - mark, height - 50 - mark),
        (50, height - 50 - mark),
    ]:
        cv2.rectangle(image, (x, y), (x + mark, y + mark), (0, 0, 0), -1)

    for row in range(5):
        for col in range(4):
            center = (200 + col * 120, 180 + row * 60)
            cv2.circle(image, center, 12, (0, 0, 0), 2)

    return image


@pytest.fixture
def sheet_template():
    """800x600 BGR template with a clear quadrilateral frame and corner marks."""
    return draw_answer_sheet()


@pytest.fixture
def rotated_sample(sheet_template):
    """The template rotated 3 degrees and scaled 0.95 about its center."""
    h, w = sheet_template.shape[:2]
    matrix = cv2.getRotationMatrix2D((w / 2, h / 2), 3, 0.95)
    return cv2.warpAffine(
        sheet_template, matrix, (w, h), borderValue=(255, 255, 255)
    )


@pytest.fixture
def framed_sheet_photo():
    """
    A bright sheet on a dark background; the sheet covers ~50% of the frame.

    Returns:
        (image, corners) where corners are TL, TR, BR, BL.
    """
    image = np.zeros((300, 400, 3), dtype=np.uint8)
    corners = np.array([[58, 38], [342, 42], [340, 262], [60, 258]], dtype=np.int32)
    cv2.fillPoly(image, [corners], (255, 255, 255))
    return image, corners.astype(np.float32)


@pytest.fixture
def blank_image():
    """Uniformly white frame with nothing on it."""
    return np.full((300, 400, 3), 255, dtype=np.uint8)


@pytest.fixture
def dark_bordered_quad():
    """White page with a 4px dark quadrilateral outline covering ~50% of it."""
    image = np.full((300, 400, 3), 255, dtype=np.uint8)
    corners = np.array([[58, 38], [342, 42], [340, 262], [60, 258]], dtype=np.int32)
    cv2.polylines(image, [corners], True, (0, 0, 0), 4)
    return image
