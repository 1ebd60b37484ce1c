"""
Unit tests for preprocessor module.
"""

import cv2
import numpy as np
import pytest

from src.common.types import RasterImage
from src.sheet_alignment.exceptions import PreprocessError
from src.sheet_alignment.preprocessor import (
    CANDIDATE_NAMES,
    Preprocessor,
    select_best_binary,
    to_grayscale,
)
from src.sheet_alignment.types import PreprocessConfig


def mask_with_squares(count: int) -> np.ndarray:
    """Binary mask with ``count`` separate 10x10 white squares."""
    mask = np.zeros((40, 400), dtype=np.uint8)
    for i in range(count):
        x = 10 + i * 25
        mask[10:20, x : x + 10] = 255
    return mask


class TestToGrayscale:
    """Tests for to_grayscale function."""

    def test_bgr_input(self):
        image = np.zeros((20, 30, 3), dtype=np.uint8)
        image[:, :, 2] = 255  # pure red in BGR

        gray = to_grayscale(image)

        assert gray.shape == (20, 30)
        assert gray[0, 0] == cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)[0, 0]

    def test_bgra_input_drops_alpha(self):
        image = np.full((20, 30, 4), 200, dtype=np.uint8)
        image[:, :, 3] = 0

        gray = to_grayscale(image)

        assert gray.shape == (20, 30)
        assert int(gray[5, 5]) == 200

    def test_single_channel_is_copied_unchanged(self):
        image = np.arange(600, dtype=np.uint8).reshape(20, 30)

        gray = to_grayscale(image)

        np.testing.assert_array_equal(gray, image)
        assert gray is not image

    def test_single_channel_3d_input(self):
        image = np.full((20, 30, 1), 77, dtype=np.uint8)

        gray = to_grayscale(image)

        assert gray.shape == (20, 30)
        assert int(gray.max()) == 77

    def test_raster_image_input(self):
        raster = RasterImage(data=np.full((10, 10, 3), 128, dtype=np.uint8))

        assert to_grayscale(raster).shape == (10, 10)

    @pytest.mark.parametrize(
        "image",
        [
            None,
            np.zeros((0, 10, 3), dtype=np.uint8),
            np.zeros((10, 0), dtype=np.uint8),
        ],
    )
    def test_zero_size_raises(self, image):
        with pytest.raises(PreprocessError):
            to_grayscale(image)

    def test_non_uint8_raises(self):
        with pytest.raises(PreprocessError, match="uint8"):
            to_grayscale(np.zeros((10, 10), dtype=np.float32))


class TestSelectBestBinary:
    """Tests for select_best_binary function."""

    def test_highest_contour_count_wins(self):
        """Counts {2, 5, 3}: the count-5 candidate is selected."""
        index, scores = select_best_binary(
            [mask_with_squares(2), mask_with_squares(5), mask_with_squares(3)]
        )

        assert scores == [2, 5, 3]
        assert index == 1

    def test_first_candidate_wins_ties(self):
        index, scores = select_best_binary(
            [mask_with_squares(3), mask_with_squares(3), mask_with_squares(1)]
        )

        assert scores == [3, 3, 1]
        assert index == 0

    def test_unscorable_candidate_is_skipped(self):
        bad = np.zeros((40, 400), dtype=np.float64)  # findContours rejects float64

        index, scores = select_best_binary([bad, mask_with_squares(2)])

        assert scores == [None, 2]
        assert index == 1

    def test_small_contours_do_not_count(self):
        tiny = np.zeros((40, 40), dtype=np.uint8)
        tiny[5:8, 5:8] = 255  # area 4
        tiny[20:23, 20:23] = 255

        index, scores = select_best_binary([tiny, mask_with_squares(1)], min_contour_area=10)

        assert scores == [0, 1]
        assert index == 1


class TestPreprocessor:
    """Tests for Preprocessor.binarize."""

    def test_binarize_returns_single_channel_mask(self, sheet_template):
        binary = Preprocessor().binarize(sheet_template)

        assert binary.shape == sheet_template.shape[:2]
        assert binary.dtype == np.uint8
        assert set(np.unique(binary).tolist()) <= {0, 255}

    def test_records_choice_and_scores(self, sheet_template):
        preprocessor = Preprocessor()
        preprocessor.binarize(sheet_template)

        assert preprocessor.last_choice in CANDIDATE_NAMES
        assert len(preprocessor.last_scores) == 3
        best = max(s for s in preprocessor.last_scores if s is not None)
        chosen = preprocessor.last_scores[CANDIDATE_NAMES.index(preprocessor.last_choice)]
        assert chosen == best

    def test_bgra_and_gray_inputs(self, sheet_template):
        preprocessor = Preprocessor()
        bgra = cv2.cvtColor(sheet_template, cv2.COLOR_BGR2BGRA)
        gray = cv2.cvtColor(sheet_template, cv2.COLOR_BGR2GRAY)

        assert preprocessor.binarize(bgra).shape == (600, 800)
        assert preprocessor.binarize(gray).shape == (600, 800)

    def test_zero_size_input_raises(self):
        with pytest.raises(PreprocessError):
            Preprocessor().binarize(np.zeros((0, 0, 3), dtype=np.uint8))

    def test_invalid_block_size_raises_preprocess_error(self):
        preprocessor = Preprocessor(PreprocessConfig(adaptive_block_size=4))

        with pytest.raises(PreprocessError, match="Binarization failed"):
            preprocessor.binarize(np.full((50, 50), 255, dtype=np.uint8))
