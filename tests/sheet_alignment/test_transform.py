"""
Unit tests for transform module.

Covers homography estimation and perspective warping into template size.
"""

import numpy as np
import pytest

from src.sheet_alignment.exceptions import TransformError
from src.sheet_alignment.transform import compute_homography, warp_to_template

UNIT_SQUARE = np.array([[0, 0], [1, 0], [1, 1], [0, 1]], dtype=np.float32)


class TestComputeHomography:
    """Tests for compute_homography function."""

    def test_unit_square_to_itself_is_identity(self):
        matrix = compute_homography(UNIT_SQUARE, UNIT_SQUARE)

        assert matrix.shape == (3, 3)
        np.testing.assert_allclose(matrix, np.eye(3), atol=1e-9)

    def test_maps_source_corners_onto_destination(self):
        src = np.array([[10, 20], [210, 30], [200, 180], [15, 170]], dtype=np.float32)
        dst = np.array([[0, 0], [800, 0], [800, 600], [0, 600]], dtype=np.float32)

        matrix = compute_homography(src, dst)

        homogeneous = np.hstack([src, np.ones((4, 1), dtype=np.float32)]) @ matrix.T
        projected = homogeneous[:, :2] / homogeneous[:, 2:]
        np.testing.assert_allclose(projected, dst, atol=1e-3)

    def test_only_first_four_points_used(self):
        extra = np.vstack([UNIT_SQUARE * 100, [[999, 999], [5, 5]]])

        with_extra = compute_homography(extra, UNIT_SQUARE * 100)
        without = compute_homography(UNIT_SQUARE * 100, UNIT_SQUARE * 100)

        np.testing.assert_allclose(with_extra, without)

    def test_accepts_lists(self):
        matrix = compute_homography(UNIT_SQUARE.tolist(), UNIT_SQUARE.tolist())

        np.testing.assert_allclose(matrix, np.eye(3), atol=1e-9)

    def test_fewer_than_four_points_raises(self):
        with pytest.raises(TransformError, match="Need 4"):
            compute_homography(UNIT_SQUARE[:3], UNIT_SQUARE)


class TestWarpToTemplate:
    """Tests for warp_to_template function."""

    def test_identity_reproduces_source_exactly(self):
        """Unit-square homography to itself, then warp: pixel-exact copy."""
        rng = np.random.default_rng(7)
        image = rng.integers(0, 256, size=(60, 80, 3), dtype=np.uint8)

        matrix = compute_homography(UNIT_SQUARE, UNIT_SQUARE)
        warped = warp_to_template(image, matrix, (80, 60))

        np.testing.assert_array_equal(warped, image)

    def test_output_has_exact_requested_size(self):
        image = np.full((123, 77, 3), 200, dtype=np.uint8)

        warped = warp_to_template(image, np.eye(3), (800, 600))

        assert warped.shape == (600, 800, 3)

    def test_unmapped_pixels_keep_background(self):
        image = np.full((50, 50), 255, dtype=np.uint8)

        warped = warp_to_template(image, np.eye(3), (100, 100), border_value=0)

        assert warped[10, 10] == 255
        assert warped[90, 90] == 0

    def test_translation(self):
        image = np.zeros((40, 40), dtype=np.uint8)
        image[5, 5] = 255
        shift = np.array([[1, 0, 10], [0, 1, 3], [0, 0, 1]], dtype=np.float64)

        warped = warp_to_template(image, shift, (40, 40), interpolation="nearest")

        assert warped[8, 15] == 255

    def test_single_channel_3d_keeps_channel_axis(self):
        image = np.full((20, 20, 1), 9, dtype=np.uint8)

        warped = warp_to_template(image, np.eye(3), (20, 20))

        assert warped.shape == (20, 20, 1)

    def test_bgra_keeps_four_channels(self):
        image = np.full((20, 20, 4), 9, dtype=np.uint8)

        warped = warp_to_template(image, np.eye(3), (30, 10))

        assert warped.shape == (10, 30, 4)

    @pytest.mark.parametrize("size", [(0, 10), (10, -1)])
    def test_invalid_size_raises(self, size):
        with pytest.raises(TransformError, match="Invalid output size"):
            warp_to_template(np.zeros((5, 5), dtype=np.uint8), np.eye(3), size)

    def test_unknown_interpolation_raises(self):
        with pytest.raises(TransformError, match="Unknown interpolation"):
            warp_to_template(
                np.zeros((5, 5), dtype=np.uint8), np.eye(3), (5, 5), interpolation="bogus"
            )
