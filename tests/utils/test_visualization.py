"""
Unit tests for visualization and I/O utilities.
"""

import cv2
import matplotlib
import numpy as np

matplotlib.use("Agg")

from src.mark_recognition.types import OptionMark
from src.utils.io import load_json, save_image, save_json
from src.utils.visualization import (
    draw_feature_points,
    draw_option_marks,
    plot_alignment_comparison,
)


class TestDrawing:
    """Tests for the overlay helpers."""

    def test_feature_points_drawn_on_copy(self):
        image = np.full((100, 100), 255, dtype=np.uint8)

        canvas = draw_feature_points(image, [(20.4, 30.6)])

        assert canvas.shape == (100, 100, 3)
        assert tuple(canvas[31, 20]) == (0, 0, 255)
        assert image.min() == 255

    def test_option_marks_outlined(self):
        image = np.full((100, 100, 4), 255, dtype=np.uint8)
        mark = OptionMark(x=40, y=40, width=20, height=20, area=300.0, circularity=0.9, confidence=0.6)

        canvas = draw_option_marks(image, [mark])

        assert canvas.shape == (100, 100, 3)
        assert tuple(canvas[40, 50]) == (0, 200, 0)

    def test_comparison_plot_saved(self, tmp_path, sheet_template):
        save_path = tmp_path / "comparison.png"

        plot_alignment_comparison(sheet_template, sheet_template[:, :, 0], save_path=save_path)

        assert save_path.exists()


class TestIO:
    """Tests for JSON and image I/O helpers."""

    def test_json_round_trip(self, tmp_path):
        path = tmp_path / "nested" / "marks.json"

        save_json({"count": 2, "options": []}, path)

        assert load_json(path) == {"count": 2, "options": []}

    def test_save_image_by_suffix(self, tmp_path, sheet_template):
        path = tmp_path / "out" / "aligned.png"

        save_image(sheet_template, path)

        np.testing.assert_array_equal(cv2.imread(str(path)), sheet_template)
