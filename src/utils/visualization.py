"""
Visualization Utilities

Functions for plotting and visualizing alignment and recognition results.
"""

import matplotlib.pyplot as plt
import cv2
import numpy as np
from typing import List, Tuple, Union
from pathlib import Path

from src.mark_recognition.types import OptionMark


def _to_bgr(image: np.ndarray) -> np.ndarray:
    """Copy an image as 3-channel BGR so colored overlays can be drawn."""
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    if image.shape[2] == 1:
        return cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2BGR)
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    return image.copy()


def _to_rgb(image: np.ndarray) -> np.ndarray:
    return cv2.cvtColor(_to_bgr(image), cv2.COLOR_BGR2RGB)


def draw_feature_points(
    image: np.ndarray,
    points: Union[np.ndarray, List[Tuple[float, float]]],
    color: Tuple[int, int, int] = (0, 0, 255),
    radius: int = 5,
) -> np.ndarray:
    """
    Draw feature points with their rounded coordinates.

    Args:
        image: Image array (BGR, BGRA or grayscale); not modified.
        points: Points [(x, y), ...]
        color: BGR marker color

    Returns:
        Annotated BGR copy of the image.
    """
    canvas = _to_bgr(image)
    for x, y in np.asarray(points, dtype=np.float32).reshape(-1, 2):
        center = (int(round(x)), int(round(y)))
        cv2.circle(canvas, center, radius, color, -1)
        cv2.putText(
            canvas,
            f"({center[0]}, {center[1]})",
            (center[0] + 8, center[1] - 8),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.4,
            (0, 0, 0),
            1,
        )
    return canvas


def draw_option_marks(
    image: np.ndarray,
    marks: List[OptionMark],
    color: Tuple[int, int, int] = (0, 200, 0),
) -> np.ndarray:
    """
    Outline recognized option marks and number them in reading order.

    Returns:
        Annotated BGR copy of the image.
    """
    canvas = _to_bgr(image)
    for i, mark in enumerate(marks):
        top_left = (mark.x, mark.y)
        bottom_right = (mark.x + mark.width, mark.y + mark.height)
        cv2.rectangle(canvas, top_left, bottom_right, color, 2)
        cv2.putText(
            canvas,
            str(i + 1),
            (mark.x, max(mark.y - 4, 10)),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.4,
            color,
            1,
        )
    return canvas


def plot_alignment_comparison(
    original: np.ndarray,
    aligned: np.ndarray,
    save_path: Path = None,
    titles: Tuple[str, str] = ("Original", "Aligned"),
):
    """
    Plot the original photo and the aligned sheet side by side.

    Args:
        original: Image as captured (BGR, BGRA or grayscale)
        aligned: Aligned image in template coordinates
        save_path: Optional path to save figure; shown interactively otherwise
    """
    fig, axes = plt.subplots(1, 2, figsize=(14, 6))
    for ax, image, title in zip(axes, (original, aligned), titles):
        ax.imshow(_to_rgb(image))
        ax.set_title(title)
        ax.axis('off')

    if save_path:
        plt.savefig(save_path, bbox_inches='tight', dpi=150)
        plt.close(fig)
    else:
        plt.show()
