"""
Common type definitions for the answer-sheet alignment pipeline.

This module provides Pydantic-based type definitions for the core data
structures exchanged with callers: raster images and 2D points.

These types provide:
- Type validation and conversion
- Consistent interfaces across modules
- Helper methods for common operations
- Integration with numpy arrays and OpenCV
"""

from typing import List, Tuple, Union

import numpy as np
from pydantic import BaseModel, Field, field_validator


class RasterImage(BaseModel):
    """
    Type-safe wrapper for decoded raster images (numpy.ndarray).

    The pixel buffer is owned by the caller and treated as read-only by the
    alignment pipeline.

    Attributes:
        data: The underlying numpy array containing image data.
            Shape: (H, W) for single-channel images, (H, W, C) with C in
            {1, 3, 4} otherwise. Channel order is BGR/BGRA as produced by
            OpenCV decoding.
            Dtype: uint8 (0-255).

    Example:
        >>> import cv2
        >>> image = cv2.imread("answer_sheet.jpg")
        >>> raster = RasterImage(data=image)
        >>> print(raster.width, raster.height, raster.channels)  # 800 600 3
    """

    data: np.ndarray = Field(..., description="Image data as numpy array")

    model_config = {"arbitrary_types_allowed": True}

    @field_validator("data")
    @classmethod
    def _validate_image(cls, v: np.ndarray) -> np.ndarray:
        """
        Validate that the numpy array is a usable raster.

        Raises:
            ValueError: If array is empty or not a valid image format.
        """
        if not isinstance(v, np.ndarray):
            raise ValueError(f"Expected numpy.ndarray, got {type(v)}")

        if v.size == 0:
            raise ValueError("Image array is empty")

        if len(v.shape) not in (2, 3):
            raise ValueError(
                f"Expected 2D (grayscale) or 3D (color) image, got shape {v.shape}"
            )

        if len(v.shape) == 3 and v.shape[2] not in (1, 3, 4):
            raise ValueError(
                f"Expected 1, 3, or 4 channels for color image, got {v.shape[2]}"
            )

        if v.dtype != np.uint8:
            raise ValueError(
                f"Expected uint8 dtype for image, got {v.dtype}. "
                "Images should be in range [0, 255]"
            )

        return v

    @property
    def shape(self) -> Tuple[int, ...]:
        """Get image shape (H, W) or (H, W, C)."""
        return self.data.shape

    @property
    def height(self) -> int:
        """Get image height in pixels."""
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        """Get image width in pixels."""
        return int(self.data.shape[1])

    @property
    def size(self) -> Tuple[int, int]:
        """Get (width, height), the order OpenCV expects for output sizes."""
        return (self.width, self.height)

    @property
    def channels(self) -> int:
        """Get number of channels (1 for grayscale, 3 for BGR, 4 for BGRA)."""
        if len(self.data.shape) == 2:
            return 1
        return int(self.data.shape[2])

    def to_numpy(self) -> np.ndarray:
        """Get underlying numpy array."""
        return self.data

    def __repr__(self) -> str:
        """String representation of RasterImage."""
        return f"RasterImage(shape={self.shape}, dtype={self.data.dtype})"


class Point2D(BaseModel):
    """
    Floating-point image coordinate (x, y).

    Example:
        >>> point = Point2D(x=100.5, y=200)
        >>> point.to_tuple()
        (100.5, 200.0)
    """

    x: float = Field(..., description="X-coordinate (horizontal)")
    y: float = Field(..., description="Y-coordinate (vertical)")

    @field_validator("x", "y", mode="before")
    @classmethod
    def _convert_to_float(cls, v: Union[int, float, np.number]) -> float:
        if isinstance(v, (int, float, np.number)):
            return float(v)
        raise ValueError(f"Coordinate must be numeric, got {type(v)}")

    @classmethod
    def from_numpy(cls, arr: np.ndarray) -> "Point2D":
        """
        Create Point2D from numpy array.

        Args:
            arr: Numpy array of shape (2,) with [x, y] coordinates.

        Raises:
            ValueError: If array shape is not (2,).
        """
        arr = np.asarray(arr)
        if arr.shape != (2,):
            raise ValueError(f"Expected array of shape (2,), got {arr.shape}")
        return cls(x=float(arr[0]), y=float(arr[1]))

    def to_numpy(self, dtype: type = np.float32) -> np.ndarray:
        """Convert Point2D to numpy array of shape (2,)."""
        return np.array([self.x, self.y], dtype=dtype)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def __repr__(self) -> str:
        return f"Point2D(x={self.x:g}, y={self.y:g})"


def points_to_array(points: List[Point2D]) -> np.ndarray:
    """Stack a list of Point2D into a float32 array of shape (N, 2)."""
    if not points:
        return np.zeros((0, 2), dtype=np.float32)
    return np.array([p.to_tuple() for p in points], dtype=np.float32)


def array_to_points(arr: np.ndarray) -> List[Point2D]:
    """Convert an (N, 2) array into a list of Point2D."""
    arr = np.asarray(arr, dtype=np.float32).reshape(-1, 2)
    return [Point2D.from_numpy(row) for row in arr]
