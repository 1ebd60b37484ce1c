"""
Data structures for option-mark recognition.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


@dataclass
class RecognitionConfig:
    """Configuration for filled-mark extraction."""

    binary_threshold: int = 128  # Pixels darker than this become foreground
    min_option_area: float = 50.0
    max_option_area: float = 500.0
    min_circularity: float = 0.3
    row_tolerance: float = 20.0  # Marks within this y-band share a row


@dataclass
class OptionMark:
    """
    A candidate filled option mark.

    Attributes:
        x, y, width, height: Bounding rectangle in template pixels.
        area: Contour area (px²).
        circularity: 4π·area / perimeter², 1.0 for a perfect circle.
        confidence: min(1, area / max_option_area).
    """

    x: int
    y: int
    width: int
    height: int
    area: float
    circularity: float
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RecognitionResult:
    """Output of OptionRecognizer.recognize."""

    success: bool
    marks: List[OptionMark] = field(default_factory=list)
    message: str = ""

    @property
    def count(self) -> int:
        return len(self.marks)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "count": self.count,
            "message": self.message,
            "options": [mark.to_dict() for mark in self.marks],
        }
