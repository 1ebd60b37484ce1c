"""
Option-mark recognition on aligned answer sheets.
"""

from src.mark_recognition.config_loader import load_recognition_config
from src.mark_recognition.recognizer import OptionRecognizer, circularity, sort_marks
from src.mark_recognition.types import OptionMark, RecognitionConfig, RecognitionResult

__all__ = [
    "OptionRecognizer",
    "OptionMark",
    "RecognitionConfig",
    "RecognitionResult",
    "circularity",
    "sort_marks",
    "load_recognition_config",
]
