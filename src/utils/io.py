"""
I/O Utilities

File input/output operations.
"""

import json
from pathlib import Path
from typing import Any, Dict

import cv2
import numpy as np


def load_json(file_path: Path) -> Dict[str, Any]:
    """Load JSON file."""
    with open(file_path, 'r') as f:
        return json.load(f)


def save_json(data: Dict[str, Any], file_path: Path, indent: int = 2):
    """Save data to JSON file."""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, 'w') as f:
        json.dump(data, f, indent=indent)


def save_image(image: np.ndarray, file_path: Path):
    """Encode and write an image; the format follows the file extension."""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    ok, encoded = cv2.imencode(file_path.suffix or '.png', image)
    if not ok:
        raise ValueError(f"Could not encode image as {file_path.suffix}")
    encoded.tofile(str(file_path))
