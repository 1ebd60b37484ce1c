"""
Exception taxonomy for the Sheet Alignment module.

Every exception carries a FailureKind so the orchestrator can turn it into a
tagged AlignmentResult at its public boundary.
"""

from src.sheet_alignment.types import FailureKind


class AlignmentError(Exception):
    """Base class for all alignment faults."""

    kind = FailureKind.UNEXPECTED


class InputError(AlignmentError, ValueError):
    """Missing, empty or malformed raster input."""

    kind = FailureKind.INPUT_ERROR


class ImageLoadError(InputError):
    """Image source could not be read or decoded."""


class PreprocessError(AlignmentError):
    """Grayscale conversion or binarization could not run."""

    kind = FailureKind.PREPROCESS_ERROR


class DetectionFailure(AlignmentError):
    """Too few feature points. Recovered by the fallback path."""

    kind = FailureKind.DETECTION_FAILURE


class FallbackFailure(AlignmentError):
    """Outer-frame fallback could not align the sample."""


class NoOuterFrameFound(FallbackFailure):
    kind = FailureKind.NO_OUTER_FRAME_FOUND


class NotQuadrilateral(FallbackFailure):
    kind = FailureKind.NOT_QUADRILATERAL


class TransformError(AlignmentError):
    """Homography could not be computed or applied."""

    kind = FailureKind.TRANSFORM_ERROR
