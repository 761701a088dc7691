"""Custom exceptions for the listing images pipeline."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any


class ListingImagesError(Exception):
    """Base exception for all listing images errors."""


class ConfigurationError(ListingImagesError):
    """Error raised for invalid configuration options."""


class UnsupportedInputTypeError(ListingImagesError):
    """Error raised when a submitted file has a content type we do not accept."""


class BatchCapacityReached(ListingImagesError):
    """Raised (or reported) when a submission fills the batch to capacity."""


class ImageProcessingError(ListingImagesError):
    """Error raised when processing a single image fails."""


class DecodeError(ImageProcessingError):
    """The input bytes could not be decoded into a pixel surface."""


class EncodeError(ImageProcessingError):
    """The pixel surface could not be encoded to the target format."""


class EmptyKeywordError(ImageProcessingError):
    """No non-empty effective keyword could be resolved for an image."""


class VisualRecognitionUnavailable(ListingImagesError):
    """The optional visual recognizer cannot run in this environment."""


@contextmanager
def batch_error_handler() -> Any:
    """Context manager to wrap batch operations with error handling."""
    try:
        yield
    except ListingImagesError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise ImageProcessingError(str(exc)) from exc
