"""Tests for the exception hierarchy."""

import pytest

from listing_images.core.exceptions import (
    BatchCapacityReached,
    ConfigurationError,
    DecodeError,
    EmptyKeywordError,
    EncodeError,
    ImageProcessingError,
    ListingImagesError,
    UnsupportedInputTypeError,
    VisualRecognitionUnavailable,
    batch_error_handler,
)


@pytest.mark.parametrize(
    "exc_class",
    [
        ConfigurationError,
        UnsupportedInputTypeError,
        BatchCapacityReached,
        ImageProcessingError,
        DecodeError,
        EncodeError,
        EmptyKeywordError,
        VisualRecognitionUnavailable,
    ],
)
def test_all_errors_share_base(exc_class):
    assert issubclass(exc_class, ListingImagesError)


def test_per_image_errors_are_processing_errors():
    for exc_class in (DecodeError, EncodeError, EmptyKeywordError):
        assert issubclass(exc_class, ImageProcessingError)


def test_batch_error_handler_wraps_unexpected_errors():
    with pytest.raises(ImageProcessingError) as excinfo:
        with batch_error_handler():
            raise RuntimeError("boom")
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_batch_error_handler_passes_own_errors_through():
    with pytest.raises(ConfigurationError):
        with batch_error_handler():
            raise ConfigurationError("bad input")
