"""Core utilities and shared components for the listing images pipeline."""

from .image_utils import (
    ACCEPTED_CONTENT_TYPES,
    center_square_box,
    crop_to_square,
    decode_image,
    encode_image,
    saved_percent,
    size_in_kb,
)
from .logging_config import get_logger, setup_logger
from .exceptions import (
    ListingImagesError,
    ConfigurationError,
    UnsupportedInputTypeError,
    BatchCapacityReached,
    ImageProcessingError,
    DecodeError,
    EncodeError,
    EmptyKeywordError,
    VisualRecognitionUnavailable,
    batch_error_handler,
)
from .error_handling import with_error_handling
from .models import (
    BatchReport,
    ClassificationResult,
    FailureKind,
    InputImage,
    IntakeReport,
    ItemStatus,
    ProcessedImage,
    ProcessingConfig,
    QualityStep,
    SourceFile,
    TransformFailure,
)
from .naming import build_output_name, extension_for, format_sequence_index, sanitize
from .protocols import CancellationToken

__all__ = [
    "ProcessingConfig",
    "QualityStep",
    "SourceFile",
    "InputImage",
    "ProcessedImage",
    "TransformFailure",
    "ClassificationResult",
    "IntakeReport",
    "BatchReport",
    "ItemStatus",
    "FailureKind",
    "CancellationToken",
    "ACCEPTED_CONTENT_TYPES",
    "center_square_box",
    "crop_to_square",
    "decode_image",
    "encode_image",
    "saved_percent",
    "size_in_kb",
    "sanitize",
    "format_sequence_index",
    "extension_for",
    "build_output_name",
    "setup_logger",
    "get_logger",
    "ListingImagesError",
    "ConfigurationError",
    "UnsupportedInputTypeError",
    "BatchCapacityReached",
    "ImageProcessingError",
    "DecodeError",
    "EncodeError",
    "EmptyKeywordError",
    "VisualRecognitionUnavailable",
    "with_error_handling",
    "batch_error_handler",
]
