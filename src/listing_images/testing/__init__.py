"""Testing utilities and fakes for the listing images pipeline."""

from .fakes import (
    FakeClassifier,
    FakeLogger,
    FakeVisualRecognizer,
    UnavailableRecognizer,
    create_noise_image,
    create_test_image,
    make_source_file,
)

__all__ = [
    "FakeClassifier",
    "FakeLogger",
    "FakeVisualRecognizer",
    "UnavailableRecognizer",
    "create_noise_image",
    "create_test_image",
    "make_source_file",
]
