"""Tests for fake implementations to ensure they work correctly."""

import io

import pytest
from PIL import Image

from listing_images.core.exceptions import VisualRecognitionUnavailable
from listing_images.core.observability import LogContext
from listing_images.testing.fakes import (
    FakeClassifier,
    FakeLogger,
    FakeVisualRecognizer,
    UnavailableRecognizer,
    create_noise_image,
    create_test_image,
    make_source_file,
)


class TestFakeLogger:
    """Tests for FakeLogger."""

    def test_records_levels(self):
        logger = FakeLogger()
        logger.info("hello")
        logger.error("boom")

        assert [log["level"] for log in logger.get_logs()] == ["INFO", "ERROR"]
        assert logger.get_logs("ERROR")[0]["message"] == "boom"

    def test_records_context(self):
        logger = FakeLogger()
        context = LogContext(correlation_id="abc", operation="op").with_metadata(file="a.jpg")

        logger.debug("msg", context, extra=1)

        entry = logger.get_logs()[0]
        assert entry["correlation_id"] == "abc"
        assert entry["operation"] == "op"
        assert entry["file"] == "a.jpg"
        assert entry["extra"] == 1

    def test_clear_logs(self):
        logger = FakeLogger()
        logger.warning("x")
        logger.clear_logs()
        assert logger.get_logs() == []


class TestFakeRecognizers:
    """Tests for the recognizer fakes."""

    def test_fake_recognizer_returns_predictions(self):
        recognizer = FakeVisualRecognizer([("dress", 0.9)])
        image = Image.new("RGB", (4, 3))

        assert recognizer.recognize(image) == [("dress", 0.9)]
        assert recognizer.calls == [(4, 3)]

    def test_unavailable_recognizer_raises(self):
        with pytest.raises(VisualRecognitionUnavailable):
            UnavailableRecognizer().recognize(Image.new("RGB", (1, 1)))

    def test_fake_classifier(self):
        classifier = FakeClassifier("bag")
        assert classifier.keyword_for("a.jpg") == "bag"
        assert classifier.calls == ["a.jpg"]


class TestImageFactories:
    """Tests for the image builders."""

    @pytest.mark.parametrize("fmt", ["JPEG", "PNG", "WEBP"])
    def test_create_test_image_formats(self, fmt):
        data = create_test_image(30, 20, format=fmt)
        image = Image.open(io.BytesIO(data))
        assert image.format == fmt
        assert image.size == (30, 20)

    def test_create_test_image_with_alpha(self):
        data = create_test_image(10, 10, format="PNG", mode="RGBA", color=(0, 0, 0, 0))
        assert Image.open(io.BytesIO(data)).mode == "RGBA"

    def test_noise_image_is_large(self):
        assert len(create_noise_image(200, 200)) > len(create_test_image(200, 200))

    def test_make_source_file(self):
        source = make_source_file("a.png", format="PNG")
        assert source.content_type == "image/png"
        assert source.filename == "a.png"
