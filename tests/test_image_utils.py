"""Tests for image decode, crop and encode utilities."""

import io

import pytest
from PIL import Image

from listing_images.core.exceptions import DecodeError, EncodeError
from listing_images.core.image_utils import (
    center_square_box,
    crop_to_square,
    decode_image,
    encode_image,
    preferred_content_type,
    saved_percent,
    size_in_kb,
)
from listing_images.testing.fakes import create_test_image


class TestDecodeImage:
    """Tests for decode_image."""

    def test_decode_valid_jpeg(self):
        image = decode_image(create_test_image(120, 80))
        assert image.size == (120, 80)

    @pytest.mark.parametrize("data", [b"", b"not an image", b"\xff\xd8\xff\xe0garbage"])
    def test_decode_invalid_bytes(self, data):
        with pytest.raises(DecodeError):
            decode_image(data)

    def test_decode_applies_exif_orientation(self):
        image = Image.new("RGB", (200, 100), "white")
        exif = Image.Exif()
        exif[0x0112] = 6  # rotate 90 CW on display
        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", exif=exif.tobytes())

        decoded = decode_image(buffer.getvalue())

        assert decoded.size == (100, 200)


class TestSquareCrop:
    """Tests for the centered square crop."""

    @pytest.mark.parametrize(
        "width, height, box",
        [
            (400, 300, (50, 0, 350, 300)),
            (300, 400, (0, 50, 300, 350)),
            (301, 300, (0, 0, 300, 300)),
            (100, 100, (0, 0, 100, 100)),
            (1, 50, (0, 24, 1, 25)),
        ],
    )
    def test_center_square_box(self, width, height, box):
        assert center_square_box(width, height) == box

    def test_crop_to_square_keeps_scale(self):
        image = decode_image(create_test_image(400, 300))
        cropped = crop_to_square(image)
        assert cropped.size == (300, 300)
        assert cropped.getpixel((0, 0)) == image.getpixel((50, 0))


class TestEncodeImage:
    """Tests for encode_image."""

    @pytest.mark.parametrize(
        "content_type, pil_format",
        [("image/jpeg", "JPEG"), ("image/png", "PNG"), ("image/webp", "WEBP")],
    )
    def test_encode_target_types(self, content_type, pil_format):
        image = decode_image(create_test_image(64, 48))
        data = encode_image(image, content_type, 0.78)
        assert Image.open(io.BytesIO(data)).format == pil_format

    def test_lower_quality_is_smaller(self):
        image = decode_image(create_test_image(200, 200))
        high = encode_image(image, "image/jpeg", 0.95)
        low = encode_image(image, "image/jpeg", 0.3)
        assert len(low) < len(high)

    def test_transparent_png_to_jpeg_is_flattened_on_white(self):
        image = Image.new("RGBA", (10, 10), (255, 0, 0, 0))
        data = encode_image(image, "image/jpeg", 0.9)
        decoded = Image.open(io.BytesIO(data)).convert("RGB")
        r, g, b = decoded.getpixel((5, 5))
        assert min(r, g, b) > 240

    def test_unsupported_target_raises_encode_error(self):
        image = Image.new("RGB", (10, 10))
        with pytest.raises(EncodeError):
            encode_image(image, "image/gif")


class TestContentTypeAndSizes:
    """Tests for target selection and size figures."""

    @pytest.mark.parametrize(
        "original, expected",
        [
            ("image/jpeg", "image/jpeg"),
            ("image/png", "image/png"),
            ("image/webp", "image/webp"),
            ("image/heic", "image/jpeg"),
            ("image/heif", "image/jpeg"),
        ],
    )
    def test_preferred_content_type(self, original, expected):
        assert preferred_content_type(original) == expected

    def test_size_in_kb_rounds_to_one_decimal(self):
        assert size_in_kb(1024) == 1.0
        assert size_in_kb(1536) == 1.5
        assert size_in_kb(1100) == 1.1

    def test_saved_percent(self):
        assert saved_percent(2048, 1024) == 50.0
        assert saved_percent(1024, 1024) == 0.0

    def test_saved_percent_never_negative(self):
        assert saved_percent(1024, 4096) == 0.0

    def test_saved_percent_zero_original(self):
        assert saved_percent(0, 10) == 0.0
