"""Image decode, crop and encode utilities for the listing images pipeline."""

import io
from typing import Optional, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError as PILUnidentifiedImageError

from .error_handling import with_error_handling
from .exceptions import DecodeError

JPEG = "image/jpeg"
PNG = "image/png"
WEBP = "image/webp"

TARGET_CONTENT_TYPES = (JPEG, PNG, WEBP)
LOSSY_CONTENT_TYPES = (JPEG, WEBP)
ACCEPTED_CONTENT_TYPES = (JPEG, PNG, WEBP, "image/heic", "image/heif")

PIL_FORMATS = {
    JPEG: "JPEG",
    PNG: "PNG",
    WEBP: "WEBP",
}

_PNG_MODES = {"1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16"}


def decode_image(image_bytes: bytes) -> "Image.Image":
    """
    Decode image bytes into a fully loaded pixel surface.

    EXIF orientation is applied so the surface is upright. HEIC/HEIF
    containers only decode when a HEIF plugin is registered with Pillow;
    otherwise they raise DecodeError like any unreadable input.

    Args:
        image_bytes: Raw file bytes

    Returns:
        Loaded PIL Image

    Raises:
        DecodeError: If the data is corrupt or the container is unsupported
    """
    try:
        image = Image.open(io.BytesIO(image_bytes))
        image.load()
        return ImageOps.exif_transpose(image)
    except (
        OSError,
        SyntaxError,
        ValueError,
        Image.DecompressionBombError,
        PILUnidentifiedImageError,
    ) as exc:
        raise DecodeError(f"Cannot decode image: {exc}") from exc


def center_square_box(width: int, height: int) -> Tuple[int, int, int, int]:
    """
    Compute the centered square crop box for a surface.

    Args:
        width: Surface width
        height: Surface height

    Returns:
        (left, top, right, bottom) box of side ``min(width, height)``
    """
    size = min(width, height)
    left = (width - size) // 2
    top = (height - size) // 2
    return left, top, left + size, top + size


def crop_to_square(img: "Image.Image") -> "Image.Image":
    """Crop the centered ``min(w, h)`` square out of an image, unscaled."""
    return img.crop(center_square_box(img.width, img.height))


def preferred_content_type(original_content_type: str) -> str:
    """Reuse the original type when it is a target type, else JPEG."""
    if original_content_type in TARGET_CONTENT_TYPES:
        return original_content_type
    return JPEG


def is_quality_adjustable(content_type: str) -> bool:
    return content_type in LOSSY_CONTENT_TYPES


def _has_alpha(img: "Image.Image") -> bool:
    return img.mode in ("RGBA", "LA", "PA") or (
        img.mode == "P" and "transparency" in img.info
    )


def prepare_for_encoding(img: "Image.Image", content_type: str) -> "Image.Image":
    """
    Convert an image into a mode the target encoder accepts.

    JPEG has no alpha channel, so transparent pixels are flattened onto white.
    """
    if content_type == JPEG:
        if _has_alpha(img):
            rgba = img.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.getchannel("A"))
            return background
        if img.mode not in ("RGB", "L", "CMYK"):
            return img.convert("RGB")
        return img
    if content_type == PNG:
        if img.mode in _PNG_MODES:
            return img
        return img.convert("RGBA" if _has_alpha(img) else "RGB")
    # WEBP
    if img.mode in ("RGB", "RGBA"):
        return img
    return img.convert("RGBA" if _has_alpha(img) else "RGB")


@with_error_handling
def encode_image(
    img: "Image.Image", content_type: str, quality: Optional[float] = None
) -> bytes:
    """
    Encode a pixel surface to one of the target content types.

    Args:
        img: Surface to encode
        content_type: One of ``TARGET_CONTENT_TYPES``
        quality: 0-1 quality for lossy targets; ignored for PNG

    Returns:
        Encoded bytes

    Raises:
        EncodeError: If the encoder fails or the type is not a target type
    """
    if content_type not in PIL_FORMATS:
        raise ValueError(f"Unsupported output content type: {content_type}")

    prepared = prepare_for_encoding(img, content_type)
    output = io.BytesIO()
    save_kwargs = {}
    if content_type == JPEG:
        save_kwargs["optimize"] = True
    elif content_type == PNG:
        save_kwargs["optimize"] = True
    if quality is not None and is_quality_adjustable(content_type):
        save_kwargs["quality"] = int(round(quality * 100))

    prepared.save(output, format=PIL_FORMATS[content_type], **save_kwargs)
    return output.getvalue()


def round1(value: float) -> float:
    return round(value, 1)


def size_in_kb(size_bytes: int) -> float:
    """Byte count as KiB rounded to one decimal."""
    return round1(size_bytes / 1024)


def saved_percent(original_bytes: int, final_bytes: int) -> float:
    """
    Percentage saved relative to the original, clamped at zero.

    Computed from the rounded original KiB figure and the exact final size,
    so it agrees with the displayed sizes.
    """
    original_kb = size_in_kb(original_bytes)
    if original_kb <= 0:
        return 0.0
    return max(0.0, round1((original_kb - final_bytes / 1024) / original_kb * 100))
