"""Keyword sanitizing and deterministic output naming."""

import re

from .models import DEFAULT_TOKEN

# Only these three are produced as output encodings.
TARGET_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}

# Camera-native inputs are only ever emitted verbatim (size fallback).
# Pillow ships no HEIF decoder, so without a registered HEIF plugin such
# uploads fail with decode_error before the fallback can apply; the
# entries take effect once a plugin makes them decodable.
SOURCE_EXTENSIONS = {
    **TARGET_EXTENSIONS,
    "image/heic": "heic",
    "image/heif": "heif",
}

DEFAULT_EXTENSION = "jpg"

_DISALLOWED_CHARS = re.compile(r"[^a-z0-9\u4e00-\u9fff\s-]")
_WHITESPACE_RUN = re.compile(r"\s+")
_HYPHEN_RUN = re.compile(r"-+")


def sanitize(text: str) -> str:
    """
    Normalize arbitrary keyword text into a filename-safe token.

    Lower-cases, keeps ``[a-z0-9]``, CJK unified ideographs, whitespace and
    hyphens, turns whitespace runs into one hyphen and collapses repeated
    hyphens. Idempotent; blank input gives ``""``.

    Args:
        text: Raw keyword text

    Returns:
        Sanitized token (possibly empty)
    """
    cleaned = _DISALLOWED_CHARS.sub("", text.strip().lower())
    cleaned = _WHITESPACE_RUN.sub("-", cleaned)
    return _HYPHEN_RUN.sub("-", cleaned)


def format_sequence_index(sequence_index: int) -> str:
    """Render a 1-based sequence index as at least two digits."""
    if sequence_index < 1:
        raise ValueError(f"Sequence index must be 1-based, got {sequence_index}")
    return f"{sequence_index:02d}"


def extension_for(content_type: str) -> str:
    """Extension for an output content type; unknown types map to ``jpg``."""
    return TARGET_EXTENSIONS.get(content_type, DEFAULT_EXTENSION)


def source_extension_for(content_type: str, default: str = DEFAULT_EXTENSION) -> str:
    """Extension for bytes emitted exactly as they were uploaded."""
    return SOURCE_EXTENSIONS.get(content_type, default)


def build_output_name(keyword: str, sequence_index: int, extension: str) -> str:
    """
    Combine keyword, sequence index and extension into the output file name.

    Args:
        keyword: Effective keyword (raw, sanitized here)
        sequence_index: 1-based position in the original input order
        extension: File extension without the dot

    Returns:
        Name such as ``summer-silk-dress-01.jpg``
    """
    token = sanitize(keyword) or DEFAULT_TOKEN
    return f"{token}-{format_sequence_index(sequence_index)}.{extension}"
