"""Filename cleaning ahead of rule matching."""

import re

_EXTENSION = re.compile(r"\.(?:jpe?g|png|gif|webp|heic|heif)$")

# Camera, export, screenshot and messenger prefixes plus copy markers.
_LATIN_PREFIXES = (
    "screenshot",
    "screen shot",
    "snapshot",
    "untitled",
    "capture",
    "picture",
    "copy of",
    "screen",
    "wechat",
    "weixin",
    "alipay",
    "taobao",
    "export",
    "output",
    "image",
    "photo",
    "copy",
    "dscn",
    "dscf",
    "snap",
    "dsc",
    "img",
    "pic",
    "new",
    "wx",
    "qq",
    "wp",
    "p",
)
_LATIN_PREFIX = re.compile(
    r"^(?:%s)(?=[\s_\-#\d]|$)" % "|".join(re.escape(p) for p in _LATIN_PREFIXES)
)
_CJK_PREFIX = re.compile(r"^(?:副本|新建|截图|微信图片)")
# Years, months and sequence numbers such as 2024, 03, #01.
_NUMERIC_PREFIX = re.compile(r"^#?\d+(?=[\s_\-]|$)")
_LEADING_SEPARATORS = re.compile(r"^[\s_\-#]+")

_TRAILING_NUMBER = re.compile(r"[\s_\-]*\d{4,}$")
_TRAILING_PARENS = re.compile(r"[\s_\-]*\([^)]*\)$")
_TRAILING_BRACKETS = re.compile(r"[\s_\-]*\[[^\]]*\]$")
_SEPARATOR_RUN = re.compile(r"[\s_\-]+")

_PREFIX_PATTERNS = (_LATIN_PREFIX, _CJK_PREFIX, _NUMERIC_PREFIX)


def _strip_prefixes(name: str) -> str:
    while True:
        stripped = name
        for pattern in _PREFIX_PATTERNS:
            stripped = _LEADING_SEPARATORS.sub("", pattern.sub("", stripped, count=1))
        if stripped == name:
            return name
        name = stripped


def clean_filename(filename: str) -> str:
    """
    Reduce an upload's file name to its descriptive words.

    ``"IMG_2024_red-silk-dress (1).JPG"`` becomes ``"red silk dress"``.

    Args:
        filename: Original file name, with or without extension

    Returns:
        Lower-case words separated by single spaces (possibly empty)
    """
    name = _EXTENSION.sub("", filename.strip().lower())
    name = _strip_prefixes(name)
    name = _TRAILING_NUMBER.sub("", name)
    name = _TRAILING_PARENS.sub("", name)
    name = _TRAILING_BRACKETS.sub("", name)
    return _SEPARATOR_RUN.sub(" ", name).strip()


def analysis_name(filename: str) -> str:
    """Name the rules are matched against; falls back to the raw name."""
    cleaned = clean_filename(filename)
    if len(cleaned) > 2:
        return cleaned
    return filename.lower()
