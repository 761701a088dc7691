"""Keyword classification from a file name and, optionally, the pixels."""

import re
from typing import Iterable, List, Optional

from ..core.exceptions import DecodeError, VisualRecognitionUnavailable
from ..core.image_utils import decode_image
from ..core.observability import LogContext, StructuredLogger
from ..core.models import DEFAULT_TOKEN, GENERIC_TOKENS, ClassificationResult
from ..core.protocols import LoggerProtocol, VisualRecognizer
from .filename import analysis_name, clean_filename
from .rules import COLOR_TOKENS, MATERIAL_TOKENS, STYLE_TOKENS, match_rules
from .visual import visual_tokens

_NUMERIC = re.compile(r"^\d+$")


def merge_tokens(*groups: Iterable[str]) -> List[str]:
    """Concatenate token groups, keeping the first occurrence of each."""
    merged: List[str] = []
    for group in groups:
        for token in group:
            if token and token not in merged:
                merged.append(token)
    return merged or [DEFAULT_TOKEN]


class KeywordClassifier:
    """
    Derives ranked keyword tokens for an image.

    Filename rules always run. When a visual recognizer is supplied its
    tokens are ranked first; if it is unavailable or fails the classifier
    falls back to filename tokens and logs a warning.
    """

    def __init__(
        self,
        recognizer: Optional[VisualRecognizer] = None,
        confidence_threshold: float = 0.30,
        max_visual_tokens: int = 4,
        logger: Optional[LoggerProtocol] = None,
    ):
        self.recognizer = recognizer
        self.confidence_threshold = confidence_threshold
        self.max_visual_tokens = max_visual_tokens
        self.logger = logger or StructuredLogger("listing-images.classifier")
        self._log_context = LogContext(component="keyword_classifier")

    def _recognize(self, filename: str, image_data: Optional[bytes]) -> List[str]:
        if self.recognizer is None or image_data is None:
            return []
        context = self._log_context.with_operation("recognize").with_metadata(
            filename=filename
        )
        try:
            predictions = self.recognizer.recognize(decode_image(image_data))
        except VisualRecognitionUnavailable as e:
            self.logger.warning(f"Visual recognition unavailable: {e}", context)
            return []
        except DecodeError as e:
            self.logger.warning(f"Skipping visual recognition for {filename}: {e}", context)
            return []
        except Exception as e:
            self.logger.warning(
                f"Visual recognition failed for {filename}, using filename only: {e}",
                context,
            )
            return []
        return visual_tokens(
            predictions, self.confidence_threshold, self.max_visual_tokens
        )

    def classify(
        self, filename: str, image_data: Optional[bytes] = None
    ) -> ClassificationResult:
        """
        Classify one image.

        Args:
            filename: Original file name
            image_data: Raw bytes for the visual recognizer, if any

        Returns:
            ClassificationResult with visual tokens ranked first
        """
        name = analysis_name(filename)
        filename_tokens = match_rules(name)
        visual = self._recognize(filename, image_data)
        tokens = merge_tokens(visual, filename_tokens)

        self.logger.debug(
            f"Classified {filename}",
            self._log_context.with_operation("classify"),
            visual=visual,
            filename_tokens=filename_tokens,
        )
        return ClassificationResult(
            tokens=tokens,
            visual_tokens=visual,
            filename_tokens=filename_tokens,
            cleaned_name=clean_filename(filename),
        )

    def keyword_for(self, filename: str, image_data: Optional[bytes] = None) -> str:
        """Classify and reduce to a single hyphenated keyword."""
        return extract_keyword(self.classify(filename, image_data))


def _first(tokens: List[str], vocabulary: frozenset) -> Optional[str]:
    for token in tokens:
        if token in vocabulary:
            return token
    return None


def extract_keyword(result: ClassificationResult) -> str:
    """
    Build a short keyword from a classification.

    Starts from the primary token and adds the first color, the first
    material, a style while fewer than three parts, and one more
    non-generic token while fewer than two. At most four parts.

    When nothing but the default token was recognized, the first three
    meaningful words of the cleaned file name are used instead.
    """
    tokens = result.tokens
    if tokens == [DEFAULT_TOKEN]:
        words = [
            word
            for word in result.cleaned_name.split()
            if len(word) > 2 and not _NUMERIC.match(word)
        ]
        if words:
            return "-".join(words[:3])
        return DEFAULT_TOKEN

    parts: List[str] = []

    def add(token: Optional[str]) -> None:
        if token and token not in parts:
            parts.append(token)

    add(result.primary)
    add(_first(tokens, COLOR_TOKENS))
    add(_first(tokens, MATERIAL_TOKENS))
    if len(parts) < 3:
        add(_first([t for t in tokens if t not in parts], STYLE_TOKENS))
    if len(parts) < 2:
        for token in tokens:
            if token not in parts and token not in GENERIC_TOKENS:
                add(token)
                break

    return "-".join(parts[:4]) or DEFAULT_TOKEN
