"""Keyword classification for listing images."""

from .classifier import KeywordClassifier, extract_keyword, merge_tokens
from .filename import analysis_name, clean_filename
from .rules import CATEGORY_RULES, RuleCategory, compile_pattern, match_category, match_rules
from .visual import LABEL_MAP, STOP_WORDS, OnnxVisualRecognizer, normalize_label, visual_tokens

__all__ = [
    "KeywordClassifier",
    "extract_keyword",
    "merge_tokens",
    "analysis_name",
    "clean_filename",
    "CATEGORY_RULES",
    "RuleCategory",
    "compile_pattern",
    "match_category",
    "match_rules",
    "LABEL_MAP",
    "STOP_WORDS",
    "OnnxVisualRecognizer",
    "normalize_label",
    "visual_tokens",
]
