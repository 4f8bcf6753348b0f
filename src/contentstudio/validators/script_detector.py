"""Character-ratio language detection for non-Latin scripts.

Effective for technical lessons where English terms are mixed into text
written in another script: a presentation that is 80% Arabic still reads as
Arabic even though every code sample is English.
"""

import re
from typing import Dict, Optional

from pydantic import BaseModel, Field

from contentstudio.constants import LANGUAGE_MIN_CHAR_COUNT, LANGUAGE_RATIO_THRESHOLD

# The Arabic block contains the Persian range and is checked first, so Persian
# text reports as "ar".
SCRIPT_PATTERNS: Dict[str, re.Pattern] = {
    "ar": re.compile(r"[\u0600-\u06FF]"),
    "he": re.compile(r"[\u0590-\u05FF]"),
    "ru": re.compile(r"[\u0400-\u04FF]"),
    "fa": re.compile(r"[\u06A0-\u06FF]"),
    # Kana before Han: Japanese text mixes kanji with kana, Chinese never uses kana
    "ja": re.compile(r"[\u3040-\u309F\u30A0-\u30FF]"),
    "zh": re.compile(r"[\u4E00-\u9FFF]"),
    "ko": re.compile(r"[\uAC00-\uD7AF]"),
}

# Order for the absolute-count rule on short texts. "fa" never wins here
# either: its range lies inside "ar", which comes first.
MIN_COUNT_ORDER = ("ar", "he", "fa", "ru", "ja", "zh", "ko")

_NON_LETTERS = re.compile(r"[\s\W_]+")


class ScriptAnalysis(BaseModel):
    """Per-script character counts and ratios for a text."""

    detected_language: Optional[str] = None
    counts: Dict[str, int] = Field(default_factory=dict)
    ratios: Dict[str, float] = Field(default_factory=dict)
    total_chars: int = Field(0, description="Letters and digits, whitespace and punctuation excluded")


def count_script_characters(text: str) -> Dict[str, int]:
    """Count characters of each tracked script."""
    return {lang: len(pattern.findall(text)) for lang, pattern in SCRIPT_PATTERNS.items()}


def _pick_language(counts: Dict[str, int], ratios: Dict[str, float]) -> Optional[str]:
    for lang, ratio in ratios.items():
        if ratio >= LANGUAGE_RATIO_THRESHOLD:
            return lang
    for lang in MIN_COUNT_ORDER:
        if counts[lang] >= LANGUAGE_MIN_CHAR_COUNT:
            return lang
    return None


def get_language_ratio_analysis(text: Optional[str]) -> ScriptAnalysis:
    """Full breakdown used for logging and by ``detect_language_by_ratio``."""
    if not text or not isinstance(text, str) or not text.strip():
        return ScriptAnalysis()

    total = len(_NON_LETTERS.sub("", text))
    if total == 0:
        return ScriptAnalysis()

    counts = count_script_characters(text)
    ratios = {lang: count / total for lang, count in counts.items()}
    return ScriptAnalysis(
        detected_language=_pick_language(counts, ratios),
        counts=counts,
        ratios=ratios,
        total_chars=total,
    )


def detect_language_by_ratio(text: Optional[str]) -> Optional[str]:
    """Detect a non-Latin language from script character ratios.

    A script with at least 5% of the letters wins immediately; otherwise a
    script with at least 3 characters wins (short texts full of English
    technical terms).

    Args:
        text: Text to analyze

    Returns:
        ISO 639-1 code, or None when no non-Latin script stands out (Latin
        languages are left to the AI detector)
    """
    return get_language_ratio_analysis(text).detected_language
