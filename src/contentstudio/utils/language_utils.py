"""Language code normalization utilities."""

from typing import Optional

# Language names, ISO 639-2 codes and locale tags mapped to ISO 639-1 codes
LANGUAGE_ALIASES = {
    "english": "en",
    "eng": "en",
    "hebrew": "he",
    "heb": "he",
    "arabic": "ar",
    "ara": "ar",
    "spanish": "es",
    "spa": "es",
    "french": "fr",
    "fra": "fr",
    "german": "de",
    "deu": "de",
    "italian": "it",
    "ita": "it",
    "japanese": "ja",
    "jpn": "ja",
    "chinese": "zh",
    "mandarin": "zh",
    "chi": "zh",
    "korean": "ko",
    "kor": "ko",
    "portuguese": "pt",
    "por": "pt",
    "persian": "fa",
    "farsi": "fa",
    "urdu": "ur",
    "russian": "ru",
    "rus": "ru",
}

# ISO 639-1 code to language name mapping
LANGUAGE_CODE_TO_NAME = {
    "en": "English",
    "he": "Hebrew",
    "ar": "Arabic",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "ja": "Japanese",
    "zh": "Chinese",
    "ko": "Korean",
    "pt": "Portuguese",
    "fa": "Persian",
    "ur": "Urdu",
    "ru": "Russian",
}


def normalize_language_code(language: Optional[str]) -> Optional[str]:
    """Normalize a language name, code or locale to an ISO 639-1 code.

    Args:
        language: e.g. "English", "en", "EN", "he-IL", "pt_BR"

    Returns:
        Two-letter code (e.g. "en"), the bare base code for unknown 2-3
        letter codes, or None if the input cannot be interpreted

    Example:
        >>> normalize_language_code("he-IL")
        'he'
    """
    if not language or not isinstance(language, str):
        return None

    normalized = language.strip().lower()
    if normalized in LANGUAGE_CODE_TO_NAME:
        return normalized
    if normalized in LANGUAGE_ALIASES:
        return LANGUAGE_ALIASES[normalized]

    base_code = normalized.replace("_", "-").split("-")[0]
    if base_code in LANGUAGE_CODE_TO_NAME:
        return base_code
    if base_code in LANGUAGE_ALIASES:
        return LANGUAGE_ALIASES[base_code]
    if base_code.isalpha() and 2 <= len(base_code) <= 3:
        return base_code

    return None


def get_language_name(language_code: str) -> str:
    """Convert an ISO 639-1 code to a display name.

    Raises:
        ValueError: If the language code is not supported
    """
    lower_code = language_code.lower()
    if lower_code not in LANGUAGE_CODE_TO_NAME:
        raise ValueError(
            f"Unsupported language code: '{language_code}'. "
            f"Supported: {', '.join(LANGUAGE_CODE_TO_NAME.keys())}"
        )
    return LANGUAGE_CODE_TO_NAME[lower_code]


def resolve_topic_language(topic, course_repository=None) -> Optional[str]:
    """Effective language of a topic: its own, else its course's.

    Args:
        topic: Topic with ``language`` and ``course_id`` (None is allowed)
        course_repository: Optional course lookup for topics without a language

    Returns:
        ISO 639-1 code, or None when neither the topic nor its course has one
    """
    if topic is None:
        return None

    language = normalize_language_code(topic.language)
    if language:
        return language

    if topic.course_id is not None and course_repository is not None:
        course = course_repository.find_by_id(topic.course_id)
        if course is not None:
            return normalize_language_code(course.language)
    return None
