"""Language detection for the language gate.

Detection order:
1. Character-ratio heuristic for non-Latin scripts (no network call)
2. AI detector on technical-term-filtered text
3. English when there is no signal at all
"""

import logging
import re
from typing import Literal, Optional

from pydantic import BaseModel, Field

from contentstudio.constants import (
    DEFAULT_LANGUAGE,
    LANGUAGE_DETECTION_MODEL,
    LANGUAGE_DETECTION_SAMPLE_LENGTH,
)
from contentstudio.interfaces import LanguageDetectionClient
from contentstudio.utils.language_utils import normalize_language_code
from contentstudio.utils.llm_client import LLMClient
from contentstudio.validators.script_detector import get_language_ratio_analysis
from contentstudio.validators.technical_terms import filter_technical_terms

logger = logging.getLogger(__name__)

_ISO_CODE = re.compile(r"^[a-z]{2}$")

DETECTION_SYSTEM_PROMPT = (
    "You are a language detection expert. Identify the natural language the text is written in. "
    "Ignore programming keywords, code identifiers and common English technical terms "
    "(API, server, database, docker, function, etc.): a Spanish lesson that mentions "
    "'docker' and 'API' is Spanish. Return only the ISO 639-1 code."
)


class DetectedLanguage(BaseModel):
    """Structured response of the AI language detector."""

    language_code: Optional[str] = Field(
        None, description="ISO 639-1 code of the dominant natural language, e.g. 'en', 'he', 'es'"
    )


class LanguageDetectionResult(BaseModel):
    """Outcome of ``LanguageDetector.detect``."""

    language: Optional[str] = Field(None, description="ISO 639-1 code, None when detection failed")
    method: Literal["ratio", "ai", "default"]


class LLMLanguageDetector:
    """AI language detector backed by ``LLMClient``."""

    def __init__(self, llm_client: LLMClient, model: Optional[str] = None):
        self.llm_client = llm_client
        self.model = model or LANGUAGE_DETECTION_MODEL

    def detect_language(self, text: str) -> Optional[str]:
        """Ask the LLM for the language of ``text``.

        The text is filtered of technical terms and truncated to 500
        characters before it is sent.

        Returns:
            Two-letter language code, or None if the model did not return one

        Raises:
            RuntimeError: If the LLM call fails after retries
        """
        sample = (filter_technical_terms(text) or text)[:LANGUAGE_DETECTION_SAMPLE_LENGTH]
        prompt = f"Detect the language of this text:\n\n{sample}"

        response = self.llm_client.generate(
            prompt=prompt,
            response_model=DetectedLanguage,
            system_prompt=DETECTION_SYSTEM_PROMPT,
            model=self.model,
            temperature=0.1,
            max_tokens=10,
        )

        code = normalize_language_code(response.language_code)
        if code is None or not _ISO_CODE.match(code):
            logger.warning(f"AI detector returned no usable language code: {response.language_code!r}")
            return None
        return code


class LanguageDetector:
    """Combine the script heuristic with an optional AI detector."""

    def __init__(self, ai_detector: Optional[LanguageDetectionClient] = None):
        self.ai_detector = ai_detector

    def detect(self, text: Optional[str]) -> LanguageDetectionResult:
        """Detect the language of ``text``.

        Exceptions raised by the AI detector propagate to the caller, which
        decides how to fail.
        """
        if not text or not text.strip():
            logger.debug("Empty text, defaulting language")
            return LanguageDetectionResult(language=DEFAULT_LANGUAGE, method="default")

        analysis = get_language_ratio_analysis(text)
        if analysis.detected_language:
            counts = {lang: count for lang, count in analysis.counts.items() if count}
            logger.info(
                f"Language detected by script ratio: {analysis.detected_language} "
                f"(counts={counts}, total={analysis.total_chars})"
            )
            return LanguageDetectionResult(language=analysis.detected_language, method="ratio")

        if self.ai_detector is None:
            logger.info("No AI detector configured and no non-Latin script found, defaulting language")
            return LanguageDetectionResult(language=DEFAULT_LANGUAGE, method="default")

        detected = self.ai_detector.detect_language(text)
        code = normalize_language_code(detected) if detected else None
        logger.info(f"Language detected by AI: {code}")
        return LanguageDetectionResult(language=code, method="ai")
