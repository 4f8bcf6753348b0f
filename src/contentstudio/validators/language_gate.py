"""Language gate for manually authored content.

Manual submissions must be written in the language of their topic (or the
topic's course). The gate fails closed: anything short of a positive match is
an error.
"""

import logging
from typing import Optional

from contentstudio.errors import (
    LanguageDetectionFailedError,
    LanguageGateError,
    LanguageMismatchError,
    LanguageValidationError,
)
from contentstudio.interfaces import CourseRepository, TopicRepository
from contentstudio.models.content import Content, ContentType
from contentstudio.models.status_trail import StatusTrail
from contentstudio.utils.language_utils import resolve_topic_language
from contentstudio.utils.text_extraction import extract_validatable_text
from contentstudio.validators.language_detector import LanguageDetectionResult, LanguageDetector

module_logger = logging.getLogger(__name__)


class LanguageGate:
    """Reject manual content whose language differs from the topic language."""

    def __init__(
        self,
        topic_repository: TopicRepository,
        course_repository: Optional[CourseRepository] = None,
        detector: Optional[LanguageDetector] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.topic_repository = topic_repository
        self.course_repository = course_repository
        self.detector = detector or LanguageDetector()
        self.logger = logger or module_logger
        if getattr(self.detector, "ai_detector", None) is None:
            self.logger.warning(
                "Language gate has no AI detector: Latin-script content will be treated as English"
            )

    def resolve_expected_language(self, topic_id: int) -> Optional[str]:
        """Topic language, else the parent course language, normalized to ISO 639-1.

        Raises:
            LanguageValidationError: If the topic does not exist
        """
        topic = self.topic_repository.find_by_id(topic_id)
        if topic is None:
            raise LanguageValidationError(
                f"Language validation failed: topic {topic_id} not found",
                {"topic_id": topic_id},
            )

        return resolve_topic_language(topic, self.course_repository)

    def validate(
        self,
        content: Content,
        status_trail: Optional[StatusTrail] = None,
    ) -> Optional[LanguageDetectionResult]:
        """Check the content language against the expected language.

        Args:
            content: Candidate content (not yet persisted)
            status_trail: Optional caller-facing progress trail

        Returns:
            Detection result, or None when the gate did not apply

        Raises:
            LanguageMismatchError: Detected language differs from the expected one
            LanguageDetectionFailedError: No language could be detected
            LanguageValidationError: Any other failure during the check
        """
        if not content.requires_quality_gate:
            return None

        content_type = content.content_type_id
        try:
            expected = self.resolve_expected_language(content.topic_id)
            if not expected:
                self.logger.warning(
                    f"No language set on topic {content.topic_id} or its course, skipping language validation"
                )
                return None

            text = extract_validatable_text(content.content_data, content_type)
            if text is None:
                self.logger.info(
                    f"No natural-language text to validate for {content_type.value} content on "
                    f"topic {content.topic_id}, skipping language validation"
                )
                return None

            if status_trail is not None:
                status_trail.push("Validating content language...")

            result = self.detector.detect(text)
        except LanguageGateError:
            raise
        except Exception as e:
            self.logger.error(f"Language validation error for topic {content.topic_id}: {e}")
            raise LanguageValidationError(
                f"Language validation failed: {e}",
                {"content_type": content_type.value, "cause": type(e).__name__},
            ) from e

        details = {
            "expected_language": expected,
            "detected_language": result.language,
            "content_type": content_type.value,
            "detection_method": result.method,
        }

        if not result.language:
            raise LanguageDetectionFailedError(
                f"Could not detect the language of the content (expected {expected})",
                details,
            )

        if result.language != expected:
            subject = "Explanation" if content_type == ContentType.CODE else "Content"
            message = f"{subject} language ({result.language}) does not match expected language ({expected})"
            self.logger.warning(f"{message} for topic {content.topic_id}")
            raise LanguageMismatchError(message, details)

        self.logger.info(f"Language validation passed: {result.language} ({result.method})")
        if status_trail is not None:
            status_trail.push(f"Language validated: {result.language}")
        return result
