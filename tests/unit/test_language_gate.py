"""Unit tests for the language gate."""

import logging
from unittest.mock import MagicMock

import pytest

from contentstudio.errors import (
    LanguageDetectionFailedError,
    LanguageMismatchError,
    LanguageValidationError,
)
from contentstudio.models import Content, Course, StatusTrail, Topic
from contentstudio.storage.memory import InMemoryCourseRepository, InMemoryTopicRepository
from contentstudio.validators.language_detector import LanguageDetectionResult, LanguageDetector
from contentstudio.validators.language_gate import LanguageGate


@pytest.fixture
def topic_repository():
    return InMemoryTopicRepository(
        [
            Topic(topic_id=1, topic_name="Redes", language="Spanish"),
            Topic(topic_id=2, topic_name="Course default", course_id=10),
            Topic(topic_id=3, topic_name="No language"),
            Topic(topic_id=4, topic_name="Hebrew topic", language="he"),
        ]
    )


@pytest.fixture
def course_repository():
    return InMemoryCourseRepository([Course(course_id=10, course_name="Bases", language="English")])


@pytest.fixture
def mock_detector():
    detector = MagicMock()
    detector.detect.return_value = LanguageDetectionResult(language="es", method="ai")
    return detector


def _content(topic_id=1, content_type_id="text", content_data=None, method="manual"):
    return Content(
        topic_id=topic_id,
        content_type_id=content_type_id,
        content_data=content_data if content_data is not None else {"text": "Hola a todos"},
        generation_method_id=method,
    )


class TestResolveExpectedLanguage:
    def test_topic_language(self, topic_repository, course_repository):
        gate = LanguageGate(topic_repository, course_repository)
        assert gate.resolve_expected_language(1) == "es"

    def test_falls_back_to_course(self, topic_repository, course_repository):
        gate = LanguageGate(topic_repository, course_repository)
        assert gate.resolve_expected_language(2) == "en"

    def test_no_language(self, topic_repository, course_repository):
        gate = LanguageGate(topic_repository, course_repository)
        assert gate.resolve_expected_language(3) is None

    def test_missing_topic(self, topic_repository):
        with pytest.raises(LanguageValidationError, match="topic 99 not found"):
            LanguageGate(topic_repository).resolve_expected_language(99)


class TestDetectorWiring:
    def test_warns_without_ai_detector(self, topic_repository, caplog):
        caplog.set_level(logging.WARNING)

        LanguageGate(topic_repository)

        assert any("no AI detector" in record.getMessage() for record in caplog.records)

    def test_quiet_with_ai_detector(self, topic_repository, caplog):
        caplog.set_level(logging.WARNING)

        LanguageGate(topic_repository, detector=LanguageDetector(ai_detector=MagicMock()))

        assert not any("no AI detector" in record.getMessage() for record in caplog.records)


class TestLanguageGateValidate:
    """Test the gate decision for each detection outcome."""

    def test_match_passes_and_records_trail(self, topic_repository, mock_detector):
        trail = StatusTrail()

        result = LanguageGate(topic_repository, detector=mock_detector).validate(_content(), trail)

        assert result.language == "es"
        assert trail.messages() == ["Validating content language...", "Language validated: es"]
        mock_detector.detect.assert_called_once_with("Hola a todos")

    def test_mismatch(self, topic_repository, mock_detector):
        mock_detector.detect.return_value = LanguageDetectionResult(language="fr", method="ai")

        with pytest.raises(LanguageMismatchError) as exc_info:
            LanguageGate(topic_repository, detector=mock_detector).validate(_content())

        assert str(exc_info.value) == "Content language (fr) does not match expected language (es)"
        assert exc_info.value.details == {
            "expected_language": "es",
            "detected_language": "fr",
            "content_type": "text",
            "detection_method": "ai",
        }

    def test_code_mismatch_mentions_explanation(self, topic_repository, mock_detector):
        mock_detector.detect.return_value = LanguageDetectionResult(language="en", method="ai")
        content = _content(content_type_id="code", content_data={"code": "x = 1", "explanation": "Assigns one"})

        with pytest.raises(LanguageMismatchError, match="^Explanation language"):
            LanguageGate(topic_repository, detector=mock_detector).validate(content)

    def test_code_without_explanation_skipped(self, topic_repository, mock_detector):
        content = _content(content_type_id="code", content_data={"code": "x = 1"})

        assert LanguageGate(topic_repository, detector=mock_detector).validate(content) is None
        mock_detector.detect.assert_not_called()

    def test_detection_failed(self, topic_repository, mock_detector):
        mock_detector.detect.return_value = LanguageDetectionResult(language=None, method="ai")

        with pytest.raises(LanguageDetectionFailedError):
            LanguageGate(topic_repository, detector=mock_detector).validate(_content())

    def test_detector_error_wrapped(self, topic_repository, mock_detector):
        mock_detector.detect.side_effect = RuntimeError("LLM unavailable")

        with pytest.raises(LanguageValidationError, match="LLM unavailable"):
            LanguageGate(topic_repository, detector=mock_detector).validate(_content())

    def test_missing_topic_fails_closed(self, topic_repository, mock_detector):
        with pytest.raises(LanguageValidationError):
            LanguageGate(topic_repository, detector=mock_detector).validate(_content(topic_id=99))

    def test_no_expected_language_skips(self, topic_repository, mock_detector):
        assert LanguageGate(topic_repository, detector=mock_detector).validate(_content(topic_id=3)) is None
        mock_detector.detect.assert_not_called()

    def test_ai_assisted_not_gated(self, topic_repository, mock_detector):
        content = _content(method="ai_assisted")

        assert LanguageGate(topic_repository, detector=mock_detector).validate(content) is None
        mock_detector.detect.assert_not_called()

    def test_script_detection_without_ai(self, topic_repository):
        gate = LanguageGate(topic_repository, detector=LanguageDetector())
        content = _content(topic_id=4, content_data={"text": "שלום לכולם, היום נלמד על Docker"})

        assert gate.validate(content).method == "ratio"

    def test_english_default_mismatch_without_ai(self, topic_repository):
        gate = LanguageGate(topic_repository, detector=LanguageDetector())

        with pytest.raises(LanguageMismatchError) as exc_info:
            gate.validate(_content())

        assert exc_info.value.details["detection_method"] == "default"
