"""
Integration tests for the content mutation pipeline.

Runs submissions end to end through the orchestrator with in-memory
repositories, the real language gate and quality judge, and a mocked LLM:
1. Create manual content → language gate → quality gate → audio
2. Update existing content → history snapshot → quality gate → rollback on rejection
3. AI-assisted drafts skip both gates
4. Failures leave no partial writes behind
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from contentstudio.errors import (
    ContentValidationError,
    HistoryArchiveError,
    LanguageMismatchError,
    MissingCollaboratorError,
    QualityCheckFailedError,
    QualityCheckRecordError,
)
from contentstudio.models import (
    AudioResult,
    Content,
    ContentType,
    Course,
    GenerationMethod,
    QualityCheckStatus,
    QualityEvaluation,
    Topic,
)
from contentstudio.pipeline import MutationOrchestrator
from contentstudio.services.content_history import ContentHistoryService
from contentstudio.storage.memory import (
    InMemoryContentHistoryRepository,
    InMemoryContentRepository,
    InMemoryCourseRepository,
    InMemoryQualityCheckRepository,
    InMemoryTopicRepository,
)
from contentstudio.validators.language_detector import DetectedLanguage, LanguageDetector, LLMLanguageDetector
from contentstudio.validators.quality_judge import LLMQualityJudge

ENGLISH_TEXT = "Containers package an application together with its dependencies so it runs the same everywhere."


def _evaluation(relevance=90, originality=90, difficulty=85, consistency=88):
    return QualityEvaluation(
        relevance_score=relevance,
        originality_score=originality,
        difficulty_alignment_score=difficulty,
        consistency_score=consistency,
        feedback_summary="Clear explanation in the author's own words.",
    )


@pytest.fixture
def env():
    """Wire the orchestrator with in-memory storage and a scripted LLM."""
    state = {"language": "en", "evaluation": _evaluation()}

    def fake_generate(prompt, response_model, **kwargs):
        if response_model is DetectedLanguage:
            return DetectedLanguage(language_code=state["language"])
        if isinstance(state["evaluation"], Exception):
            raise state["evaluation"]
        return state["evaluation"]

    llm_client = MagicMock()
    llm_client.generate.side_effect = fake_generate

    content = InMemoryContentRepository()
    topics = InMemoryTopicRepository([Topic(topic_id=1, topic_name="Docker basics", language="en", skills=["containers"])])
    courses = InMemoryCourseRepository()
    history = InMemoryContentHistoryRepository()
    quality_checks = InMemoryQualityCheckRepository()

    judge = LLMQualityJudge(
        llm_client=llm_client,
        content_repository=content,
        topic_repository=topics,
        quality_check_repository=quality_checks,
        course_repository=courses,
    )
    audio_service = MagicMock()
    audio_service.generate_audio.return_value = AudioResult(
        audio_url="https://cdn.example.com/audio/lesson.mp3", format="mp3", duration=31.2, voice="alloy"
    )

    orchestrator = MutationOrchestrator(
        content_repository=content,
        topic_repository=topics,
        course_repository=courses,
        quality_service=judge,
        history_service=ContentHistoryService(content, history),
        audio_service=audio_service,
        language_detector=LanguageDetector(ai_detector=LLMLanguageDetector(llm_client)),
    )

    return SimpleNamespace(
        state=state,
        llm_client=llm_client,
        content=content,
        topics=topics,
        courses=courses,
        history=history,
        quality_checks=quality_checks,
        judge=judge,
        audio_service=audio_service,
        orchestrator=orchestrator,
    )


def _quality_calls(llm_client):
    return [c for c in llm_client.generate.call_args_list if c.kwargs["response_model"] is QualityEvaluation]


def _detection_calls(llm_client):
    return [c for c in llm_client.generate.call_args_list if c.kwargs["response_model"] is DetectedLanguage]


def _submission(content_data=None, content_type_id=1, method="manual", topic_id=1):
    return {
        "topic_id": topic_id,
        "content_type_id": content_type_id,
        "content_data": content_data if content_data is not None else {"text": ENGLISH_TEXT},
        "generation_method_id": method,
    }


def _seed_approved(env, text="Original approved lesson text.", method=GenerationMethod.MANUAL):
    return env.content.create(
        Content(
            topic_id=1,
            content_type_id=ContentType.TEXT,
            content_data={"text": text},
            generation_method_id=method,
            quality_check_status=QualityCheckStatus.APPROVED,
            quality_check_data={"quality_check_id": 99, "overall_score": 88},
        )
    )


class TestCreatePath:
    """New content for a topic."""

    def test_manual_text_is_approved_with_audio(self, env):
        content = env.orchestrator.submit(_submission())

        assert content.quality_check_status == QualityCheckStatus.APPROVED
        assert content.content_data.audio_url == "https://cdn.example.com/audio/lesson.mp3"
        assert content.content_data.audio_duration == 31.2

        [record] = env.quality_checks.all()
        assert content.quality_check_data["quality_check_id"] == record.quality_check_id
        assert record.status == "completed"
        assert env.content.find_by_id(content.content_id).is_approved

        assert [m["message"] for m in content.status_messages] == [
            "Validating content language...",
            "Language validated: en",
            "Starting quality check...",
            "Examining content originality...",
            "Checking difficulty alignment...",
            "Checking structure and consistency...",
            "Quality check completed successfully.",
            "Generating audio narration...",
            "Audio narration attached",
            "Content saved successfully",
        ]

    def test_audio_uses_topic_language(self, env):
        env.orchestrator.submit(_submission())

        assert env.audio_service.generate_audio.call_args.kwargs["language"] == "en"
        assert env.audio_service.generate_audio.call_args.kwargs["text"] == ENGLISH_TEXT

    def test_language_mismatch_blocks_everything(self, env):
        arabic = "هذا درس عن الحاويات وكيفية تشغيل التطبيقات باستخدام Docker"

        with pytest.raises(LanguageMismatchError) as exc_info:
            env.orchestrator.submit(_submission({"text": arabic}))

        assert exc_info.value.details["detected_language"] == "ar"
        assert exc_info.value.details["expected_language"] == "en"
        env.llm_client.generate.assert_not_called()
        env.audio_service.generate_audio.assert_not_called()
        assert env.content.all() == []
        assert [m["message"] for m in exc_info.value.status_messages] == ["Validating content language..."]

    def test_ai_detected_mismatch(self, env):
        env.state["language"] = "es"

        with pytest.raises(LanguageMismatchError, match=r"Content language \(es\) does not match expected language \(en\)"):
            env.orchestrator.submit(_submission({"text": "Los contenedores empaquetan una aplicación"}))

        assert _quality_calls(env.llm_client) == []

    def test_pre_save_evaluation_error_creates_nothing(self, env):
        env.state["evaluation"] = RuntimeError("Failed to generate structured response after 3 attempts")

        with pytest.raises(QualityCheckFailedError, match="^Quality check failed: "):
            env.orchestrator.submit(_submission())

        assert env.content.all() == []
        assert env.quality_checks.all() == []
        env.audio_service.generate_audio.assert_not_called()

    def test_rejected_content_creates_nothing(self, env):
        env.state["evaluation"] = _evaluation(originality=40)

        with pytest.raises(QualityCheckFailedError, match="copied or plagiarized") as exc_info:
            env.orchestrator.submit(_submission())

        assert env.content.all() == []
        assert exc_info.value.status_messages[-1]["message"].startswith("Quality check failed:")

    def test_record_failure_removes_created_row(self, env):
        env.quality_checks.create = MagicMock(side_effect=RuntimeError("insert failed"))

        with pytest.raises(QualityCheckRecordError):
            env.orchestrator.submit(_submission())

        assert env.content.all() == []
        env.audio_service.generate_audio.assert_not_called()

    def test_code_without_explanation_skips_language_gate(self, env):
        content = env.orchestrator.submit(_submission({"code": "docker run -p 8080:80 nginx"}, content_type_id="code"))

        assert content.is_approved
        assert _detection_calls(env.llm_client) == []
        assert len(_quality_calls(env.llm_client)) == 1
        env.audio_service.generate_audio.assert_not_called()
        assert "Validating content language..." not in [m["message"] for m in content.status_messages]

    def test_code_explanation_is_language_checked(self, env):
        env.state["language"] = "fr"
        data = {"code": "print('hi')", "explanation": "Affiche un message de bienvenue"}

        with pytest.raises(LanguageMismatchError, match="^Explanation language"):
            env.orchestrator.submit(_submission(data, content_type_id=2))

    def test_ai_assisted_skips_gates(self, env):
        content = env.orchestrator.submit(_submission(method="ai_assisted"))

        assert content.quality_check_status is None
        assert content.generation_method_id == GenerationMethod.AI_ASSISTED
        env.llm_client.generate.assert_not_called()
        assert content.content_data.audio_url is not None

    def test_existing_audio_not_regenerated(self, env):
        data = {"text": ENGLISH_TEXT, "audioUrl": "https://cdn.example.com/audio/existing.mp3"}

        content = env.orchestrator.submit(_submission(data))

        env.audio_service.generate_audio.assert_not_called()
        assert content.content_data.audio_url == "https://cdn.example.com/audio/existing.mp3"

    def test_audio_failure_is_not_fatal(self, env):
        env.audio_service.generate_audio.side_effect = RuntimeError("TTS quota exceeded")

        content = env.orchestrator.submit(_submission())

        assert content.is_approved
        assert content.content_data.audio_url is None
        messages = [m["message"] for m in content.status_messages]
        assert "Audio generation skipped: TTS quota exceeded" in messages
        assert messages[-1] == "Content saved successfully"

    def test_topic_lookup_failure_during_audio_is_not_fatal(self, env):
        audio_topics = MagicMock()
        audio_topics.find_by_id.side_effect = ConnectionError("db down")
        env.orchestrator.audio.topic_repository = audio_topics

        content = env.orchestrator.submit(_submission())

        assert content.is_approved
        assert env.content.find_by_id(content.content_id).is_approved
        messages = [m["message"] for m in content.status_messages]
        assert "Audio generation skipped: db down" in messages
        assert messages[-1] == "Content saved successfully"
        env.audio_service.generate_audio.assert_not_called()

    def test_audio_uses_course_language(self, env):
        env.courses.add(Course(course_id=7, course_name="Networking", language="Hebrew"))
        env.topics.add(Topic(topic_id=2, topic_name="Routing", course_id=7))

        env.orchestrator.submit(_submission({"text": "שלום לכולם"}, method="ai_assisted", topic_id=2))

        assert env.audio_service.generate_audio.call_args.kwargs["language"] == "he"

    def test_generate_audio_disabled(self, env):
        env.orchestrator.submit(_submission(), generate_audio=False)
        env.audio_service.generate_audio.assert_not_called()


class TestUpdatePath:
    """Existing content for the same topic and type."""

    def test_update_archives_previous_version(self, env):
        existing = _seed_approved(env)

        content = env.orchestrator.submit(_submission())

        assert content.content_id == existing.content_id
        assert content.is_approved
        assert content.quality_check_data["quality_check_id"] != 99
        [entry] = env.history.all()
        assert entry.content_data == {"text": "Original approved lesson text."}
        assert len(env.content.all()) == 1

        messages = [m["message"] for m in content.status_messages]
        assert messages.index("Saving previous version to history...") < messages.index("Starting quality check...")

    def test_rejected_update_restores_previous_row(self, env):
        existing = _seed_approved(env)
        env.state["evaluation"] = _evaluation(consistency=20)

        with pytest.raises(QualityCheckFailedError) as exc_info:
            env.orchestrator.submit(_submission(method="manual_edited"))

        restored = env.content.find_by_id(existing.content_id)
        assert restored.payload() == existing.payload()
        assert restored.quality_check_status == existing.quality_check_status
        assert restored.quality_check_data == existing.quality_check_data
        assert restored.generation_method_id == existing.generation_method_id
        assert len(env.history.all()) == 1

        messages = [m["message"] for m in exc_info.value.status_messages]
        assert messages[-1] == "Quality check failed, restoring previous version"
        env.audio_service.generate_audio.assert_not_called()

    def test_failed_check_records_failure_before_restore(self, env):
        existing = _seed_approved(env)
        env.state["evaluation"] = _evaluation(relevance=10)

        with pytest.raises(QualityCheckFailedError):
            env.orchestrator.submit(_submission())

        [record] = env.quality_checks.find_by_content_id(existing.content_id)
        assert record.status == "failed"

    def test_lookup_matches_type_by_name_and_id(self, env):
        existing = env.content.create(
            Content(
                topic_id=1,
                content_type_id=ContentType.CODE,
                content_data={"code": "x = 1"},
                generation_method_id=GenerationMethod.AI_ASSISTED,
            )
        )

        content = env.orchestrator.submit(_submission({"code": "x = 2"}, content_type_id="Code", method="ai_assisted"))

        assert content.content_id == existing.content_id
        assert content.payload() == {"code": "x = 2"}
        assert content.quality_check_status is None
        assert env.history.all()[0].content_data == {"code": "x = 1"}

    def test_history_failure_prevents_mutation(self, env):
        existing = _seed_approved(env)
        env.history.create = MagicMock(side_effect=RuntimeError("history table locked"))

        with pytest.raises(HistoryArchiveError):
            env.orchestrator.submit(_submission())

        current = env.content.find_by_id(existing.content_id)
        assert current.payload() == existing.payload()
        assert current.is_approved
        assert _quality_calls(env.llm_client) == []

    def test_missing_history_service(self, env):
        existing = _seed_approved(env)
        orchestrator = MutationOrchestrator(
            content_repository=env.content,
            topic_repository=env.topics,
            quality_service=env.judge,
        )

        with pytest.raises(MissingCollaboratorError):
            orchestrator.submit(_submission())

        assert env.content.find_by_id(existing.content_id).payload() == existing.payload()
        env.llm_client.generate.assert_not_called()


class TestSubmissionValidation:
    def test_missing_fields(self, env):
        with pytest.raises(ContentValidationError, match="Missing required fields: content_data"):
            env.orchestrator.submit({"topic_id": 1, "content_type_id": 1})

    def test_unknown_content_type(self, env):
        with pytest.raises(ContentValidationError, match="Unknown content type"):
            env.orchestrator.submit(_submission(content_type_id="video"))

    def test_unknown_generation_method(self, env):
        with pytest.raises(ContentValidationError, match="Unknown generation method"):
            env.orchestrator.submit(_submission(method="generated"))

    def test_manual_requires_quality_service(self, env):
        orchestrator = MutationOrchestrator(content_repository=env.content, topic_repository=env.topics)

        with pytest.raises(MissingCollaboratorError):
            orchestrator.submit(_submission())

        assert env.content.all() == []

    def test_audio_text_limit_boundary(self, env):
        content = env.orchestrator.submit(_submission({"text": "a" * 4000}))
        assert content.content_data.audio_url is not None

        with pytest.raises(ContentValidationError, match="4000 character limit") as exc_info:
            env.orchestrator.submit(_submission({"text": "x" * 4001}))

        assert exc_info.value.details["length"] == 4001
        assert len(env.content.all()) == 1
        assert env.history.all() == []

    def test_limit_not_applied_without_audio(self, env):
        content = env.orchestrator.submit(_submission({"text": "x" * 5000}, method="ai_assisted"), generate_audio=False)
        assert content.content_id is not None
