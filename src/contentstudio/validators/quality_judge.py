"""LLM quality judge for manually authored content.

Scores content on four dimensions (relevance, originality, difficulty
alignment, consistency) and rejects it when any score is below its threshold.
Checks run in a fixed order so the author sees the most important problem
first.
"""

import json
import logging
from typing import List, Optional, Tuple

from contentstudio.constants import (
    CONSISTENCY_THRESHOLD,
    DIFFICULTY_THRESHOLD,
    ORIGINALITY_THRESHOLD,
    QUALITY_CHECK_MODEL,
    QUALITY_TEXT_LIMIT,
    RELEVANCE_THRESHOLD,
)
from contentstudio.errors import ContentNotFoundError, QualityCheckFailedError
from contentstudio.interfaces import (
    ContentRepository,
    CourseRepository,
    QualityCheckRepository,
    TopicRepository,
)
from contentstudio.models.content import Content, QualityCheckStatus
from contentstudio.models.quality import QualityCheckRecord, QualityEvaluation, QualityResult
from contentstudio.models.status_trail import StatusTrail
from contentstudio.utils.llm_client import LLMClient
from contentstudio.utils.text_extraction import extract_quality_text

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an educational content quality inspector.

Your evaluation must be STRICT, but ONLY based on the text itself. You do NOT search the internet.

Detect plagiarism ONLY when the text contains:
- Clear copy/paste sentences
- Near-identical structure to known documentation
- Paragraphs that read like official docs word-for-word

Do NOT flag plagiarism for:
- Using standard terminology
- Being correct
- Having a structured or formal explanation
- Using concepts required for the topic

Scoring rules:
- If content is NOT relevant: relevance_score < 60
- If plagiarism is detected OR content closely resembles official documentation: originality_score < 75
- If text feels trainer-written: originality_score 75-100
- When unsure, prefer higher originality (avoid false positives)

Evaluate four dimensions: relevance, originality, difficulty alignment, consistency.
Give each a score from 0 to 100 and a feedback_summary of 2-3 short sentences."""


class LLMQualityJudge:
    """Quality check service backed by an LLM.

    Quality checks always run on ``QUALITY_CHECK_MODEL`` (gpt-4o by default);
    smaller models miss copied documentation too often.
    """

    def __init__(
        self,
        llm_client: LLMClient,
        content_repository: ContentRepository,
        topic_repository: TopicRepository,
        quality_check_repository: QualityCheckRepository,
        course_repository: Optional[CourseRepository] = None,
        model: Optional[str] = None,
    ):
        """Initialize the judge.

        Args:
            llm_client: Configured LLM client with instructor support
            content_repository: Used by ``trigger_quality_check`` to load and update content
            topic_repository: Source of topic name and skills
            quality_check_repository: Stores one audit record per check
            course_repository: Optional source of the course name
            model: Model override (default: QUALITY_CHECK_MODEL)
        """
        self.llm_client = llm_client
        self.content_repository = content_repository
        self.topic_repository = topic_repository
        self.quality_check_repository = quality_check_repository
        self.course_repository = course_repository
        self.model = model or QUALITY_CHECK_MODEL

    def evaluate(
        self,
        course_name: str,
        topic_name: str,
        skills: List[str],
        content_text: str,
    ) -> QualityEvaluation:
        """Score content against its lesson context.

        Raises:
            RuntimeError: If the LLM call fails after retries
        """
        logger.info(
            f"Evaluating content quality: topic={topic_name!r}, course={course_name!r}, "
            f"length={len(content_text)}, skills={len(skills)}, model={self.model}"
        )
        prompt = self._build_evaluation_prompt(course_name, topic_name, skills, content_text)
        evaluation = self.llm_client.generate(
            prompt=prompt,
            response_model=QualityEvaluation,
            system_prompt=SYSTEM_PROMPT,
            model=self.model,
            temperature=0.25,
            max_tokens=350,
        )
        logger.info(
            f"Quality scores: relevance={evaluation.relevance_score}, "
            f"originality={evaluation.originality_score}, "
            f"difficulty={evaluation.difficulty_alignment_score}, "
            f"consistency={evaluation.consistency_score}"
        )
        return evaluation

    def check_thresholds(
        self,
        evaluation: QualityEvaluation,
        status_trail: Optional[StatusTrail] = None,
    ) -> QualityResult:
        """Apply the score thresholds in order: relevance, originality, difficulty, consistency.

        A missing score counts as 0.

        Raises:
            QualityCheckFailedError: On the first score below its threshold
        """
        feedback = evaluation.feedback_summary

        relevance = evaluation.relevance_score or 0
        if relevance < RELEVANCE_THRESHOLD:
            self._reject(
                f"Content is not relevant to the lesson topic (Relevance: {relevance}/100).",
                feedback
                or "The content does not match the lesson topic. "
                "Please ensure your content is directly related to the topic.",
                evaluation,
            )

        if status_trail is not None:
            status_trail.push("Checking difficulty alignment...")

        originality = evaluation.originality_score or 0
        if originality < ORIGINALITY_THRESHOLD:
            self._reject(
                f"Content appears to be copied or plagiarized (Originality: {originality}/100).",
                feedback
                or "Please rewrite the content in your own words. "
                "Content that closely resembles official documentation will be rejected.",
                evaluation,
            )

        difficulty = evaluation.difficulty_alignment_score or 0
        if difficulty < DIFFICULTY_THRESHOLD:
            self._reject(
                f"Difficulty level mismatch ({difficulty}/100).",
                feedback or "Please adjust the difficulty level to match the target skills.",
                evaluation,
            )

        if status_trail is not None:
            status_trail.push("Checking structure and consistency...")

        consistency = evaluation.consistency_score or 0
        if consistency < CONSISTENCY_THRESHOLD:
            self._reject(
                f"Low consistency score ({consistency}/100).",
                feedback or "Please improve the structure and coherence of your content.",
                evaluation,
            )

        return QualityResult(
            relevance_score=relevance,
            originality_score=originality,
            difficulty_alignment_score=difficulty,
            consistency_score=consistency,
            feedback_summary=feedback,
        )

    def validate_content_quality_before_save(
        self,
        content: Content,
        topic_id: int,
        status_trail: Optional[StatusTrail] = None,
    ) -> QualityResult:
        """Evaluate content that has not been persisted yet.

        Args:
            content: Candidate content
            topic_id: Topic providing the evaluation context
            status_trail: Optional caller-facing progress trail

        Returns:
            QualityResult when every threshold passes

        Raises:
            QualityCheckFailedError: If the content is rejected or has no text
            ContentNotFoundError: If the topic does not exist
        """
        if status_trail is not None:
            status_trail.push("Examining content originality...")

        try:
            content_text = extract_quality_text(content.content_data, content.content_type_id)
            if not content_text or not content_text.strip():
                raise QualityCheckFailedError(
                    "Content text not found or empty",
                    {"topic_id": topic_id, "content_type": content.content_type_id.value},
                )

            course_name, topic_name, skills = self._load_context(topic_id)
            evaluation = self.evaluate(course_name, topic_name, skills, content_text)
            result = self.check_thresholds(evaluation, status_trail)
        except Exception as e:
            if status_trail is not None:
                status_trail.push(f"Quality check failed: {e}")
            logger.error(f"Quality check failed for topic {topic_id}: {e}")
            raise

        logger.info(f"Quality check passed for topic {topic_id}: overall={result.overall_score}")
        return result

    def trigger_quality_check(
        self,
        content_id: int,
        check_type: str = "full",
        status_trail: Optional[StatusTrail] = None,
    ) -> QualityCheckRecord:
        """Run a quality check on persisted content and record the outcome.

        On success the content becomes ``approved`` with the check id in its
        ``quality_check_data``. On failure the record is marked failed and the
        content ``rejected`` (best effort) before the error is re-raised.
        """
        record = self.quality_check_repository.create(
            QualityCheckRecord(content_id=content_id, check_type=check_type, status="processing")
        )
        logger.info(f"Quality check {record.quality_check_id} started for content {content_id} ({check_type})")

        try:
            content = self.content_repository.find_by_id(content_id)
            if content is None:
                raise ContentNotFoundError(f"Content {content_id} not found", {"content_id": content_id})

            result = self.validate_content_quality_before_save(content, content.topic_id, status_trail)

            record.mark_completed(result.to_quality_check_data(), result.overall_score)
            self.quality_check_repository.update(
                record.quality_check_id,
                {
                    "status": record.status,
                    "results": record.results,
                    "score": record.score,
                    "completed_at": record.completed_at,
                },
            )
            self.content_repository.update(
                content_id,
                {
                    "quality_check_status": QualityCheckStatus.APPROVED,
                    "quality_check_data": result.to_quality_check_data(record.quality_check_id),
                },
            )
        except Exception as e:
            self._record_failure(record, content_id, e)
            raise

        logger.info(f"Quality check {record.quality_check_id} approved content {content_id}")
        return record

    def record_quality_check(
        self,
        content_id: int,
        result: QualityResult,
        check_type: str = "full",
    ) -> QualityCheckRecord:
        """Store a completed audit record for a check that ran before the content existed."""
        record = QualityCheckRecord(content_id=content_id, check_type=check_type, status="processing")
        record.mark_completed(result.to_quality_check_data(), result.overall_score)
        saved = self.quality_check_repository.create(record)
        logger.info(f"Recorded quality check {saved.quality_check_id} for content {content_id}")
        return saved

    def _record_failure(self, record: QualityCheckRecord, content_id: int, error: Exception) -> None:
        record.mark_failed(str(error))
        try:
            self.quality_check_repository.update(
                record.quality_check_id,
                {
                    "status": record.status,
                    "error_message": record.error_message,
                    "completed_at": record.completed_at,
                },
            )
        except Exception as update_error:
            logger.warning(f"Could not mark quality check {record.quality_check_id} failed: {update_error}")

        try:
            self.content_repository.update(
                content_id,
                {
                    "quality_check_status": QualityCheckStatus.REJECTED,
                    "quality_check_data": {
                        "quality_check_id": record.quality_check_id,
                        "error": str(error),
                    },
                },
            )
        except Exception as update_error:
            logger.warning(f"Could not mark content {content_id} rejected: {update_error}")

    def _load_context(self, topic_id: int) -> Tuple[str, str, List[str]]:
        topic = self.topic_repository.find_by_id(topic_id)
        if topic is None:
            raise ContentNotFoundError(f"Topic {topic_id} not found", {"topic_id": topic_id})

        course_name = None
        if topic.course_id is not None and self.course_repository is not None:
            course = self.course_repository.find_by_id(topic.course_id)
            course_name = course.course_name if course else None

        return course_name or "General Course", topic.topic_name or "Untitled Topic", list(topic.skills)

    def _reject(self, reason: str, feedback: str, evaluation: QualityEvaluation) -> None:
        message = f"Content failed quality check: {reason} {feedback}"
        logger.warning(message)
        raise QualityCheckFailedError(message, evaluation.model_dump())

    def _build_evaluation_prompt(
        self,
        course_name: str,
        topic_name: str,
        skills: List[str],
        content_text: str,
    ) -> str:
        return f"""Evaluate the following educational content.

Topic: {topic_name}
Course: {course_name}
Required skills: {json.dumps(skills, ensure_ascii=False)}

Content:
\"\"\"
{content_text[:QUALITY_TEXT_LIMIT]}
\"\"\"

Rules:
1. The content must be directly relevant to the topic.
2. Detect plagiarism ONLY if entire sentences or paragraphs appear copied.
3. For CODE content: code that closely matches official documentation or tutorial examples
   should receive originality_score < 75.
4. Using standard terminology is NOT plagiarism.
5. Score originality high if the writing feels original even if technical.
6. Assign difficulty based on the required skills.
"""
