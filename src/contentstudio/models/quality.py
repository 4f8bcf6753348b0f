"""Quality gate models.

``QualityEvaluation`` is the structured response requested from the LLM;
``QualityResult`` is the validated verdict the pipeline acts on, and
``QualityCheckRecord`` is the durable audit row for each check.
"""

from datetime import UTC, datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

CheckType = Literal["full", "quick", "originality_only"]
CheckStatus = Literal["pending", "processing", "completed", "failed"]


class QualityEvaluation(BaseModel):
    """Raw LLM scoring of a piece of content.

    Scores are optional so that a missing score reaches the threshold check
    and is rejected instead of failing schema validation.
    """

    relevance_score: Optional[int] = Field(None, ge=0, le=100, description="Relevance to the lesson topic")
    originality_score: Optional[int] = Field(
        None, ge=0, le=100, description="Below 75 when text resembles official documentation"
    )
    difficulty_alignment_score: Optional[int] = Field(
        None, ge=0, le=100, description="Fit with the topic's skills"
    )
    consistency_score: Optional[int] = Field(None, ge=0, le=100, description="Structure and coherence")
    feedback_summary: str = Field(default="Evaluation completed.", description="2-3 short sentences")


class QualityResult(BaseModel):
    """Approved quality verdict."""

    relevance_score: int = Field(..., ge=0, le=100)
    originality_score: int = Field(..., ge=0, le=100)
    difficulty_alignment_score: int = Field(..., ge=0, le=100)
    consistency_score: int = Field(..., ge=0, le=100)
    feedback_summary: str = ""

    @property
    def overall_score(self) -> int:
        """Weighted score; relevance counts double."""
        return round(
            self.relevance_score * 0.4
            + self.originality_score * 0.2
            + self.difficulty_alignment_score * 0.2
            + self.consistency_score * 0.2
        )

    def to_quality_check_data(self, quality_check_id: Optional[int] = None) -> Dict[str, Any]:
        """Result bag stored on the content row."""
        data: Dict[str, Any] = {
            "relevance_score": self.relevance_score,
            "originality_score": self.originality_score,
            "difficulty_alignment_score": self.difficulty_alignment_score,
            "consistency_score": self.consistency_score,
            "overall_score": self.overall_score,
            "feedback_summary": self.feedback_summary,
        }
        if quality_check_id is not None:
            data["quality_check_id"] = quality_check_id
        return data


class QualityCheckRecord(BaseModel):
    """Audit record of one quality check run."""

    quality_check_id: Optional[int] = None
    content_id: int
    check_type: CheckType = "full"
    status: CheckStatus = "pending"
    results: Optional[Dict[str, Any]] = None
    score: Optional[int] = None
    error_message: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: Optional[datetime] = None

    def mark_completed(self, results: Dict[str, Any], score: int) -> None:
        self.status = "completed"
        self.results = results
        self.score = score
        self.completed_at = datetime.now(UTC)

    def mark_failed(self, error_message: str) -> None:
        self.status = "failed"
        self.error_message = error_message
        self.completed_at = datetime.now(UTC)
