"""Topic and course models (read-only from the pipeline's point of view)."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class Course(BaseModel):
    """Course that groups topics and may declare a default language."""

    course_id: int
    course_name: str = Field(default="General Course")
    language: Optional[str] = Field(None, description="Language name or ISO 639-1 code")


class Topic(BaseModel):
    """Lesson-level unit that owns content items across formats."""

    topic_id: int
    topic_name: str = Field(default="Untitled Topic")
    language: Optional[str] = Field(None, description="Language name or ISO 639-1 code")
    course_id: Optional[int] = Field(None, description="Parent course, if any")
    skills: List[str] = Field(default_factory=list)

    @field_validator("skills", mode="before")
    @classmethod
    def wrap_single_skill(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v
