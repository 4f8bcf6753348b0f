"""
Collaborator Protocols
======================

Contracts consumed by the mutation pipeline, written as ``typing.Protocol``
classes so any repository or service with the right methods can be injected.
"""

from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from contentstudio.models.audio import AudioResult
from contentstudio.models.content import Content
from contentstudio.models.course import Course, Topic
from contentstudio.models.history import ContentHistoryEntry
from contentstudio.models.quality import QualityCheckRecord, QualityResult
from contentstudio.models.status_trail import StatusTrail


@runtime_checkable
class ContentRepository(Protocol):
    def create(self, content: Content) -> Content: ...

    def update(self, content_id: int, updates: Dict[str, Any]) -> Content: ...

    def find_by_id(self, content_id: int) -> Optional[Content]: ...

    def find_latest_by_topic_and_type(self, topic_id: int, content_type: Any) -> Optional[Content]: ...

    def find_all_by_topic_id(self, topic_id: int) -> List[Content]: ...

    def delete(self, content_id: int, hard: bool = False) -> None: ...

    def get_content_type_names_by_ids(self, ids: Iterable[int]) -> Dict[int, str]: ...


class TopicRepository(Protocol):
    def find_by_id(self, topic_id: int) -> Optional[Topic]: ...


class CourseRepository(Protocol):
    def find_by_id(self, course_id: int) -> Optional[Course]: ...


class ContentHistoryRepository(Protocol):
    def create(self, entry: ContentHistoryEntry) -> ContentHistoryEntry: ...

    def find_by_id(self, history_id: int) -> Optional[ContentHistoryEntry]: ...

    def find_by_topic_and_type(self, topic_id: int, content_type: Any) -> List[ContentHistoryEntry]: ...

    def soft_delete(self, history_id: int) -> None: ...


class QualityCheckRepository(Protocol):
    def create(self, record: QualityCheckRecord) -> QualityCheckRecord: ...

    def update(self, quality_check_id: int, updates: Dict[str, Any]) -> QualityCheckRecord: ...

    def find_by_id(self, quality_check_id: int) -> Optional[QualityCheckRecord]: ...

    def find_by_content_id(self, content_id: int) -> List[QualityCheckRecord]: ...


@runtime_checkable
class QualityCheckService(Protocol):
    def trigger_quality_check(
        self,
        content_id: int,
        check_type: str = "full",
        status_trail: Optional[StatusTrail] = None,
    ) -> Any: ...

    def validate_content_quality_before_save(
        self,
        content: Content,
        topic_id: int,
        status_trail: Optional[StatusTrail] = None,
    ) -> QualityResult: ...

    def record_quality_check(
        self,
        content_id: int,
        result: QualityResult,
        check_type: str = "full",
    ) -> QualityCheckRecord: ...


class ContentHistoryService(Protocol):
    def save_version(self, content: Content, force: bool = False) -> Any: ...


@runtime_checkable
class AudioGenerationService(Protocol):
    def generate_audio(
        self,
        text: str,
        voice: str,
        model: str,
        format: str,
        language: str,
    ) -> AudioResult: ...


class LanguageDetectionClient(Protocol):
    def detect_language(self, text: str) -> Optional[str]: ...
