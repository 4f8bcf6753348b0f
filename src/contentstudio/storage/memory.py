"""In-memory repositories.

Implement every repository protocol the pipeline consumes. Rows are stored as
pydantic models and copied on the way in and out so callers can never mutate
stored state by accident.
"""

import logging
from datetime import UTC, datetime
from typing import Any, Dict, Iterable, List, Optional

from contentstudio.errors import ContentNotFoundError
from contentstudio.models.content import Content, ContentType
from contentstudio.models.course import Course, Topic
from contentstudio.models.history import ContentHistoryEntry
from contentstudio.models.quality import QualityCheckRecord
from contentstudio.utils.content_types import content_types_match

logger = logging.getLogger(__name__)


def _latest(rows: Iterable[Content]) -> Optional[Content]:
    ordered = sorted(rows, key=lambda row: (row.updated_at, row.content_id or 0), reverse=True)
    return ordered[0] if ordered else None


class InMemoryContentRepository:
    """Content rows keyed by ``content_id``."""

    def __init__(self) -> None:
        self._rows: Dict[int, Content] = {}
        self._archived: set = set()
        self._next_id = 1

    def create(self, content: Content) -> Content:
        now = datetime.now(UTC)
        row = content.model_copy(
            update={"content_id": self._next_id, "created_at": now, "updated_at": now},
            deep=True,
        )
        self._rows[row.content_id] = row
        self._next_id += 1
        logger.debug(f"Created content {row.content_id} (topic {row.topic_id}, {row.content_type_id.value})")
        return row.model_copy(deep=True)

    def update(self, content_id: int, updates: Dict[str, Any]) -> Content:
        row = self._rows.get(content_id)
        if row is None or content_id in self._archived:
            raise ContentNotFoundError(f"Content {content_id} not found", {"content_id": content_id})

        values = row.model_dump(exclude={"content_data"})
        values["content_data"] = row.payload()
        values.update(updates)
        values["updated_at"] = datetime.now(UTC)

        updated = Content.model_validate(values)
        self._rows[content_id] = updated
        return updated.model_copy(deep=True)

    def find_by_id(self, content_id: int) -> Optional[Content]:
        row = self._rows.get(content_id)
        if row is None or content_id in self._archived:
            return None
        return row.model_copy(deep=True)

    def find_latest_by_topic_and_type(self, topic_id: int, content_type: Any) -> Optional[Content]:
        matches = [
            row
            for row in self._active()
            if row.topic_id == topic_id and content_types_match(row.content_type_id, content_type)
        ]
        latest = _latest(matches)
        return latest.model_copy(deep=True) if latest else None

    def find_all_by_topic_id(self, topic_id: int) -> List[Content]:
        return [row.model_copy(deep=True) for row in self._active() if row.topic_id == topic_id]

    def delete(self, content_id: int, hard: bool = False) -> None:
        if content_id not in self._rows:
            raise ContentNotFoundError(f"Content {content_id} not found", {"content_id": content_id})
        if hard:
            del self._rows[content_id]
            self._archived.discard(content_id)
        else:
            self._archived.add(content_id)
        logger.debug(f"Deleted content {content_id} (hard={hard})")

    def get_content_type_names_by_ids(self, ids: Iterable[int]) -> Dict[int, str]:
        names = {}
        for type_id in ids:
            try:
                names[type_id] = ContentType.from_identifier(int(type_id)).value
            except (TypeError, ValueError):
                continue
        return names

    def all(self) -> List[Content]:
        """Every row including archived ones, for export."""
        return [row.model_copy(deep=True) for row in self._rows.values()]

    def load(self, rows: Iterable[Content]) -> None:
        for row in rows:
            self._rows[row.content_id] = row
            self._next_id = max(self._next_id, row.content_id + 1)

    def _active(self) -> List[Content]:
        return [row for content_id, row in self._rows.items() if content_id not in self._archived]


class InMemoryTopicRepository:
    def __init__(self, topics: Optional[Iterable[Topic]] = None) -> None:
        self._topics: Dict[int, Topic] = {topic.topic_id: topic for topic in topics or []}

    def add(self, topic: Topic) -> Topic:
        self._topics[topic.topic_id] = topic
        return topic

    def find_by_id(self, topic_id: int) -> Optional[Topic]:
        topic = self._topics.get(topic_id)
        return topic.model_copy(deep=True) if topic else None

    def all(self) -> List[Topic]:
        return list(self._topics.values())


class InMemoryCourseRepository:
    def __init__(self, courses: Optional[Iterable[Course]] = None) -> None:
        self._courses: Dict[int, Course] = {course.course_id: course for course in courses or []}

    def add(self, course: Course) -> Course:
        self._courses[course.course_id] = course
        return course

    def find_by_id(self, course_id: int) -> Optional[Course]:
        course = self._courses.get(course_id)
        return course.model_copy(deep=True) if course else None

    def all(self) -> List[Course]:
        return list(self._courses.values())


class InMemoryContentHistoryRepository:
    """History snapshots; soft-deleted entries stay in storage."""

    def __init__(self) -> None:
        self._entries: Dict[int, ContentHistoryEntry] = {}
        self._next_id = 1

    def create(self, entry: ContentHistoryEntry) -> ContentHistoryEntry:
        stored = entry.model_copy(update={"history_id": self._next_id}, deep=True)
        self._entries[stored.history_id] = stored
        self._next_id += 1
        return stored.model_copy(deep=True)

    def find_by_id(self, history_id: int) -> Optional[ContentHistoryEntry]:
        entry = self._entries.get(history_id)
        return entry.model_copy(deep=True) if entry else None

    def find_by_topic_and_type(self, topic_id: int, content_type: Any) -> List[ContentHistoryEntry]:
        return [
            entry.model_copy(deep=True)
            for entry in self._entries.values()
            if entry.topic_id == topic_id and content_types_match(entry.content_type_id, content_type)
        ]

    def soft_delete(self, history_id: int) -> None:
        entry = self._entries.get(history_id)
        if entry is None:
            raise ContentNotFoundError(f"History entry {history_id} not found", {"history_id": history_id})
        self._entries[history_id] = entry.model_copy(update={"deleted_at": datetime.now(UTC)})

    def all(self) -> List[ContentHistoryEntry]:
        return [entry.model_copy(deep=True) for entry in self._entries.values()]

    def load(self, entries: Iterable[ContentHistoryEntry]) -> None:
        for entry in entries:
            self._entries[entry.history_id] = entry
            self._next_id = max(self._next_id, entry.history_id + 1)


class InMemoryQualityCheckRepository:
    def __init__(self) -> None:
        self._records: Dict[int, QualityCheckRecord] = {}
        self._next_id = 1

    def create(self, record: QualityCheckRecord) -> QualityCheckRecord:
        stored = record.model_copy(update={"quality_check_id": self._next_id}, deep=True)
        self._records[stored.quality_check_id] = stored
        self._next_id += 1
        return stored.model_copy(deep=True)

    def update(self, quality_check_id: int, updates: Dict[str, Any]) -> QualityCheckRecord:
        record = self._records.get(quality_check_id)
        if record is None:
            raise ContentNotFoundError(
                f"Quality check {quality_check_id} not found", {"quality_check_id": quality_check_id}
            )
        updated = QualityCheckRecord.model_validate({**record.model_dump(), **updates})
        self._records[quality_check_id] = updated
        return updated.model_copy(deep=True)

    def find_by_id(self, quality_check_id: int) -> Optional[QualityCheckRecord]:
        record = self._records.get(quality_check_id)
        return record.model_copy(deep=True) if record else None

    def find_by_content_id(self, content_id: int) -> List[QualityCheckRecord]:
        return [record.model_copy(deep=True) for record in self._records.values() if record.content_id == content_id]

    def all(self) -> List[QualityCheckRecord]:
        return [record.model_copy(deep=True) for record in self._records.values()]

    def load(self, records: Iterable[QualityCheckRecord]) -> None:
        for record in records:
            self._records[record.quality_check_id] = record
            self._next_id = max(self._next_id, record.quality_check_id + 1)
