"""Migration Run State

The id-translation tables that let later phases resolve foreign keys
(WordPress id -> new row id), plus the run statistics and the error log.
One MigrationContext exists per run and is passed explicitly to every
phase.
"""
import copy
from dataclasses import dataclass, field
from datetime import datetime

from core.errors import AppError


@dataclass(slots=True)
class CourseMapping:
    wp_id: int
    new_id: int
    language: str


@dataclass(slots=True)
class LessonMapping:
    wp_id: int
    new_id: int
    course_id: int  # new courses.id


@dataclass(slots=True)
class TopicMapping:
    wp_id: int
    new_id: int
    lesson_id: int  # new lessons.id


@dataclass(slots=True)
class MigrationError:
    """One entity that failed to migrate."""
    entity_type: str
    wp_id: int | None
    title: str
    message: str
    code: str | None = None

    @classmethod
    def from_app_error(cls, entity_type: str, wp_id: int | None, title: str, error: AppError) -> "MigrationError":
        return cls(entity_type, wp_id, title, error.message, error.code.name)

    def to_dict(self) -> dict:
        return {
            "entity_type": self.entity_type,
            "wp_id": self.wp_id,
            "title": self.title,
            "message": self.message,
            "code": self.code,
        }


@dataclass
class MigrationStats:
    """Statistics for a migration run."""
    started_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: datetime | None = None
    institutions_imported: int = 0
    users_imported: int = 0
    courses_imported: int = 0
    lessons_imported: int = 0
    topics_imported: int = 0
    quizzes_imported: int = 0
    questions_imported: int = 0
    vocabulary_imported: int = 0
    cultural_content_imported: int = 0
    lessons_skipped: int = 0
    topics_skipped: int = 0
    errors: list[str] = field(default_factory=list)
    error_records: list[MigrationError] = field(default_factory=list)

    COUNTERS = (
        "institutions_imported",
        "users_imported",
        "courses_imported",
        "lessons_imported",
        "topics_imported",
        "quizzes_imported",
        "questions_imported",
        "vocabulary_imported",
        "cultural_content_imported",
        "lessons_skipped",
        "topics_skipped",
    )

    def counters(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in self.COUNTERS}

    def to_dict(self) -> dict:
        return {
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            **self.counters(),
            "error_count": len(self.errors),
            "errors": list(self.errors),
        }


@dataclass(slots=True)
class PhaseSnapshot:
    """Mappings and counters captured before a phase starts."""
    course_mapping: dict[int, CourseMapping]
    lesson_mapping: dict[int, LessonMapping]
    topic_mapping: dict[int, TopicMapping]
    user_mapping: dict[str, int]
    counters: dict[str, int]


@dataclass
class MigrationContext:
    """Everything a phase may read or write besides the database."""
    default_user_id: int = 1
    course_mapping: dict[int, CourseMapping] = field(default_factory=dict)
    lesson_mapping: dict[int, LessonMapping] = field(default_factory=dict)
    topic_mapping: dict[int, TopicMapping] = field(default_factory=dict)
    user_mapping: dict[str, int] = field(default_factory=dict)  # email -> users.id
    stats: MigrationStats = field(default_factory=MigrationStats)

    def record_error(
        self,
        context: str,
        title: str,
        error: AppError,
        entity_type: str | None = None,
        wp_id: int | None = None,
    ) -> None:
        """Append both the readable line and the structured record."""
        self.stats.errors.append(f"{context} error: {title} - {error.message}")
        self.stats.error_records.append(
            MigrationError.from_app_error(entity_type or context.lower(), wp_id, title, error)
        )

    def user_id_for(self, email: str | None) -> int:
        if email and email in self.user_mapping:
            return self.user_mapping[email]
        return self.default_user_id

    def snapshot(self) -> PhaseSnapshot:
        return PhaseSnapshot(
            course_mapping=copy.copy(self.course_mapping),
            lesson_mapping=copy.copy(self.lesson_mapping),
            topic_mapping=copy.copy(self.topic_mapping),
            user_mapping=copy.copy(self.user_mapping),
            counters=self.stats.counters(),
        )

    def restore(self, snapshot: PhaseSnapshot) -> None:
        """Undo a phase whose rows were rolled back; errors are kept."""
        self.course_mapping = snapshot.course_mapping
        self.lesson_mapping = snapshot.lesson_mapping
        self.topic_mapping = snapshot.topic_mapping
        self.user_mapping = snapshot.user_mapping
        for name, value in snapshot.counters.items():
            setattr(self.stats, name, value)
