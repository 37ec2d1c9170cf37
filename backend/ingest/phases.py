"""Migration Phases

One coroutine per phase, run in this order:
institutions → authors → courses → lessons → topics → quizzes →
vocabulary → cultural content.

Every phase takes the open session, the populated parser and the run's
MigrationContext. Each entity is inserted in its own SAVEPOINT; a failure
is recorded on the context and the loop moves on. Foreign keys are
resolved only through the context's mapping tables.
"""
import re
from typing import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from core.database import fetch_id_by, insert_entities, insert_entity
from core.errors import Err, MigrationErrorMapper, Ok
from core.logging import migration_logger
from ingest import rules
from ingest.context import CourseMapping, LessonMapping, MigrationContext, TopicMapping
from ingest.parsers.wxr import ParsedLesson, WordPressXMLParser
from ingest.text import (
    clean_description,
    context_sentence,
    extract_vocabulary_tokens,
    first_int,
    generate_slug,
    leading_int,
    topic_order,
)
from models import (
    Course,
    CulturalContent,
    Institution,
    Lesson,
    Quiz,
    QuizQuestion,
    Topic,
    User,
    Vocabulary,
)

log = migration_logger()

_mapper = MigrationErrorMapper("migration")

_PLAUSIBLE_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

PLACEHOLDER_PASSWORD_HASH = "temp_hash_to_be_reset"
AUTHOR_ROLE = "content_creator"
LESSON_POINTS = 50
MINUTES_PER_LESSON = 30
POINTS_PER_LESSON = 50
QUIZ_PASS_PERCENTAGE = 70
QUIZ_MAX_ATTEMPTS = 3
QUIZ_POINTS = 25

WORD_COLUMNS = {
    "french": "word_french",
    "german": "word_german",
    "spanish": "word_spanish",
}

Phase = Callable[[AsyncSession, WordPressXMLParser, MigrationContext], Awaitable[None]]


def is_plausible_email(email: str) -> bool:
    return bool(email) and _PLAUSIBLE_EMAIL.match(email) is not None


def lesson_duration(lesson: ParsedLesson) -> int:
    """Minutes: 15 for games, 30 otherwise, plus 2 per 1000 characters."""
    base = 15 if lesson.lesson_type == "game" else 30
    return base + (len(lesson.content) // 1000) * 2


async def _persist(
    session: AsyncSession,
    ctx: MigrationContext,
    build: Callable[[], object],
    *,
    context: str,
    entity_type: str,
    wp_id: int | None,
    title: str,
):
    """Build and insert one entity (or a list of rows as one unit).

    Returns the inserted row(s), or None after recording the failure.
    """
    try:
        built = build()
    except Exception as e:
        error = _mapper.map_exception(e)
        ctx.record_error(context, title, error, entity_type, wp_id)
        log.warning("entity_build_failed", entity_type=entity_type, wp_id=wp_id, error=error.message)
        return None

    if isinstance(built, list):
        result = await insert_entities(session, built)
    else:
        result = await insert_entity(session, built)

    match result:
        case Ok(value):
            return value
        case Err(error):
            ctx.record_error(context, title, error, entity_type, wp_id)
            log.warning(
                "entity_insert_failed",
                entity_type=entity_type,
                wp_id=wp_id,
                title=title,
                code=error.code.name,
                error=error.message,
            )
            return None


# =============================================================================
# Institutions
# =============================================================================

async def migrate_institutions(session: AsyncSession, parser: WordPressXMLParser, ctx: MigrationContext) -> None:
    """LearnDash groups become institutions, deduplicated by exact name."""
    for wp_id, group in parser.get_groups().items():
        try:
            existing = await fetch_id_by(session, Institution, name=group.title)
        except Exception as e:
            ctx.record_error("Institution migration", group.title, _mapper.map_exception(e), "institution", wp_id)
            continue

        if existing is not None:
            log.debug("institution_exists", name=group.title, institution_id=existing)
            continue

        row = await _persist(
            session, ctx,
            lambda: Institution(
                name=group.title,
                type=rules.INSTITUTION_TYPE.classify(group.title),
                is_active=group.status == "publish",
            ),
            context="Institution migration", entity_type="institution", wp_id=wp_id, title=group.title,
        )
        if row is not None:
            ctx.stats.institutions_imported += 1
            log.info("institution_created", name=group.title, type=row.type)


# =============================================================================
# Authors → users
# =============================================================================

async def migrate_authors(session: AsyncSession, parser: WordPressXMLParser, ctx: MigrationContext) -> None:
    """Map authors to existing users by email, or create content creators."""
    for wp_id, author in parser.get_authors().items():
        title = author.display_name or author.login
        try:
            existing = await fetch_id_by(session, User, email=author.email) if author.email else None
        except Exception as e:
            ctx.record_error("Author migration", title, _mapper.map_exception(e), "author", wp_id)
            continue

        if existing is not None:
            ctx.user_mapping[author.email] = existing
            log.debug("author_mapped_to_existing_user", email=author.email, user_id=existing)
            continue

        if not is_plausible_email(author.email):
            log.debug("author_without_email_skipped", login=author.login)
            continue

        row = await _persist(
            session, ctx,
            lambda: User(
                name=author.display_name or f"{author.first_name} {author.last_name}".strip(),
                email=author.email,
                password_hash=PLACEHOLDER_PASSWORD_HASH,
                role=AUTHOR_ROLE,
            ),
            context="Author migration", entity_type="author", wp_id=wp_id, title=title,
        )
        if row is not None:
            ctx.user_mapping[author.email] = row.id
            ctx.stats.users_imported += 1
            log.info("user_created", name=row.name, email=author.email)


# =============================================================================
# Courses
# =============================================================================

def _author_email(parser: WordPressXMLParser, login: str) -> str:
    author = parser.find_author(login)
    return author.email if author else login


async def migrate_courses(session: AsyncSession, parser: WordPressXMLParser, ctx: MigrationContext) -> None:
    for wp_id, course in parser.get_courses().items():
        lesson_count = len(course.lessons)
        created_by = ctx.user_id_for(_author_email(parser, course.author))

        row = await _persist(
            session, ctx,
            lambda: Course(
                title=course.title,
                slug=generate_slug(course.slug or course.title),
                description=clean_description(course.description),
                language=course.language,
                level=course.level,
                created_by=created_by,
                is_published=course.status == "publish",
                course_order=first_int(course.title),
                estimated_duration=lesson_count * MINUTES_PER_LESSON,
                total_lessons=lesson_count,
                total_points=lesson_count * POINTS_PER_LESSON,
                wp_course_id=wp_id,
            ),
            context="Course migration", entity_type="course", wp_id=wp_id, title=course.title,
        )
        if row is None:
            continue

        ctx.course_mapping[wp_id] = CourseMapping(wp_id=wp_id, new_id=row.id, language=course.language)
        ctx.stats.courses_imported += 1
        log.info("course_migrated", title=course.title, language=course.language, course_id=row.id)


# =============================================================================
# Lessons
# =============================================================================

async def migrate_lessons(session: AsyncSession, parser: WordPressXMLParser, ctx: MigrationContext) -> None:
    for wp_id, lesson in parser.get_lessons().items():
        course = ctx.course_mapping.get(lesson.course_id)
        if course is None:
            ctx.stats.lessons_skipped += 1
            log.warning("lesson_skipped_no_course", title=lesson.title, wp_id=wp_id, wp_course_id=lesson.course_id)
            continue

        row = await _persist(
            session, ctx,
            lambda: Lesson(
                course_id=course.new_id,
                title=lesson.title,
                slug=generate_slug(lesson.slug or lesson.title),
                description=clean_description(lesson.description),
                content=lesson.content,
                lesson_type=lesson.lesson_type,
                lesson_order=first_int(lesson.title),
                estimated_duration=lesson_duration(lesson),
                points_value=LESSON_POINTS,
                is_published=lesson.status == "publish",
                wp_lesson_id=wp_id,
            ),
            context="Lesson migration", entity_type="lesson", wp_id=wp_id, title=lesson.title,
        )
        if row is None:
            continue

        ctx.lesson_mapping[wp_id] = LessonMapping(wp_id=wp_id, new_id=row.id, course_id=course.new_id)
        ctx.stats.lessons_imported += 1
        log.debug("lesson_migrated", title=lesson.title, lesson_id=row.id)


# =============================================================================
# Topics
# =============================================================================

async def migrate_topics(session: AsyncSession, parser: WordPressXMLParser, ctx: MigrationContext) -> None:
    for wp_id, topic in parser.get_topics().items():
        lesson = ctx.lesson_mapping.get(topic.lesson_id)
        if lesson is None:
            ctx.stats.topics_skipped += 1
            log.warning("topic_skipped_no_lesson", title=topic.title, wp_id=wp_id, wp_lesson_id=topic.lesson_id)
            continue

        row = await _persist(
            session, ctx,
            lambda: Topic(
                lesson_id=lesson.new_id,
                title=topic.title,
                slug=generate_slug(topic.slug or topic.title),
                content=topic.content,
                topic_type=topic.topic_type,
                topic_order=topic_order(topic.title),
                difficulty_level=rules.difficulty_level(topic.title, topic.content),
                points_value=rules.topic_points(topic.topic_type),
                time_limit=leading_int(rules.TIME_LIMIT_KEY(topic.meta_data)),
                is_published=topic.status == "publish",
                interactive_data=topic.interactive_data,
                wp_topic_id=wp_id,
            ),
            context="Topic migration", entity_type="topic", wp_id=wp_id, title=topic.title,
        )
        if row is None:
            continue

        ctx.topic_mapping[wp_id] = TopicMapping(wp_id=wp_id, new_id=row.id, lesson_id=lesson.new_id)
        ctx.stats.topics_imported += 1
        if ctx.stats.topics_imported % 100 == 0:
            log.info("topics_progress", migrated=ctx.stats.topics_imported)


# =============================================================================
# Quizzes + questions
# =============================================================================

async def migrate_quizzes(session: AsyncSession, parser: WordPressXMLParser, ctx: MigrationContext) -> None:
    """Quizzes, each followed by the questions linked to it.

    Every question gets question_order 0; LearnDash sibling order is not
    carried over.
    """
    questions = parser.get_questions()

    for wp_id, quiz in parser.get_quizzes().items():
        lesson = ctx.lesson_mapping.get(quiz.lesson_id) if quiz.lesson_id else None
        topic = ctx.topic_mapping.get(quiz.topic_id) if quiz.topic_id else None

        row = await _persist(
            session, ctx,
            lambda: Quiz(
                lesson_id=lesson.new_id if lesson else None,
                topic_id=topic.new_id if topic else None,
                title=quiz.title,
                description=quiz.description,
                quiz_type=quiz.quiz_type,
                pass_percentage=QUIZ_PASS_PERCENTAGE,
                time_limit=leading_int(rules.QUIZ_TIME_LIMIT_KEY(quiz.meta_data)),
                max_attempts=QUIZ_MAX_ATTEMPTS,
                points_value=QUIZ_POINTS,
                is_published=quiz.status == "publish",
                wp_quiz_id=wp_id,
            ),
            context="Quiz migration", entity_type="quiz", wp_id=wp_id, title=quiz.title,
        )
        if row is None:
            continue
        ctx.stats.quizzes_imported += 1

        migrated = 0
        for question_id in quiz.questions:
            question = questions.get(question_id)
            if question is None:
                continue
            inserted = await _persist(
                session, ctx,
                lambda: QuizQuestion(
                    quiz_id=row.id,
                    question_text=question.question_text,
                    question_type=question.question_type,
                    correct_answer=question.correct_answer,
                    answer_options=question.answer_options,
                    explanation=question.explanation,
                    points=question.points,
                    question_order=0,
                    wp_question_id=question.wp_id,
                ),
                context="Question migration", entity_type="question",
                wp_id=question.wp_id, title=question.question_text,
            )
            if inserted is not None:
                migrated += 1
                ctx.stats.questions_imported += 1

        log.info("quiz_migrated", title=quiz.title, quiz_id=row.id, questions=migrated)


# =============================================================================
# Vocabulary (derived)
# =============================================================================

def vocabulary_rows(lesson: ParsedLesson, lesson_id: int, language: str) -> list[Vocabulary]:
    """Candidate words from the lesson text, no translation performed.

    The surface token is stored both as the English word and in the column
    of the course language.
    """
    column = WORD_COLUMNS.get(language)
    sentence = context_sentence(lesson.content)
    rows = []
    for token in extract_vocabulary_tokens(lesson.content):
        row = Vocabulary(
            word_english=token,
            context_sentence=sentence,
            difficulty_level=1,
            lesson_id=lesson_id,
        )
        if column:
            setattr(row, column, token)
        rows.append(row)
    return rows


async def migrate_vocabulary(session: AsyncSession, parser: WordPressXMLParser, ctx: MigrationContext) -> None:
    for wp_id, lesson in parser.get_lessons().items():
        mapping = ctx.lesson_mapping.get(wp_id)
        if mapping is None:
            continue
        course = ctx.course_mapping.get(lesson.course_id)
        language = course.language if course else rules.LANGUAGE.default

        rows = await _persist(
            session, ctx,
            lambda: vocabulary_rows(lesson, mapping.new_id, language),
            context="Vocabulary extraction", entity_type="vocabulary", wp_id=wp_id, title=lesson.title,
        )
        if rows:
            ctx.stats.vocabulary_imported += len(rows)


# =============================================================================
# Cultural content (derived)
# =============================================================================

def cultural_rows(lesson: ParsedLesson, lesson_id: int, language: str) -> list[CulturalContent]:
    """One placeholder entry per theme matched in the lesson title."""
    rows = []
    for theme in rules.CULTURAL_THEMES.matches(lesson.title):
        rows.append(CulturalContent(
            lesson_id=lesson_id,
            title=f"Cultural Context: {theme.name}",
            description=f"Learn about {theme.name} in {language} culture",
            content=f"Cultural information about {theme.name} would be generated here based on the lesson content.",
            culture_type=theme.culture_type,
            language=language,
            country=rules.country_for(language),
            is_published=True,
        ))
    return rows


async def migrate_cultural_content(session: AsyncSession, parser: WordPressXMLParser, ctx: MigrationContext) -> None:
    for wp_id, lesson in parser.get_lessons().items():
        mapping = ctx.lesson_mapping.get(wp_id)
        course = ctx.course_mapping.get(lesson.course_id)
        if mapping is None or course is None:
            continue

        rows = await _persist(
            session, ctx,
            lambda: cultural_rows(lesson, mapping.new_id, course.language),
            context="Cultural content", entity_type="cultural_content", wp_id=wp_id, title=lesson.title,
        )
        if rows:
            ctx.stats.cultural_content_imported += len(rows)


PHASES: list[tuple[str, Phase]] = [
    ("Institutions", migrate_institutions),
    ("Authors", migrate_authors),
    ("Courses", migrate_courses),
    ("Lessons", migrate_lessons),
    ("Topics", migrate_topics),
    ("Quizzes", migrate_quizzes),
    ("Vocabulary", migrate_vocabulary),
    ("Cultural content", migrate_cultural_content),
]
