"""Learning Content Models

Course → Lesson → Topic hierarchy, quizzes with their questions, and the
vocabulary / cultural-content rows attached to lessons. Every row that
originates from a WordPress post keeps its original id in a ``wp_*_id``
column for traceability (not a foreign key).
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Integer, Boolean, Index, JSON
from sqlalchemy.orm import relationship

from core.database import Base


class Course(Base):
    """Top-level course (e.g., 'Spanish Stories 1')"""
    __tablename__ = "courses"
    __table_args__ = (
        Index("ix_courses_language_order", "language", "course_order"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    description = Column(Text)
    language = Column(String(20), nullable=False)  # french, german, spanish
    level = Column(String(20), nullable=False, default="beginner")  # beginner, intermediate, advanced
    institution_id = Column(Integer, ForeignKey("institutions.id"))
    created_by = Column(Integer)  # users.id, or the configured fallback user
    is_published = Column(Boolean, default=False)
    course_order = Column(Integer, default=0)
    estimated_duration = Column(Integer)  # minutes
    total_lessons = Column(Integer, default=0)
    total_points = Column(Integer, default=0)
    cover_image = Column(Text)
    wp_course_id = Column(Integer)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    lessons = relationship("Lesson", back_populates="course")


class Lesson(Base):
    """Lesson within a course"""
    __tablename__ = "lessons"
    __table_args__ = (
        Index("ix_lessons_course_order", "course_id", "lesson_order"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    description = Column(Text)
    content = Column(Text)
    lesson_type = Column(String(20), nullable=False, default="story")  # story, game, vocabulary, grammar, culture, assessment
    lesson_order = Column(Integer, default=0)
    estimated_duration = Column(Integer)  # minutes
    points_value = Column(Integer, default=0)
    is_published = Column(Boolean, default=False)
    prerequisite_lesson_id = Column(Integer, ForeignKey("lessons.id"))
    cover_image = Column(Text)
    audio_file = Column(Text)
    video_file = Column(Text)
    cultural_information = Column(Text)
    wp_lesson_id = Column(Integer)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    course = relationship("Course", back_populates="lessons")
    topics = relationship("Topic", back_populates="lesson")


class Topic(Base):
    """Page or activity within a lesson"""
    __tablename__ = "topics"
    __table_args__ = (
        Index("ix_topics_lesson_order", "lesson_id", "topic_order"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    content = Column(Text)
    topic_type = Column(String(30), nullable=False, default="story_page")
    topic_order = Column(Integer, default=0)
    audio_file = Column(Text)
    video_file = Column(Text)
    difficulty_level = Column(Integer, default=1)  # 1-5
    points_value = Column(Integer, default=10)
    time_limit = Column(Integer)  # seconds
    is_published = Column(Boolean, default=False)
    interactive_data = Column(JSON)  # {"hasH5P": true, "h5pId": "12"} / {"hasQuiz": true}
    wp_topic_id = Column(Integer)
    created_at = Column(DateTime, default=datetime.utcnow)

    lesson = relationship("Lesson", back_populates="topics")


class Quiz(Base):
    """Quiz, optionally attached to a lesson and/or topic"""
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"))
    topic_id = Column(Integer, ForeignKey("topics.id", ondelete="CASCADE"))
    title = Column(String(255), nullable=False)
    description = Column(Text)
    quiz_type = Column(String(20), nullable=False, default="comprehension")  # comprehension, vocabulary, grammar, listening, speaking, writing
    pass_percentage = Column(Integer, default=70)
    time_limit = Column(Integer)  # seconds
    max_attempts = Column(Integer, default=3)
    points_value = Column(Integer, default=25)
    is_published = Column(Boolean, default=False)
    wp_quiz_id = Column(Integer)
    created_at = Column(DateTime, default=datetime.utcnow)

    questions = relationship("QuizQuestion", back_populates="quiz")


class QuizQuestion(Base):
    """Single question of a quiz"""
    __tablename__ = "quiz_questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)
    question_text = Column(Text, nullable=False)
    question_type = Column(String(20), nullable=False, default="multiple_choice")
    correct_answer = Column(Text)
    answer_options = Column(JSON, default=list)
    explanation = Column(Text)
    points = Column(Integer, default=1)
    question_order = Column(Integer, default=0)
    audio_file = Column(Text)
    image_file = Column(Text)
    wp_question_id = Column(Integer)

    quiz = relationship("Quiz", back_populates="questions")


class Vocabulary(Base):
    """Word extracted from lesson content"""
    __tablename__ = "vocabulary"

    id = Column(Integer, primary_key=True, autoincrement=True)
    word_french = Column(String(255))
    word_german = Column(String(255))
    word_spanish = Column(String(255))
    word_english = Column(String(255), nullable=False)
    pronunciation = Column(String(255))
    phonetic = Column(String(255))
    audio_file = Column(Text)
    image_file = Column(Text)
    context_sentence = Column(Text)
    cultural_note = Column(Text)
    difficulty_level = Column(Integer, default=1)
    word_type = Column(String(30))  # noun, verb, adjective, ...
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), index=True)
    topic_id = Column(Integer, ForeignKey("topics.id", ondelete="CASCADE"))
    created_at = Column(DateTime, default=datetime.utcnow)


class CulturalContent(Base):
    """Cultural note attached to a lesson"""
    __tablename__ = "cultural_content"

    id = Column(Integer, primary_key=True, autoincrement=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    content = Column(Text)
    culture_type = Column(String(20), nullable=False, default="tradition")  # food, festival, tradition, geography, history, art, music
    language = Column(String(20), nullable=False)
    country = Column(String(100))
    region = Column(String(100))
    image_url = Column(Text)
    video_url = Column(Text)
    audio_url = Column(Text)
    external_links = Column(JSON)
    is_published = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
