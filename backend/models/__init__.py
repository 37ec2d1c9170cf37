
from models.accounts import Institution, User
from models.content import (
    Course, Lesson, Topic, Quiz, QuizQuestion,
    Vocabulary, CulturalContent,
)

__all__ = [
    "Institution", "User",
    "Course", "Lesson", "Topic", "Quiz", "QuizQuestion",
    "Vocabulary", "CulturalContent",
]
