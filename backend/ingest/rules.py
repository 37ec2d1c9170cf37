"""Heuristic Classification Rules

Every title-based guess the migration makes (language, level, lesson /
topic / quiz type, institution type, difficulty, cultural theme) is an
ordered table of ``(predicate, value)`` rules with an explicit default.
The first matching rule wins.

These rules are tuned to one historical content set; they are not a
general classifier.
"""
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, TypeVar

from ingest.text import word_count

V = TypeVar("V")

Predicate = Callable[[str], bool]


def contains(*words: str) -> Predicate:
    """True if the lower-cased text contains any of ``words``."""
    return lambda text: any(word in text for word in words)


def contains_all(*words: str) -> Predicate:
    """True if the lower-cased text contains every one of ``words``."""
    return lambda text: all(word in text for word in words)


@dataclass(slots=True)
class Rule(Generic[V]):
    predicate: Predicate
    value: V


@dataclass(slots=True)
class RuleTable(Generic[V]):
    """Ordered rules plus a default; matching is case-insensitive."""
    name: str
    rules: list[Rule[V]]
    default: V

    def classify(self, text: str) -> V:
        lowered = (text or "").lower()
        for rule in self.rules:
            if rule.predicate(lowered):
                return rule.value
        return self.default

    def matches(self, text: str) -> list[V]:
        """Every rule value that matches, in table order (default if none)."""
        lowered = (text or "").lower()
        found = [rule.value for rule in self.rules if rule.predicate(lowered)]
        return found or [self.default]


def table(name: str, pairs: Iterable[tuple[Predicate, V]], default: V) -> RuleTable[V]:
    return RuleTable(name, [Rule(p, v) for p, v in pairs], default)


# =============================================================================
# Title classifiers
# =============================================================================

LANGUAGE = table("language", [
    (contains("french"), "french"),
    (contains("german"), "german"),
    (contains("spanish"), "spanish"),
], default="french")

COURSE_LEVEL = table("course_level", [
    (contains("advanced"), "advanced"),
    (contains("intermediate"), "intermediate"),
], default="beginner")

LESSON_TYPE = table("lesson_type", [
    (contains("game"), "game"),
    (contains("story"), "story"),
    (contains("vocabulary"), "vocabulary"),
    (contains("grammar"), "grammar"),
], default="story")

TOPIC_TYPE = table("topic_type", [
    (contains("quiz"), "comprehension_quiz"),
    (contains_all("listening", "gap"), "listening_gap_fill"),
    (contains_all("vocabulary", "game"), "vocabulary_game"),
    (contains("anagram"), "anagram"),
    (contains("matching", "pairs"), "matching_pairs"),
    (contains_all("find", "match"), "find_the_match"),
    (contains("page"), "story_page"),
], default="story_page")

QUIZ_TYPE = table("quiz_type", [
    (contains("vocabulary"), "vocabulary"),
    (contains("listening"), "listening"),
    (contains("grammar"), "grammar"),
    (contains("writing"), "writing"),
], default="comprehension")

INSTITUTION_TYPE = table("institution_type", [
    (contains("university", "college"), "university"),
    (contains("school"), "school"),
    (contains("center", "centre"), "language_center"),
    (contains("tutor"), "private_tutor"),
    (contains("corporate", "business"), "corporate"),
], default="school")

TITLE_DIFFICULTY = table("title_difficulty", [
    (contains("beginner", "basic"), 1),
    (contains("intermediate", "medium"), 3),
    (contains("advanced", "expert"), 5),
], default=None)

# Upper bounds (exclusive) of the word-count bands for levels 1-4
WORD_COUNT_BANDS = ((100, 1), (300, 2), (500, 3), (800, 4))
MAX_DIFFICULTY = 5


def difficulty_level(title: str, content: str) -> int:
    """Difficulty 1-5 from a level keyword in the title, else content length."""
    level = TITLE_DIFFICULTY.classify(title)
    if level is not None:
        return level

    words = word_count(content or "")
    for upper, band in WORD_COUNT_BANDS:
        if words < upper:
            return band
    return MAX_DIFFICULTY


# =============================================================================
# Lookup tables
# =============================================================================

QUESTION_TYPES = {
    "single": "multiple_choice",
    "multiple": "multiple_choice",
    "free_answer": "short_answer",
    "sort_answer": "ordering",
    "matrix_sort_answer": "matching",
    "cloze_answer": "fill_blank",
}
DEFAULT_QUESTION_TYPE = "multiple_choice"

TOPIC_POINTS = {
    "story_page": 5,
    "comprehension_quiz": 15,
    "listening_gap_fill": 10,
    "vocabulary_game": 10,
    "anagram": 8,
    "matching_pairs": 8,
    "find_the_match": 8,
    "cultural_note": 5,
    "grammar_exercise": 12,
}
DEFAULT_TOPIC_POINTS = 10


def question_type(code: str | None) -> str:
    return QUESTION_TYPES.get(code or "", DEFAULT_QUESTION_TYPE)


def topic_points(topic_type: str) -> int:
    return TOPIC_POINTS.get(topic_type, DEFAULT_TOPIC_POINTS)


# =============================================================================
# Cultural themes
# =============================================================================

@dataclass(frozen=True, slots=True)
class Theme:
    name: str
    culture_type: str  # food, festival, tradition, geography, history, art, music


CULTURAL_THEMES = table("cultural_theme", [
    (contains("food", "restaurant"), Theme("Food & Dining", "food")),
    (contains("family"), Theme("Family", "tradition")),
    (contains("school"), Theme("Education", "tradition")),
    (contains("holiday", "travel"), Theme("Travel & Holidays", "geography")),
    (contains("health"), Theme("Health & Wellness", "tradition")),
    (contains("town", "city"), Theme("Geography", "geography")),
    (contains("christmas", "festival"), Theme("Festivals", "festival")),
], default=Theme("General Culture", "tradition"))

COUNTRIES = {
    "french": "France",
    "german": "Germany",
    "spanish": "Spain",
}
DEFAULT_COUNTRY = "France"


def country_for(language: str) -> str:
    return COUNTRIES.get(language, DEFAULT_COUNTRY)


# =============================================================================
# Parent references in post meta
# =============================================================================

PARENT_KEYS: dict[str, tuple[str, ...]] = {
    "course": ("course_id", "_course_id"),
    "lesson": ("lesson_id", "_lesson_id"),
    "topic": ("topic_id", "_topic_id"),
    "quiz": ("quiz_id", "_quiz_id"),
}


def resolve_parent_ref(meta: dict[str, str], kind: str) -> int | None:
    """WordPress id of the parent of ``kind`` named in post meta.

    Aliases are tried in order; the first one holding a positive integer
    wins. Zero, blanks and non-numeric values mean "no parent".
    """
    for key in PARENT_KEYS[kind]:
        raw = (meta.get(key) or "").strip()
        if raw.isdecimal() and int(raw) > 0:
            return int(raw)
    return None


@dataclass(slots=True)
class MetaLookup:
    """First non-empty value among alias keys of a post-meta dict."""
    keys: tuple[str, ...]
    default: str | None = None

    def __call__(self, meta: dict[str, str]) -> str | None:
        for key in self.keys:
            value = meta.get(key)
            if value:
                return value
        return self.default


QUESTION_TYPE_KEY = MetaLookup(("question_type", "_question_type"))
ANSWERS_KEY = MetaLookup(("_answers", "answers"))
CORRECT_ANSWER_KEY = MetaLookup(("_correct_answer", "correct_answer"), default="")
POINTS_KEY = MetaLookup(("_points", "points"))
TIME_LIMIT_KEY = MetaLookup(("time_limit", "_time_limit"))
QUIZ_TIME_LIMIT_KEY = MetaLookup(("quiz_time_limit", "_quiz_time_limit"))
QUIZ_QUESTIONS_KEY = MetaLookup(("ld_quiz_questions", "_ld_quiz_questions"))
