"""
Tests for the heuristic rule tables and parent-reference resolution.
"""
import pytest

from ingest import rules
from ingest.rules import RuleTable, contains, resolve_parent_ref, table


def words(n: int) -> str:
    return " ".join(["mot"] * n)


class TestRuleTable:

    def test_first_matching_rule_wins(self):
        t = table("t", [(contains("a"), 1), (contains("b"), 2)], default=0)
        assert t.classify("ab") == 1

    def test_default_when_nothing_matches(self):
        t = table("t", [(contains("a"), 1)], default=0)
        assert t.classify("xyz") == 0
        assert t.classify("") == 0

    def test_case_insensitive(self):
        assert rules.LANGUAGE.classify("GERMAN Stories") == "german"

    def test_is_plain_data(self):
        assert isinstance(rules.TOPIC_TYPE, RuleTable)
        assert rules.TOPIC_TYPE.default == "story_page"


class TestTitleClassifiers:

    @pytest.mark.parametrize("title,expected", [
        ("Spanish Stories 1", "spanish"),
        ("German for beginners", "german"),
        ("French Stories", "french"),
        ("Stories in Italian", "french"),
    ])
    def test_language(self, title, expected):
        assert rules.LANGUAGE.classify(title) == expected

    @pytest.mark.parametrize("title,expected", [
        ("Advanced Spanish", "advanced"),
        ("Intermediate German", "intermediate"),
        ("Spanish Stories 1", "beginner"),
    ])
    def test_course_level(self, title, expected):
        assert rules.COURSE_LEVEL.classify(title) == expected

    @pytest.mark.parametrize("title,expected", [
        ("Memory Game", "game"),
        ("Story 3", "story"),
        ("Vocabulary list", "vocabulary"),
        ("Grammar: the past tense", "grammar"),
        ("Introduction", "story"),
    ])
    def test_lesson_type(self, title, expected):
        assert rules.LESSON_TYPE.classify(title) == expected

    @pytest.mark.parametrize("title,expected", [
        ("Listening gap fill quiz", "comprehension_quiz"),
        ("Listening gap fill", "listening_gap_fill"),
        ("Vocabulary game", "vocabulary_game"),
        ("Anagram", "anagram"),
        ("Matching pairs", "matching_pairs"),
        ("Pairs", "matching_pairs"),
        ("Find the match", "find_the_match"),
        ("Page 4", "story_page"),
        ("Introduction", "story_page"),
    ])
    def test_topic_type_order(self, title, expected):
        assert rules.TOPIC_TYPE.classify(title) == expected

    @pytest.mark.parametrize("title,expected", [
        ("Vocabulary check", "vocabulary"),
        ("Listening test", "listening"),
        ("Grammar quiz", "grammar"),
        ("Writing task", "writing"),
        ("Story 1 quiz", "comprehension"),
    ])
    def test_quiz_type(self, title, expected):
        assert rules.QUIZ_TYPE.classify(title) == expected

    @pytest.mark.parametrize("title,expected", [
        ("Oxford University", "university"),
        ("City College", "university"),
        ("St Mary's School", "school"),
        ("Language Centre Leeds", "language_center"),
        ("Private Tutor Group", "private_tutor"),
        ("Business Partners", "corporate"),
        ("Class 7B", "school"),
    ])
    def test_institution_type(self, title, expected):
        assert rules.INSTITUTION_TYPE.classify(title) == expected


class TestDifficultyLevel:
    """Title keywords win; otherwise word-count bands with '<' boundaries."""

    def test_beginner_keyword_ignores_length(self):
        assert rules.difficulty_level("Beginner story", words(2000)) == 1

    def test_keyword_levels(self):
        assert rules.difficulty_level("Basic page", "") == 1
        assert rules.difficulty_level("Medium page", "") == 3
        assert rules.difficulty_level("Expert page", "") == 5

    def test_850_words_is_level_5(self):
        assert rules.difficulty_level("Page 1", words(850)) == 5

    @pytest.mark.parametrize("count,expected", [
        (0, 1), (99, 1), (100, 2), (299, 2), (300, 3),
        (499, 3), (500, 4), (799, 4), (800, 5),
    ])
    def test_band_boundaries(self, count, expected):
        assert rules.difficulty_level("Page", words(count)) == expected


class TestLookups:

    @pytest.mark.parametrize("code,expected", [
        ("single", "multiple_choice"),
        ("multiple", "multiple_choice"),
        ("free_answer", "short_answer"),
        ("sort_answer", "ordering"),
        ("matrix_sort_answer", "matching"),
        ("cloze_answer", "fill_blank"),
        ("assessment_answer", "multiple_choice"),
        (None, "multiple_choice"),
    ])
    def test_question_type(self, code, expected):
        assert rules.question_type(code) == expected

    def test_topic_points(self):
        assert rules.topic_points("story_page") == 5
        assert rules.topic_points("comprehension_quiz") == 15
        assert rules.topic_points("grammar_exercise") == 12
        assert rules.topic_points("something_else") == 10

    def test_country(self):
        assert rules.country_for("german") == "Germany"
        assert rules.country_for("spanish") == "Spain"
        assert rules.country_for("italian") == "France"


class TestCulturalThemes:

    def test_all_matching_themes_in_table_order(self):
        themes = rules.CULTURAL_THEMES.matches("Christmas family food")
        assert [t.name for t in themes] == ["Food & Dining", "Family", "Festivals"]
        assert [t.culture_type for t in themes] == ["food", "tradition", "festival"]

    def test_default_theme(self):
        [theme] = rules.CULTURAL_THEMES.matches("Story 1")
        assert theme.name == "General Culture"
        assert theme.culture_type == "tradition"


class TestResolveParentRef:

    def test_first_alias(self):
        assert resolve_parent_ref({"course_id": "12", "_course_id": "99"}, "course") == 12

    def test_falls_through_zero_to_next_alias(self):
        assert resolve_parent_ref({"course_id": "0", "_course_id": "12"}, "course") == 12

    def test_absent(self):
        assert resolve_parent_ref({}, "lesson") is None

    def test_non_numeric(self):
        assert resolve_parent_ref({"lesson_id": "abc"}, "lesson") is None
        assert resolve_parent_ref({"topic_id": "-3"}, "topic") is None

    def test_whitespace_tolerated(self):
        assert resolve_parent_ref({"_quiz_id": " 7 "}, "quiz") == 7

    def test_meta_lookup_alias_order(self):
        assert rules.POINTS_KEY({"points": "3", "_points": "5"}) == "5"
        assert rules.CORRECT_ANSWER_KEY({}) == ""
        assert rules.TIME_LIMIT_KEY({"_time_limit": "60"}) == "60"

    def test_superscript_digit_is_not_a_parent(self):
        assert resolve_parent_ref({"course_id": "²"}, "course") is None
        assert resolve_parent_ref({"course_id": "²", "_course_id": "4"}, "course") == 4
