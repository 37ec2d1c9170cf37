"""
Tests for WXR parsing, classification and hierarchy linking.
"""
import xml.etree.ElementTree as ET

import pytest

from ingest.parsers.wxr import WordPressXMLParser
from wxr_builder import WXRBuilder


class TestFlattening:
    """Authors, terms and raw posts come straight from the channel."""

    def test_authors(self, builder, parse):
        builder.with_author(1, "marie", "marie@example.com", "Marie Curie", "Marie", "Curie")
        parser = parse(builder)

        author = parser.get_authors()[1]
        assert author.login == "marie"
        assert author.email == "marie@example.com"
        assert author.display_name == "Marie Curie"
        assert author.first_name == "Marie"
        assert author.last_name == "Curie"

    def test_categories(self, builder, parse):
        builder.with_category(5, "Stories", "stories", parent="")
        parser = parse(builder)
        assert parser.get_categories()[5].slug == "stories"

    def test_post_fields(self, builder, parse):
        builder.with_item(
            10, "post", "Hello", content="<p>Body</p>", excerpt="Short",
            slug="hello", status="draft", creator="marie",
            categories=[("category", "News"), ("post_tag", "spanish")],
        )
        post = parse(builder).get_posts()[10]

        assert post.title == "Hello"
        assert post.content == "<p>Body</p>"
        assert post.excerpt == "Short"
        assert post.slug == "hello"
        assert post.status == "draft"
        assert post.author == "marie"
        assert post.created_at == "2024-03-01 10:00:00"
        assert post.updated_at == "2024-03-01 09:00:00"
        assert post.categories == ["News", "spanish"]
        assert post.tags == ["spanish"]

    def test_meta_last_value_wins_and_empty_entries_dropped(self, builder, parse):
        builder.with_item(10, "post", "Meta", meta=[
            ("color", "red"),
            ("color", "blue"),
            ("empty", ""),
            ("", "orphan"),
            ("zero", "0"),
        ])
        meta = parse(builder).get_posts()[10].meta_data
        assert meta == {"color": "blue", "zero": "0"}

    def test_item_without_post_id_is_skipped(self, builder, parse):
        builder.with_item(None, "sfwd-courses", "No id")
        builder.with_item("abc", "sfwd-courses", "Bad id")
        parser = parse(builder)
        assert parser.get_posts() == {}
        assert parser.get_courses() == {}

    def test_unknown_post_type_stays_raw(self, builder, parse):
        builder.with_item(10, "attachment", "Image")
        parser = parse(builder)
        assert 10 in parser.get_posts()
        assert not parser.get_courses() and not parser.get_lessons() and not parser.get_topics()

    def test_empty_channel(self, parse):
        parser = parse(WXRBuilder())
        assert parser.get_posts() == {}
        assert parser.get_courses() == {}
        assert parser.get_authors() == {}

    @pytest.mark.parametrize("version", ["1.0", "1.1", "1.2"])
    def test_all_wxr_versions(self, parse, version):
        parser = parse(WXRBuilder(version).with_course(1, "German Stories"))
        assert parser.get_courses()[1].language == "german"


class TestClassification:

    def test_course(self, builder, parse):
        builder.with_course(1, "Spanish Stories 1", excerpt="<p>Learn</p>", slug="spanish-stories-1")
        course = parse(builder).get_courses()[1]

        assert course.language == "spanish"
        assert course.level == "beginner"
        assert course.description == "<p>Learn</p>"
        assert course.slug == "spanish-stories-1"
        assert course.lessons == []

    def test_lesson(self, builder, parse):
        builder.with_lesson(2, "Memory Game", course_id=1)
        lesson = parse(builder).get_lessons()[2]
        assert lesson.lesson_type == "game"
        assert lesson.course_id == 1

    def test_lesson_without_course_is_unlinked(self, builder, parse):
        builder.with_course(1, "French Stories")
        builder.with_lesson(2, "Story 1")
        parser = parse(builder)
        assert parser.get_lessons()[2].course_id == 0
        assert parser.get_courses()[1].lessons == []

    def test_lesson_with_non_decimal_course_id_is_unlinked(self, builder, parse):
        builder.with_course(1, "French Stories")
        builder.with_lesson(2, "Story 1", meta={"course_id": "²"})
        parser = parse(builder)
        assert parser.get_lessons()[2].course_id == 0
        assert parser.get_courses()[1].lessons == []

    def test_topic(self, builder, parse):
        builder.with_topic(3, "Vocabulary game", lesson_id=2, content='[h5p id="9"]')
        topic = parse(builder).get_topics()[3]
        assert topic.topic_type == "vocabulary_game"
        assert topic.lesson_id == 2
        assert topic.interactive_data == {"hasH5P": True, "h5pId": "9"}

    def test_topic_without_shortcodes(self, builder, parse):
        builder.with_topic(3, "Page 1", lesson_id=2, content="<p>Once upon a time</p>")
        assert parse(builder).get_topics()[3].interactive_data is None

    def test_quiz(self, builder, parse):
        builder.with_quiz(4, "Listening quiz", content="Desc", meta={"lesson_id": "2", "_topic_id": "3"})
        quiz = parse(builder).get_quizzes()[4]
        assert quiz.quiz_type == "listening"
        assert quiz.description == "Desc"
        assert quiz.lesson_id == 2
        assert quiz.topic_id == 3

    def test_quiz_without_parents(self, builder, parse):
        builder.with_quiz(4, "Final test")
        quiz = parse(builder).get_quizzes()[4]
        assert quiz.lesson_id is None
        assert quiz.topic_id is None

    def test_question(self, builder, parse):
        builder.with_question(5, "Pick the verb", content="Because.", meta={
            "question_type": "free_answer",
            "_answers": '["a", "b"]',
            "_correct_answer": "a",
            "_points": "3",
        })
        q = parse(builder).get_questions()[5]
        assert q.question_text == "Pick the verb"
        assert q.question_type == "short_answer"
        assert q.answer_options == ["a", "b"]
        assert q.correct_answer == "a"
        assert q.points == 3
        assert q.explanation == "Because."

    def test_question_defaults(self, builder, parse):
        builder.with_question(5, "Q", meta={"_answers": "a:2:{i:0;s:1:\"a\";}"})
        q = parse(builder).get_questions()[5]
        assert q.question_type == "multiple_choice"
        assert q.answer_options == []
        assert q.correct_answer == ""
        assert q.points == 1

    def test_non_list_answers_become_empty(self, builder, parse):
        builder.with_question(5, "Q", meta={"answers": '{"a": 1}'})
        assert parse(builder).get_questions()[5].answer_options == []

    def test_group(self, builder, parse):
        builder.with_group(6, "Oxford University", content="Group", status="publish")
        group = parse(builder).get_groups()[6]
        assert group.title == "Oxford University"
        assert group.description == "Group"
        assert group.status == "publish"


class TestLinking:
    """Children are attached to parents after every post is classified."""

    def test_hierarchy(self, builder, parse):
        builder.with_course(1, "Spanish Stories 1")
        builder.with_lesson(2, "Story 1", course_id=1)
        builder.with_lesson(3, "Story 2", course_id=1)
        builder.with_topic(4, "Page 1", lesson_id=2)
        parser = parse(builder)

        assert parser.get_courses()[1].lessons == [2, 3]
        assert parser.get_lessons()[2].topics == [4]
        assert parser.get_lessons()[3].topics == []

    def test_children_before_parents(self, builder, parse):
        builder.with_topic(4, "Page 1", lesson_id=2)
        builder.with_lesson(2, "Story 1", course_id=1)
        builder.with_course(1, "Spanish Stories 1")
        parser = parse(builder)

        assert parser.get_courses()[1].lessons == [2]
        assert parser.get_lessons()[2].topics == [4]

    def test_missing_parent_leaves_no_placeholder(self, builder, parse):
        builder.with_course(1, "French Stories")
        builder.with_lesson(2, "Story 1", course_id=99)
        parser = parse(builder)
        assert parser.get_courses()[1].lessons == []
        assert 99 not in parser.get_courses()

    def test_every_child_reference_exists(self, builder, parse):
        builder.with_course(1, "French Stories")
        builder.with_lesson(2, "Story 1", course_id=1)
        builder.with_topic(3, "Page 1", lesson_id=2)
        builder.with_topic(4, "Page 2", lesson_id=77)
        parser = parse(builder)

        for course in parser.get_courses().values():
            assert all(lesson_id in parser.get_lessons() for lesson_id in course.lessons)
        for lesson in parser.get_lessons().values():
            assert all(topic_id in parser.get_topics() for topic_id in lesson.topics)

    def test_quiz_questions_from_serialized_meta(self, builder, parse):
        builder.with_question(11, "Q1")
        builder.with_question(12, "Q2")
        builder.with_quiz(10, "Quiz", meta={"ld_quiz_questions": "a:3:{i:12;i:2;i:11;i:1;i:99;i:3;}"})
        quiz = parse(builder).get_quizzes()[10]
        assert quiz.questions == [12, 11]

    def test_quiz_questions_from_question_meta(self, builder, parse):
        builder.with_quiz(10, "Quiz")
        builder.with_question(11, "Q1", meta={"quiz_id": "10"})
        builder.with_question(12, "Q2", meta={"_quiz_id": "10"})
        builder.with_question(13, "Q3", meta={"quiz_id": "20"})
        quiz = parse(builder).get_quizzes()[10]
        assert quiz.questions == [11, 12]

    def test_quiz_question_listed_twice_is_linked_once(self, builder, parse):
        builder.with_quiz(10, "Quiz", meta={"ld_quiz_questions": "a:1:{i:11;i:1;}"})
        builder.with_question(11, "Q1", meta={"quiz_id": "10"})
        assert parse(builder).get_quizzes()[10].questions == [11]


class TestParserEntryPoints:

    def test_parse_xml_file(self, tmp_path, builder):
        path = builder.with_course(1, "German Stories").write(tmp_path)
        parser = WordPressXMLParser()
        parser.parse_xml_file(path)
        assert list(parser.get_courses()) == [1]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            WordPressXMLParser().parse_xml_file(tmp_path / "missing.xml")

    def test_malformed_xml(self):
        with pytest.raises(ET.ParseError):
            WordPressXMLParser().parse_xml_string("<rss><channel><item></channel>")

    def test_reparse_resets_state(self, builder, parse):
        parser = parse(builder.with_course(1, "French Stories"))
        parser.parse_xml_string(WXRBuilder().with_course(2, "German Stories").build())
        assert list(parser.get_courses()) == [2]

    def test_find_author(self, builder, parse):
        builder.with_author(1, "marie", "marie@example.com")
        parser = parse(builder)
        assert parser.find_author("marie").id == 1
        assert parser.find_author("marie@example.com").id == 1
        assert parser.find_author("nobody") is None
        assert parser.find_author("") is None
