"""WordPress eXtended RSS (WXR) Parser

Parses a WordPress export of a LearnDash site and rebuilds the
course → lesson → topic → quiz → question hierarchy:
- Authors and taxonomy terms from the channel header
- One flat post per <item>, post meta folded into a dict
- Typed courses, lessons, topics, quizzes, questions and groups by post type
- Parent/child links recovered from post meta (two passes, so document
  order does not matter)

Namespaced elements are matched by the prefixes the document declares
(wp, dc, content, excerpt), so WXR 1.0, 1.1 and 1.2 exports all work.
"""
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import BinaryIO
import json
import xml.etree.ElementTree as ET
from xml.etree.ElementTree import Element

from core.logging import parser_logger
from ingest import rules
from ingest.text import extract_interactive_data, leading_int, parse_php_serialized_ids

log = parser_logger()

COURSE = "sfwd-courses"
LESSON = "sfwd-lessons"
TOPIC = "sfwd-topic"
QUIZ = "sfwd-quiz"
QUESTION = "sfwd-question"
GROUP = "groups"


@dataclass(slots=True)
class WPAuthor:
    """Author from a <wp:author> block."""
    id: int
    login: str = ""
    email: str = ""
    display_name: str = ""
    first_name: str = ""
    last_name: str = ""


@dataclass(slots=True)
class WPCategory:
    """Taxonomy term from a <wp:category> block."""
    id: int
    name: str = ""
    slug: str = ""
    parent: str = ""


@dataclass(slots=True)
class WPPost:
    """Raw <item> record."""
    id: int
    title: str = ""
    slug: str = ""
    content: str = ""
    excerpt: str = ""
    post_type: str = ""
    status: str = "draft"
    author: str = ""  # login, from dc:creator
    created_at: str = ""
    updated_at: str = ""
    meta_data: dict[str, str] = field(default_factory=dict)
    categories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)


@dataclass(slots=True)
class WPGroup:
    """LearnDash group (becomes an institution)."""
    id: int
    title: str
    description: str
    status: str
    created_at: str


@dataclass(slots=True)
class ParsedCourse:
    wp_id: int
    title: str
    slug: str
    description: str
    content: str
    language: str
    level: str
    status: str
    author: str
    created_at: str
    meta_data: dict[str, str]
    lessons: list[int] = field(default_factory=list)


@dataclass(slots=True)
class ParsedLesson:
    wp_id: int
    title: str
    slug: str
    description: str
    content: str
    lesson_type: str
    course_id: int  # 0 = unlinked
    status: str
    author: str
    created_at: str
    meta_data: dict[str, str]
    topics: list[int] = field(default_factory=list)


@dataclass(slots=True)
class ParsedTopic:
    wp_id: int
    title: str
    slug: str
    content: str
    topic_type: str
    lesson_id: int  # 0 = unlinked
    status: str
    author: str
    created_at: str
    meta_data: dict[str, str]
    interactive_data: dict | None = None


@dataclass(slots=True)
class ParsedQuiz:
    wp_id: int
    title: str
    description: str
    quiz_type: str
    lesson_id: int | None
    topic_id: int | None
    status: str
    created_at: str
    meta_data: dict[str, str]
    questions: list[int] = field(default_factory=list)


@dataclass(slots=True)
class ParsedQuestion:
    wp_id: int
    question_text: str
    question_type: str
    correct_answer: str
    answer_options: list
    explanation: str
    points: int
    meta_data: dict[str, str]
    quiz_id: int | None = None


class WordPressXMLParser:
    """Parser for WXR exports of a LearnDash site."""

    __slots__ = (
        "_prefixes",
        "authors",
        "categories",
        "posts",
        "courses",
        "lessons",
        "topics",
        "quizzes",
        "questions",
        "groups",
    )

    def __init__(self):
        self._reset()

    def _reset(self) -> None:
        self._prefixes: dict[str, str] = {}  # namespace URI -> declared prefix
        self.authors: dict[int, WPAuthor] = {}
        self.categories: dict[int, WPCategory] = {}
        self.posts: dict[int, WPPost] = {}
        self.courses: dict[int, ParsedCourse] = {}
        self.lessons: dict[int, ParsedLesson] = {}
        self.topics: dict[int, ParsedTopic] = {}
        self.quizzes: dict[int, ParsedQuiz] = {}
        self.questions: dict[int, ParsedQuestion] = {}
        self.groups: dict[int, WPGroup] = {}

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def parse_xml_file(self, path: Path | str) -> None:
        """Parse a WXR file.

        Raises:
            FileNotFoundError / OSError: the file cannot be read
            xml.etree.ElementTree.ParseError: the file is not well-formed XML
        """
        path = Path(path)
        log.info("wxr_parse_started", file_path=str(path))
        with open(path, "rb") as f:
            self._parse(f)

    def parse_xml_string(self, text: str | bytes) -> None:
        """Parse an in-memory WXR document."""
        data = text.encode("utf-8") if isinstance(text, str) else text
        self._parse(BytesIO(data))

    def _parse(self, source: BinaryIO) -> None:
        self._reset()
        try:
            root = self._read_tree(source)
        except ET.ParseError as e:
            log.error("wxr_parse_failed", error=str(e))
            raise

        channel = root.find("channel") if root.tag != "channel" else root
        if channel is not None:
            self._flatten(channel)
            self._classify()
            self._link()
        self._log_summary()

    def _read_tree(self, source: BinaryIO) -> Element:
        """Parse the document, remembering each namespace's declared prefix."""
        root: Element | None = None
        for event, item in ET.iterparse(source, events=("start-ns", "start")):
            if event == "start-ns":
                prefix, uri = item
                self._prefixes.setdefault(uri, prefix)
            elif root is None:
                root = item
        if root is None:
            raise ET.ParseError("no element found")
        return root

    # ------------------------------------------------------------------
    # Element helpers
    # ------------------------------------------------------------------

    def _qname(self, tag: str) -> str:
        """'{http://wordpress.org/export/1.2/}post_id' -> 'wp:post_id'."""
        if tag.startswith("{"):
            uri, _, local = tag[1:].partition("}")
            prefix = self._prefixes.get(uri)
            return f"{prefix}:{local}" if prefix else local
        return tag

    def _children(self, elem: Element) -> dict[str, list[Element]]:
        grouped: dict[str, list[Element]] = defaultdict(list)
        for child in elem:
            grouped[self._qname(child.tag)].append(child)
        return grouped

    @staticmethod
    def _text(children: dict[str, list[Element]], name: str, default: str = "") -> str:
        found = children.get(name)
        if not found or found[0].text is None:
            return default
        return found[0].text

    # ------------------------------------------------------------------
    # Phase 1: flatten
    # ------------------------------------------------------------------

    def _flatten(self, channel: Element) -> None:
        for elem in channel:
            name = self._qname(elem.tag)
            if name == "wp:author":
                self._parse_author(elem)
            elif name == "wp:category":
                self._parse_category(elem)
            elif name == "item":
                self._parse_item(elem)

        log.debug(
            "wxr_flattened",
            authors=len(self.authors),
            categories=len(self.categories),
            posts=len(self.posts),
        )

    def _parse_author(self, elem: Element) -> None:
        c = self._children(elem)
        author_id = leading_int(self._text(c, "wp:author_id"))
        if author_id is None:
            return
        self.authors[author_id] = WPAuthor(
            id=author_id,
            login=self._text(c, "wp:author_login").strip(),
            email=self._text(c, "wp:author_email").strip(),
            display_name=self._text(c, "wp:author_display_name").strip(),
            first_name=self._text(c, "wp:author_first_name").strip(),
            last_name=self._text(c, "wp:author_last_name").strip(),
        )

    def _parse_category(self, elem: Element) -> None:
        c = self._children(elem)
        term_id = leading_int(self._text(c, "wp:term_id"))
        if term_id is None:
            return
        self.categories[term_id] = WPCategory(
            id=term_id,
            name=self._text(c, "wp:cat_name").strip(),
            slug=self._text(c, "wp:category_nicename").strip(),
            parent=self._text(c, "wp:category_parent").strip(),
        )

    def _parse_item(self, elem: Element) -> None:
        c = self._children(elem)
        post_id = leading_int(self._text(c, "wp:post_id"))
        if post_id is None:
            return

        meta: dict[str, str] = {}
        for pm in c.get("wp:postmeta", []):
            pmc = self._children(pm)
            key = self._text(pmc, "wp:meta_key")
            value = self._text(pmc, "wp:meta_value")
            if key and value:
                meta[key] = value

        categories: list[str] = []
        tags: list[str] = []
        for cat in c.get("category", []):
            label = (cat.text or "").strip()
            if not label:
                continue
            categories.append(label)
            if cat.get("domain") == "post_tag":
                tags.append(label)

        self.posts[post_id] = WPPost(
            id=post_id,
            title=self._text(c, "title").strip(),
            slug=self._text(c, "wp:post_name").strip(),
            content=self._text(c, "content:encoded"),
            excerpt=self._text(c, "excerpt:encoded"),
            post_type=self._text(c, "wp:post_type").strip(),
            status=self._text(c, "wp:status").strip() or "draft",
            author=self._text(c, "dc:creator").strip(),
            created_at=self._text(c, "wp:post_date").strip(),
            updated_at=self._text(c, "wp:post_date_gmt").strip(),
            meta_data=meta,
            categories=categories,
            tags=tags,
        )

    # ------------------------------------------------------------------
    # Phase 2: classify
    # ------------------------------------------------------------------

    def _classify(self) -> None:
        handlers = {
            COURSE: self._classify_course,
            LESSON: self._classify_lesson,
            TOPIC: self._classify_topic,
            QUIZ: self._classify_quiz,
            QUESTION: self._classify_question,
            GROUP: self._classify_group,
        }
        for post in self.posts.values():
            handler = handlers.get(post.post_type)
            if handler:
                handler(post)

    def _classify_course(self, post: WPPost) -> None:
        self.courses[post.id] = ParsedCourse(
            wp_id=post.id,
            title=post.title,
            slug=post.slug,
            description=post.excerpt,
            content=post.content,
            language=rules.LANGUAGE.classify(post.title),
            level=rules.COURSE_LEVEL.classify(post.title),
            status=post.status,
            author=post.author,
            created_at=post.created_at,
            meta_data=post.meta_data,
        )

    def _classify_lesson(self, post: WPPost) -> None:
        self.lessons[post.id] = ParsedLesson(
            wp_id=post.id,
            title=post.title,
            slug=post.slug,
            description=post.excerpt,
            content=post.content,
            lesson_type=rules.LESSON_TYPE.classify(post.title),
            course_id=rules.resolve_parent_ref(post.meta_data, "course") or 0,
            status=post.status,
            author=post.author,
            created_at=post.created_at,
            meta_data=post.meta_data,
        )

    def _classify_topic(self, post: WPPost) -> None:
        self.topics[post.id] = ParsedTopic(
            wp_id=post.id,
            title=post.title,
            slug=post.slug,
            content=post.content,
            topic_type=rules.TOPIC_TYPE.classify(post.title),
            lesson_id=rules.resolve_parent_ref(post.meta_data, "lesson") or 0,
            status=post.status,
            author=post.author,
            created_at=post.created_at,
            meta_data=post.meta_data,
            interactive_data=extract_interactive_data(post.content),
        )

    def _classify_quiz(self, post: WPPost) -> None:
        self.quizzes[post.id] = ParsedQuiz(
            wp_id=post.id,
            title=post.title,
            description=post.content,
            quiz_type=rules.QUIZ_TYPE.classify(post.title),
            lesson_id=rules.resolve_parent_ref(post.meta_data, "lesson"),
            topic_id=rules.resolve_parent_ref(post.meta_data, "topic"),
            status=post.status,
            created_at=post.created_at,
            meta_data=post.meta_data,
        )

    def _classify_question(self, post: WPPost) -> None:
        meta = post.meta_data
        points = leading_int(rules.POINTS_KEY(meta))
        self.questions[post.id] = ParsedQuestion(
            wp_id=post.id,
            question_text=post.title,
            question_type=rules.question_type(rules.QUESTION_TYPE_KEY(meta)),
            correct_answer=rules.CORRECT_ANSWER_KEY(meta),
            answer_options=self._answer_options(meta),
            explanation=post.content,
            points=points if points is not None else 1,
            meta_data=meta,
            quiz_id=rules.resolve_parent_ref(meta, "quiz"),
        )

    def _classify_group(self, post: WPPost) -> None:
        self.groups[post.id] = WPGroup(
            id=post.id,
            title=post.title,
            description=post.content,
            status=post.status,
            created_at=post.created_at,
        )

    @staticmethod
    def _answer_options(meta: dict[str, str]) -> list:
        raw = rules.ANSWERS_KEY(meta) or "[]"
        try:
            options = json.loads(raw)
        except ValueError:
            return []
        return options if isinstance(options, list) else []

    # ------------------------------------------------------------------
    # Phase 3: link
    # ------------------------------------------------------------------

    def _link(self) -> None:
        """Attach children to parents once every post is classified."""
        for lesson in self.lessons.values():
            course = self.courses.get(lesson.course_id)
            if course is not None:
                course.lessons.append(lesson.wp_id)

        for topic in self.topics.values():
            lesson = self.lessons.get(topic.lesson_id)
            if lesson is not None:
                lesson.topics.append(topic.wp_id)

        by_quiz: dict[int, list[int]] = defaultdict(list)
        for question in self.questions.values():
            if question.quiz_id is not None:
                by_quiz[question.quiz_id].append(question.wp_id)

        for quiz in self.quizzes.values():
            declared = parse_php_serialized_ids(rules.QUIZ_QUESTIONS_KEY(quiz.meta_data))
            for question_id in [*declared, *by_quiz.get(quiz.wp_id, [])]:
                if question_id in self.questions and question_id not in quiz.questions:
                    quiz.questions.append(question_id)

    def _log_summary(self) -> None:
        languages = Counter(course.language for course in self.courses.values())
        log.info(
            "wxr_parsed",
            courses=len(self.courses),
            lessons=len(self.lessons),
            topics=len(self.topics),
            quizzes=len(self.quizzes),
            questions=len(self.questions),
            groups=len(self.groups),
            authors=len(self.authors),
            languages=dict(languages),
        )

    # ------------------------------------------------------------------
    # Accessors (live maps in document order; read-only after parsing)
    # ------------------------------------------------------------------

    def get_courses(self) -> dict[int, ParsedCourse]:
        return self.courses

    def get_lessons(self) -> dict[int, ParsedLesson]:
        return self.lessons

    def get_topics(self) -> dict[int, ParsedTopic]:
        return self.topics

    def get_quizzes(self) -> dict[int, ParsedQuiz]:
        return self.quizzes

    def get_questions(self) -> dict[int, ParsedQuestion]:
        return self.questions

    def get_groups(self) -> dict[int, WPGroup]:
        return self.groups

    def get_authors(self) -> dict[int, WPAuthor]:
        return self.authors

    def get_posts(self) -> dict[int, WPPost]:
        return self.posts

    def get_categories(self) -> dict[int, WPCategory]:
        return self.categories

    def find_author(self, login_or_email: str) -> WPAuthor | None:
        """Author whose login or email equals ``login_or_email``."""
        if not login_or_email:
            return None
        for author in self.authors.values():
            if login_or_email in (author.login, author.email):
                return author
        return None
