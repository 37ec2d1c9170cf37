"""Text Helpers for WordPress Content

Slugs, description cleanup, ordering numbers embedded in titles, word
counts, vocabulary token extraction, shortcode detection and decoding of
PHP-serialized id arrays found in LearnDash post meta.
"""
import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_TAG = re.compile(r"<[^>]*>")
_WHITESPACE = re.compile(r"\s+")
_FIRST_INT = re.compile(r"(\d+)")
_PAGE_NUMBER = re.compile(r"page\s*(\d+)", re.IGNORECASE)
_H5P_ID = re.compile(r'\[h5p id="(\d+)"\]')
_SERIALIZED_INT_KEY = re.compile(r"i:(\d+);i:\d+;")

# Latin letters incl. the French/German/Spanish diacritics
_VOCAB_TOKEN = re.compile(
    r"[a-zA-ZàâäéèêëïîôöùûüÿçÀÂÄÉÈÊËÏÎÔÖÙÛÜŸÇßáíóúñÁÍÓÚÑ]+"
)

VOCAB_MIN_LENGTH = 4
VOCAB_MAX_LENGTH = 19
VOCAB_PER_LESSON = 10
DESCRIPTION_LIMIT = 500
CONTEXT_LIMIT = 200


def generate_slug(text: str) -> str:
    """Lower-case, hyphen-separated slug ("Lesson: Au Café!" -> "lesson-au-caf")."""
    return _NON_ALNUM.sub("-", text.lower()).strip("-")


def strip_tags(html: str) -> str:
    return _TAG.sub("", html)


def clean_description(text: str, limit: int = DESCRIPTION_LIMIT) -> str:
    """Remove markup, collapse whitespace and truncate."""
    return _WHITESPACE.sub(" ", strip_tags(text)).strip()[:limit]


def first_int(text: str, default: int = 0) -> int:
    """First run of digits in ``text`` ("Course 2 - Level 3" -> 2)."""
    match = _FIRST_INT.search(text)
    return int(match.group(1)) if match else default


def topic_order(title: str) -> int:
    """Order from a "Page N" title, else the first number in it."""
    match = _PAGE_NUMBER.search(title)
    if match:
        return int(match.group(1))
    return first_int(title)


def word_count(text: str) -> int:
    return len(text.split())


def leading_int(value: str | None) -> int | None:
    """Parse the leading digits of a metadata value ("45s" -> 45)."""
    if not value:
        return None
    match = re.match(r"\s*([+-]?\d+)", value)
    return int(match.group(1)) if match else None


def extract_vocabulary_tokens(content: str, limit: int = VOCAB_PER_LESSON) -> list[str]:
    """Unique word-like tokens of 4-19 letters, in order of first appearance.

    Markup is stripped first so tag and attribute names never become
    vocabulary; the length filter runs before the cap.
    """
    seen: set[str] = set()
    tokens: list[str] = []
    for match in _VOCAB_TOKEN.finditer(strip_tags(content)):
        token = match.group(0)
        if token in seen or not VOCAB_MIN_LENGTH <= len(token) <= VOCAB_MAX_LENGTH:
            continue
        seen.add(token)
        tokens.append(token)
        if len(tokens) >= limit:
            break
    return tokens


def context_sentence(content: str, limit: int = CONTEXT_LIMIT) -> str:
    return clean_description(content, limit=limit)


def extract_interactive_data(content: str) -> dict | None:
    """Detect H5P embeds and quiz shortcodes in topic content."""
    data: dict = {}

    if "[h5p" in content:
        data["hasH5P"] = True
        match = _H5P_ID.search(content)
        if match:
            data["h5pId"] = match.group(1)

    if "[quiz" in content:
        data["hasQuiz"] = True

    return data or None


def parse_php_serialized_ids(value: str | None) -> list[int]:
    """Keys of a PHP-serialized ``int => int`` array, in order.

    LearnDash stores a quiz's questions as ``a:2:{i:101;i:7;i:102;i:8;}``
    (question post id => internal question id).
    """
    if not value:
        return []
    return [int(key) for key in _SERIALIZED_INT_KEY.findall(value)]
