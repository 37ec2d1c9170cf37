"""Parser implementations for source data formats."""
from ingest.parsers.wxr import (
    WordPressXMLParser,
    WPAuthor, WPCategory, WPGroup, WPPost,
    ParsedCourse, ParsedLesson, ParsedTopic, ParsedQuiz, ParsedQuestion,
)

__all__ = [
    "WordPressXMLParser",
    "WPAuthor", "WPCategory", "WPGroup", "WPPost",
    "ParsedCourse", "ParsedLesson", "ParsedTopic", "ParsedQuiz", "ParsedQuestion",
]
