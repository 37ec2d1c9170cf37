"""Content Migration Package

Moves a WordPress (LearnDash) WXR export into the platform database:
- WXR parsing and hierarchy reconstruction
- Ordered, per-phase transactional inserts with id remapping
- Derived vocabulary and cultural-content rows
"""
from ingest.parsers.wxr import WordPressXMLParser
from ingest.context import MigrationContext, MigrationError, MigrationStats
from ingest.migration import ContentMigration

__all__ = [
    "WordPressXMLParser",
    "MigrationContext", "MigrationError", "MigrationStats",
    "ContentMigration",
]
