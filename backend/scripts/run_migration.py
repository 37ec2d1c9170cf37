#!/usr/bin/env python3
"""Migrate a WordPress (LearnDash) export into the platform database.

Reads the WXR file, runs every migration phase and prints a summary of
what was imported, skipped and failed.

Run with: python3 -m scripts.run_migration [--file PATH] [--create-tables]
"""
import argparse
import asyncio
import sys
import time
from datetime import timedelta
from pathlib import Path

from core.config import settings
from core.database import AsyncSessionLocal, create_tables, engine
from core.logging import configure_logging
from ingest.context import MigrationStats
from ingest.migration import ContentMigration

# ANSI color codes
C_RESET = "\033[0m"
C_BOLD = "\033[1m"
C_DIM = "\033[2m"
C_GREEN = "\033[32m"
C_YELLOW = "\033[33m"
C_CYAN = "\033[36m"
C_MAGENTA = "\033[35m"
C_RED = "\033[31m"

SUMMARY_ROWS = (
    ("Institutions", "institutions_imported"),
    ("Users", "users_imported"),
    ("Courses", "courses_imported"),
    ("Lessons", "lessons_imported"),
    ("Topics", "topics_imported"),
    ("Quizzes", "quizzes_imported"),
    ("Questions", "questions_imported"),
    ("Vocabulary", "vocabulary_imported"),
    ("Cultural content", "cultural_content_imported"),
)


def fmt_num(n: int) -> str:
    """Format number with thousands separator."""
    return f"{n:,}"


def fmt_duration(seconds: float) -> str:
    """Format duration nicely."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        return f"{int(seconds // 60)}m {int(seconds % 60)}s"
    else:
        return str(timedelta(seconds=int(seconds)))


def print_banner(title: str, color: str) -> None:
    print()
    print(f"{C_BOLD}{color}╔{'═' * 58}╗{C_RESET}")
    print(f"{C_BOLD}{color}║{title:^58}║{C_RESET}")
    print(f"{C_BOLD}{color}╚{'═' * 58}╝{C_RESET}")
    print()


def print_summary(stats: MigrationStats, duration: float) -> None:
    """Print the per-entity counts and every recorded error."""
    print(f"  {C_BOLD}Imported:{C_RESET}")
    for label, attr in SUMMARY_ROWS:
        print(f"    {C_GREEN}✓ {label + ':':<18}{C_RESET}{fmt_num(getattr(stats, attr)):>8}")

    if stats.lessons_skipped or stats.topics_skipped:
        print(f"\n  {C_BOLD}Skipped (no parent):{C_RESET}")
        print(f"    {C_DIM}○ {'Lessons:':<18}{fmt_num(stats.lessons_skipped):>8}{C_RESET}")
        print(f"    {C_DIM}○ {'Topics:':<18}{fmt_num(stats.topics_skipped):>8}{C_RESET}")

    if stats.errors:
        print(f"\n  {C_RED}{C_BOLD}✗ Errors: {len(stats.errors)}{C_RESET}")
        for error in stats.errors:
            print(f"    {C_RED}- {error}{C_RESET}")

    print()
    print(f"  {C_DIM}Duration: {fmt_duration(duration)}{C_RESET}")
    print()


async def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Migrate a WordPress/LearnDash WXR export",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 -m scripts.run_migration                          # Use WXR_EXPORT_PATH
  python3 -m scripts.run_migration --file export.xml        # Explicit file
  python3 -m scripts.run_migration --file export.xml --create-tables
        """
    )
    parser.add_argument("--file", default=settings.WXR_EXPORT_PATH, help="WXR export to migrate")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        default=settings.MIGRATION_CREATE_TABLES,
        help="Create missing tables before migrating",
    )
    parser.add_argument(
        "--default-user-id",
        type=int,
        default=settings.MIGRATION_DEFAULT_USER_ID,
        help="created_by for courses whose author has no account",
    )
    args = parser.parse_args(argv)

    configure_logging(level=settings.LOG_LEVEL, json_logs=settings.LOG_JSON, log_sql=settings.LOG_SQL)

    xml_path = Path(args.file)

    print_banner("WORDPRESS CONTENT MIGRATION", C_MAGENTA)
    print(f"  {C_DIM}Export file:{C_RESET}  {xml_path}")
    print(f"  {C_DIM}Database:{C_RESET}     {engine.url.render_as_string(hide_password=True)}")
    print()

    start = time.time()
    migration = ContentMigration(session_factory=AsyncSessionLocal, default_user_id=args.default_user_id)
    try:
        if args.create_tables:
            await create_tables(engine)
        stats = await migration.run_migration(xml_path)
    except Exception as e:
        print_banner("✗ MIGRATION FAILED", C_RED)
        print(f"  {C_RED}{e}{C_RESET}")
        print()
        return 1
    finally:
        await engine.dispose()

    print_banner("✓ MIGRATION COMPLETE", C_GREEN if not stats.errors else C_YELLOW)
    print_summary(stats, time.time() - start)
    return 0


def run() -> None:
    """Console-script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
