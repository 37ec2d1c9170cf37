"""Content Migration Orchestrator

Parses a WXR export and runs the migration phases in order. Each phase
gets its own session and transaction: rows of a phase are committed
together, while single-entity failures inside it are rolled back to
their SAVEPOINT and recorded. Only a failure to read or parse the export
(or an unexpected error escaping a phase) aborts the run.
"""
from datetime import datetime
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.database import AsyncSessionLocal
from core.errors import phase_commit_failed
from core.logging import bind_context, clear_context, generate_run_id, migration_logger
from ingest.context import MigrationContext, MigrationError, MigrationStats
from ingest.parsers.wxr import WordPressXMLParser
from ingest.phases import PHASES, Phase

log = migration_logger()


class ContentMigration:
    """Drives one WXR → database migration run."""

    __slots__ = ("session_factory", "parser", "context")

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        default_user_id: int = 1,
        parser: WordPressXMLParser | None = None,
    ):
        self.session_factory = session_factory or AsyncSessionLocal
        self.parser = parser or WordPressXMLParser()
        self.context = MigrationContext(default_user_id=default_user_id)

    @property
    def stats(self) -> MigrationStats:
        return self.context.stats

    async def run_migration(self, xml_file_path: Path | str) -> MigrationStats:
        """Parse ``xml_file_path`` and migrate everything it contains.

        Raises whatever the parse raises (missing file, malformed XML) after
        recording it in ``stats.errors``.
        """
        bind_context(run_id=generate_run_id())
        log.info("migration_started", file_path=str(xml_file_path))

        try:
            self.parser.parse_xml_file(xml_file_path)
            for name, phase in PHASES:
                await self.run_phase(name, phase)
        except Exception as e:
            self.stats.errors.append(f"Migration failed: {e}")
            log.error("migration_failed", error=str(e), exc_info=True)
            raise
        finally:
            self.stats.completed_at = datetime.utcnow()
            clear_context()

        self.log_migration_summary()
        return self.stats

    async def run_phase(self, name: str, phase: Phase) -> None:
        """Run one phase in its own transaction.

        If the commit fails, the phase's mappings and counters are put back
        to their pre-phase values, so later phases skip its children.
        """
        snapshot = self.context.snapshot()
        log.info("phase_started", phase=name)

        async with self.session_factory() as session:
            await phase(session, self.parser, self.context)
            try:
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                self.context.restore(snapshot)
                error = phase_commit_failed(name, str(e), origin="migration", cause=e).error
                self.stats.errors.append(f"{name} phase commit error: {e}")
                self.stats.error_records.append(MigrationError.from_app_error("phase", None, name, error))
                log.error("phase_commit_failed", phase=name, error=str(e))
                return

        log.info("phase_completed", phase=name, errors=len(self.stats.errors))

    def log_migration_summary(self) -> None:
        log.info("migration_summary", **self.stats.counters(), error_count=len(self.stats.errors))
        for error in self.stats.errors:
            log.warning("migration_error", error=error)
