"""
Pytest configuration and fixtures for the migration tests.

Every database test gets a fresh SQLite file with all sink tables created.
"""
import pytest
import pytest_asyncio
from sqlalchemy import func, select

import models  # noqa: F401
from core.database import Base, build_engine, build_session_factory
from ingest.context import MigrationContext
from ingest.parsers.wxr import WordPressXMLParser
from wxr_builder import WXRBuilder


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Async engine on a temporary SQLite database with the schema created."""
    db_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'migration.db'}")
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db_engine
    await db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def ctx():
    return MigrationContext(default_user_id=1)


@pytest.fixture
def builder():
    return WXRBuilder()


@pytest.fixture
def parse():
    """Parse a builder (or raw XML) into a fresh parser."""
    def _parse(source) -> WordPressXMLParser:
        parser = WordPressXMLParser()
        parser.parse_xml_string(source.build() if isinstance(source, WXRBuilder) else source)
        return parser
    return _parse


@pytest.fixture
def run_phase(session_factory):
    """Run one phase function in its own committed session."""
    async def _run(phase, parser, context):
        async with session_factory() as session:
            await phase(session, parser, context)
            await session.commit()
    return _run


@pytest.fixture
def db(session_factory):
    """Small query helper for assertions."""
    class DB:
        async def count(self, model) -> int:
            async with session_factory() as session:
                return await session.scalar(select(func.count()).select_from(model))

        async def all(self, model) -> list:
            async with session_factory() as session:
                result = await session.execute(select(model).order_by(model.id))
                return list(result.scalars().all())

    return DB()
