# Core module exports
from core.config import settings, get_settings
from core.database import engine, Base, AsyncSessionLocal
from core.logging import (
    configure_logging,
    get_logger,
    bind_context,
    clear_context,
    generate_run_id,
    parser_logger,
    migration_logger,
    db_logger,
)
