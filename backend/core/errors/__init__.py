"""Typed Error Handling

- Result[T, E]: Ok/Err container for success/failure
- AppError: error value with code, message, metadata and cause
- ErrorCode: error taxonomy (database, migration, internal)
- Boundary mappers and the phase commit builder

Usage:
    from core.errors import Ok, Err, DatabaseErrorMapper

    match await insert_entity(session, course):
        case Ok(row):
            mapping[wp_id] = row.id
        case Err(error):
            log.error("insert_failed", code=error.code.name, message=error.message)
"""
from .types import (
    Result,
    Ok,
    Err,
    AppError,
    ErrorCode,
    ErrorContext,
)

from .builders import phase_commit_failed

from .boundaries import (
    ErrorMapper,
    DatabaseErrorMapper,
    MigrationErrorMapper,
)

__all__ = [
    "Result",
    "Ok",
    "Err",
    "AppError",
    "ErrorCode",
    "ErrorContext",
    "phase_commit_failed",
    "ErrorMapper",
    "DatabaseErrorMapper",
    "MigrationErrorMapper",
]
