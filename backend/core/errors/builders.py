"""Domain-Specific Error Builders

Ergonomic constructors for the error codes the migration produces.
"""
from .types import AppError, ErrorCode, ErrorContext, Err


# =============================================================================
# Database Errors (E4xxx)
# =============================================================================

def db_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E4000_DATABASE_GENERIC,
    origin: str = "",
    cause: Exception | None = None,
    **metadata,
) -> Err[AppError]:
    """Create database error."""
    return Err(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata=metadata,
        cause=cause,
    ))


def duplicate_key(detail: str, origin: str = "", cause: Exception | None = None) -> Err[AppError]:
    return db_error(
        f"Duplicate key: {detail}",
        code=ErrorCode.E4011_DUPLICATE_KEY,
        origin=origin,
        cause=cause,
    )


def foreign_key_violation(detail: str, origin: str = "", cause: Exception | None = None) -> Err[AppError]:
    return db_error(
        f"Foreign key violation: {detail}",
        code=ErrorCode.E4012_FOREIGN_KEY_VIOLATION,
        origin=origin,
        cause=cause,
    )


def not_null_violation(detail: str, origin: str = "", cause: Exception | None = None) -> Err[AppError]:
    return db_error(
        f"Missing required value: {detail}",
        code=ErrorCode.E4014_NOT_NULL_VIOLATION,
        origin=origin,
        cause=cause,
    )


def db_connection_failed(reason: str = "", origin: str = "", cause: Exception | None = None) -> Err[AppError]:
    msg = "Database connection failed"
    if reason:
        msg += f": {reason}"
    return db_error(msg, code=ErrorCode.E4001_CONNECTION_FAILED, origin=origin, cause=cause)


def transaction_failed(reason: str = "", origin: str = "", cause: Exception | None = None) -> Err[AppError]:
    msg = "Transaction failed"
    if reason:
        msg += f": {reason}"
    return db_error(msg, code=ErrorCode.E4003_TRANSACTION_FAILED, origin=origin, cause=cause)


# =============================================================================
# Migration Errors (E5xxx)
# =============================================================================

def migration_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E5000_MIGRATION_GENERIC,
    origin: str = "",
    cause: Exception | None = None,
    **metadata,
) -> Err[AppError]:
    """Create migration logic error."""
    return Err(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata=metadata,
        cause=cause,
    ))


def phase_commit_failed(phase: str, reason: str, origin: str = "", cause: Exception | None = None) -> Err[AppError]:
    return migration_error(
        f"Commit of phase '{phase}' failed: {reason}",
        code=ErrorCode.E5002_PHASE_COMMIT_FAILED,
        origin=origin,
        cause=cause,
        phase=phase,
    )


# =============================================================================
# Internal Errors (E9xxx)
# =============================================================================

def internal_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E9000_INTERNAL_GENERIC,
    origin: str = "",
    cause: Exception | None = None,
    **metadata,
) -> Err[AppError]:
    """Create internal error."""
    return Err(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata=metadata,
        cause=cause,
    ))
