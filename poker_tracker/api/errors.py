from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status

from poker_tracker.domain import (
    DivisionUndefined,
    DomainValidationError,
    SessionNotFoundError,
    StageConflictError,
)
from poker_tracker.service import ChipCountMismatchError


def api_error(
    *,
    code: str,
    message: str,
    details: Any | None = None,
    status_code: int = status.HTTP_400_BAD_REQUEST,
) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={
            "code": code,
            "message": message,
            "details": details,
        },
    )


def domain_error(exc: DomainValidationError) -> HTTPException:
    if isinstance(exc, SessionNotFoundError):
        return api_error(code="session_not_found", message=str(exc), status_code=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, ChipCountMismatchError):
        return api_error(
            code="chip_count_mismatch",
            message=str(exc),
            details={"difference": exc.difference},
            status_code=status.HTTP_409_CONFLICT,
        )
    if isinstance(exc, StageConflictError):
        return api_error(code="stage_conflict", message=str(exc), status_code=status.HTTP_409_CONFLICT)
    if isinstance(exc, DivisionUndefined):
        return api_error(
            code="no_chips_in_play",
            message=str(exc),
            status_code=422,
        )
    return api_error(code="validation_error", message=str(exc))
