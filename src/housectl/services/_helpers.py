"""Shared service-layer helper functions."""

from __future__ import annotations

import logging

from housectl.domain.errors import HouseError
from housectl.services.result import ServiceError, ServiceResult

logger = logging.getLogger(__name__)


def fail(op: str, exc: HouseError, *, warnings: list[str] | None = None) -> ServiceResult:
    """Convert a typed domain failure into a failed ServiceResult."""
    return ServiceResult(
        ok=False,
        op=op,
        warnings=warnings or [],
        error=ServiceError(code=exc.code, message=exc.message, detail=exc.detail),
    )


def operation_failed(op: str, exc: Exception) -> ServiceResult:
    """Log an unexpected failure with traceback and return OPERATION_FAILED."""
    logger.error("%s failed: %s", op, exc, exc_info=exc)
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(
            code="OPERATION_FAILED",
            message=f"{op} failed and was rolled back",
            detail={"reason": str(exc)},
        ),
    )
