"""
HTTP error helpers shared by the service layer.

Persistence failures are retryable by the caller (503 + Retry-After); nothing
here retries on its own. Storage failures abort the enclosing submission
before any row is touched.
"""

import logging
from fastapi import HTTPException

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = "1"


def persistence_error(exc: Exception, action: str = "Database operation") -> HTTPException:
    logger.error(f"{action} failed: {exc}")
    return HTTPException(
        status_code=503,
        detail=f"{action} failed, please retry: {exc}",
        headers={"Retry-After": RETRY_AFTER_SECONDS},
    )


def storage_error(exc: Exception) -> HTTPException:
    logger.error(f"Upload failed: {exc}")
    return HTTPException(status_code=502, detail=f"Upload error: {exc}")


def transition_conflict(entity: str, entity_id, status: str) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail=f"{entity} {entity_id} cannot be changed while it is '{status}'",
    )
