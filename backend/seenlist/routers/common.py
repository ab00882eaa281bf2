import logging
from fastapi import HTTPException, status
from seenlist.core.exceptions import BaseAppException

logger = logging.getLogger(__name__)

def handle_exception(e: Exception) -> HTTPException:
    """Convert domain exceptions to HTTP responses."""
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, BaseAppException):
        return HTTPException(status_code=e.status_code, detail=e.message)
    logger.exception(f"Unhandled error: {str(e)}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An internal server error occurred",
    )
