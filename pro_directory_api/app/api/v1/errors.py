"""
Translation of domain errors into HTTP errors for the v1 endpoints.
"""

import logging

from fastapi import HTTPException, status

from pro_directory_api.app.core.exceptions import (
    AccountNotFound,
    CannotRemovePrimary,
    CategoryNotFound,
    ConcurrentModification,
    DuplicateAccount,
    DuplicateCategory,
    InvalidAccountState,
    InvalidCategory,
    ProDirectoryError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    ((AccountNotFound, CategoryNotFound), status.HTTP_404_NOT_FOUND),
    ((DuplicateCategory, DuplicateAccount, ConcurrentModification), status.HTTP_409_CONFLICT),
    ((CannotRemovePrimary, InvalidCategory, InvalidAccountState), status.HTTP_400_BAD_REQUEST),
)


def http_error(exc: ProDirectoryError) -> HTTPException:
    """HTTPException carrying the domain error's message and matching status."""
    for error_types, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_types):
            return HTTPException(status_code=status_code, detail=str(exc))
    logger.error("Unmapped domain error %s: %s", type(exc).__name__, exc)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
