"""
Fee quotes for prospective service selections.

Clients display prices from this endpoint (or from an account's stored
``monthly_fee``) instead of computing them themselves.
"""

from fastapi import APIRouter, Depends, Query

from pro_directory_api.app.api.v1.errors import http_error
from pro_directory_api.app.core.exceptions import ProDirectoryError
from pro_directory_api.app.core.security import get_current_user
from pro_directory_api.app.schemas.fee import FeeBreakdownRead
from pro_directory_api.app.services.fee_service import MAX_ADDITIONAL_SERVICES, fee_calculator

router = APIRouter()


@router.get("/quote", response_model=FeeBreakdownRead, summary="Quote a monthly fee")
async def quote_fee(
    additional_services: int = Query(
        0, ge=0, le=MAX_ADDITIONAL_SERVICES, description="Number of additional service categories"
    ),
    current_user: dict = Depends(get_current_user),
) -> FeeBreakdownRead:
    """Itemized monthly fee for a primary category plus ``additional_services``."""
    try:
        return FeeBreakdownRead.from_breakdown(fee_calculator.quote_breakdown(additional_services))
    except ProDirectoryError as e:
        raise http_error(e)
