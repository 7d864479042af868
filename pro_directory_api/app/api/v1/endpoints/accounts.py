"""
API endpoints for professional accounts and their service categories.

Professionals may read and change their own account; administrators
may do so for any account and additionally create, import and list
accounts, set special pricing and reconcile stored fees.

Mutating endpoints are plain functions: FastAPI runs them in its
threadpool, where the per-account locks of ``AccountService`` apply.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status

from pro_directory_api.app.api.v1.errors import http_error
from pro_directory_api.app.core.exceptions import ProDirectoryError
from pro_directory_api.app.core.security import (
    ROLE_ADMIN,
    actor_of,
    ensure_account_access,
    get_current_user,
    require_roles,
)
from pro_directory_api.app.schemas.account import (
    AccountCreate,
    AccountRead,
    AddServiceRequest,
    AddServiceResponse,
    FeeOverrideUpdate,
    SimilarCategoryWarningRead,
)
from pro_directory_api.app.schemas.fee import AccountFeeRead, FeeBreakdownRead, FeeCorrectionRead
from pro_directory_api.app.services.account_service import AccountService

router = APIRouter()


@router.post("/", response_model=AccountRead, status_code=status.HTTP_201_CREATED, summary="Create an account")
def create_account(
    data: AccountCreate,
    current_user: dict = Depends(require_roles(ROLE_ADMIN)),
) -> AccountRead:
    """Register a professional with their primary service category.

    The new account is billed the base fee until additional services
    are added.
    """
    try:
        account = AccountService.create_account(data, actor=actor_of(current_user))
    except ProDirectoryError as e:
        raise http_error(e)
    return AccountRead.from_account(account)


@router.get("/", response_model=List[AccountRead], summary="List accounts")
def list_accounts(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: dict = Depends(require_roles(ROLE_ADMIN)),
) -> List[AccountRead]:
    return [AccountRead.from_account(account) for account in AccountService.list_accounts(limit, offset)]


@router.post(
    "/import",
    response_model=AccountRead,
    status_code=status.HTTP_201_CREATED,
    summary="Import a legacy account record",
)
def import_account(
    record: Dict[str, Any] = Body(..., examples=[{"username": "sparky", "serviceCategories": "{Electrician,Plumber}"}]),
    current_user: dict = Depends(require_roles(ROLE_ADMIN)),
) -> AccountRead:
    """Store a record exported by an older system.

    Both camelCase and snake_case field names are accepted, as are
    PostgreSQL array literals for category lists.  The fee is
    recomputed from the imported categories.
    """
    try:
        account = AccountService.import_account(record, actor=actor_of(current_user))
    except ProDirectoryError as e:
        raise http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return AccountRead.from_account(account)


@router.post("/reconcile-fees", response_model=List[FeeCorrectionRead], summary="Repair drifted fees")
def reconcile_fees(
    current_user: dict = Depends(require_roles(ROLE_ADMIN)),
) -> List[FeeCorrectionRead]:
    """Recompute every professional account's fee and store corrections."""
    try:
        corrections = AccountService.reconcile_fees(actor=actor_of(current_user))
    except ProDirectoryError as e:
        raise http_error(e)
    return [FeeCorrectionRead(**correction) for correction in corrections]


@router.get("/{account_id}", response_model=AccountRead, summary="Get an account")
def get_account(
    account_id: int,
    current_user: dict = Depends(get_current_user),
) -> AccountRead:
    """Return the stored account, including its authoritative ``monthly_fee``."""
    ensure_account_access(current_user, account_id)
    try:
        return AccountRead.from_account(AccountService.get_account(account_id))
    except ProDirectoryError as e:
        raise http_error(e)


@router.get("/{account_id}/fee", response_model=AccountFeeRead, summary="Fee breakdown for an account")
def get_account_fee(
    account_id: int,
    current_user: dict = Depends(get_current_user),
) -> AccountFeeRead:
    """Itemized fee for the stored categories next to the billed fee.

    ``in_sync`` is false when the stored fee drifted from the categories;
    the stored value stays authoritative until reconciled.
    """
    ensure_account_access(current_user, account_id)
    try:
        account, breakdown = AccountService.get_fee_breakdown(account_id)
    except ProDirectoryError as e:
        raise http_error(e)
    return AccountFeeRead(
        **FeeBreakdownRead.from_breakdown(breakdown).model_dump(),
        account_id=account_id,
        persisted_fee=account.monthly_fee,
        in_sync=account.monthly_fee == breakdown.monthly_fee,
    )


@router.post(
    "/{account_id}/services",
    response_model=AddServiceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add an additional service category",
)
def add_service(
    account_id: int,
    data: AddServiceRequest,
    response: Response,
    current_user: dict = Depends(get_current_user),
) -> AddServiceResponse:
    """Add a category and reprice the account in one step.

    Responds 201 when the category was added.  When it looks like one
    already on the account, nothing changes and the response is 200 with
    ``applied: false`` and a warning; repeat the request with
    ``accept_similar: true`` to add it anyway.
    """
    ensure_account_access(current_user, account_id)
    try:
        outcome = AccountService.add_service(
            account_id, data.category, accept_similar=data.accept_similar, actor=actor_of(current_user)
        )
    except ProDirectoryError as e:
        raise http_error(e)
    if not outcome.applied:
        response.status_code = status.HTTP_200_OK
    return AddServiceResponse(
        applied=outcome.applied,
        account=AccountRead.from_account(outcome.account),
        warning=SimilarCategoryWarningRead.from_warning(outcome.warning) if outcome.warning else None,
        billing_type=outcome.billing_type,
    )


@router.delete(
    "/{account_id}/services/{category:path}",
    response_model=AccountRead,
    summary="Remove an additional service category",
)
def remove_service(
    account_id: int,
    category: str,
    current_user: dict = Depends(get_current_user),
) -> AccountRead:
    """Remove an additional category; the primary category cannot be removed."""
    ensure_account_access(current_user, account_id)
    try:
        account = AccountService.remove_service(account_id, category, actor=actor_of(current_user))
    except ProDirectoryError as e:
        raise http_error(e)
    return AccountRead.from_account(account)


@router.put("/{account_id}/fee-override", response_model=AccountRead, summary="Set special pricing")
def set_fee_override(
    account_id: int,
    data: FeeOverrideUpdate,
    current_user: dict = Depends(require_roles(ROLE_ADMIN)),
) -> AccountRead:
    """Set or clear (``null``) the account's special monthly price."""
    try:
        account = AccountService.set_fee_override(account_id, data.fee_override, actor=actor_of(current_user))
    except ProDirectoryError as e:
        raise http_error(e)
    return AccountRead.from_account(account)
