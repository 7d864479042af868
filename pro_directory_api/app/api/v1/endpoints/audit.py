"""
Audit log endpoints for API v1.

Every account mutation (creation, import, service changes, fee
overrides and reconciliation) leaves a record with the previous and new
fee.  Only administrators may read them.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from pro_directory_api.app.core.security import ROLE_ADMIN, require_roles
from pro_directory_api.app.services.audit_service import AuditService

router = APIRouter()


@router.get("/logs")
def list_audit_logs(
    object_type: Optional[str] = Query(None, description="Filter by object type (account)"),
    object_id: Optional[int] = Query(None, description="Filter by object ID"),
    action: Optional[str] = Query(None, description="Filter by action (create, add_service, ...)"),
    actor: Optional[str] = Query(None, description="Filter by acting token subject"),
    limit: int = Query(100, ge=1, le=500, description="Maximum number of logs to return"),
    offset: int = Query(0, ge=0, description="Number of logs to skip"),
    current_user: dict = Depends(require_roles(ROLE_ADMIN)),
) -> List[dict]:
    """Audit records matching the filters, newest first."""
    return AuditService.list_logs(
        object_type=object_type,
        object_id=object_id,
        action=action,
        actor=actor,
        limit=limit,
        offset=offset,
    )
