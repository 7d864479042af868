"""
Top-level router for version 1 of the API.

Aggregates the domain routers under their prefixes.  When a new domain
is added, include its router here.
"""

from fastapi import APIRouter

from .endpoints import accounts, audit, fees, taxonomy

router = APIRouter()

router.include_router(accounts.router, prefix="/accounts", tags=["accounts"])
router.include_router(fees.router, prefix="/fees", tags=["fees"])
router.include_router(taxonomy.router, prefix="/taxonomy", tags=["taxonomy"])
router.include_router(audit.router, prefix="/audit", tags=["audit"])
