"""
Pydantic models for fee quotes, breakdowns and reconciliation results.

Displayed prices must come from these responses; clients never
recompute them.
"""

from dataclasses import asdict
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class FeeBreakdownRead(BaseModel):
    base_fee: Decimal
    additional_services: int
    additional_service_fee: Decimal
    additional_total: Decimal
    fee_override: Optional[Decimal] = None
    monthly_fee: Decimal
    currency: str

    @classmethod
    def from_breakdown(cls, breakdown) -> "FeeBreakdownRead":
        return cls(**asdict(breakdown))


class AccountFeeRead(FeeBreakdownRead):
    """Live breakdown next to the persisted (billed) fee."""

    account_id: int
    persisted_fee: Optional[Decimal] = None
    in_sync: bool


class FeeCorrectionRead(BaseModel):
    account_id: int
    previous_fee: Optional[Decimal] = None
    monthly_fee: Decimal
