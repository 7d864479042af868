"""
Monthly subscription fee for professional listings.

    fee = BASE_FEE + ADDITIONAL_SERVICE_FEE * (number of additional categories)

All arithmetic uses ``Decimal`` and results are quantized to cents with
ROUND_HALF_UP, so the same input always produces the same value (digits
and exponent).  Special pricing is expressed only through an account's
``fee_override``, which the calculator applies itself.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from ..core.config import settings
from ..core.exceptions import InvalidAccountState
from ..schemas.account import ProfessionalAccount
from .category_service import ServiceCategorySet

BASE_FEE = Decimal("29.77")
ADDITIONAL_SERVICE_FEE = Decimal("5.00")
CENTS = Decimal("0.01")

# Largest count the quote endpoint accepts.
MAX_ADDITIONAL_SERVICES = 1000


def to_cents(amount: Decimal) -> Decimal:
    """Quantize to cents; amounts too large for the decimal context are rejected."""
    try:
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAccountState(f"Amount {amount} cannot be represented in cents") from None


@dataclass(frozen=True)
class FeeBreakdown:
    base_fee: Decimal
    additional_services: int
    additional_service_fee: Decimal
    additional_total: Decimal
    fee_override: Optional[Decimal]
    monthly_fee: Decimal
    currency: str


class FeeCalculator:
    """Pure fee computation; callers persist the result."""

    def __init__(
        self,
        base_fee: Decimal = BASE_FEE,
        additional_service_fee: Decimal = ADDITIONAL_SERVICE_FEE,
        currency: Optional[str] = None,
    ):
        self.base_fee = to_cents(base_fee)
        self.additional_service_fee = to_cents(additional_service_fee)
        self.currency = currency or settings.currency

    def quote(self, additional_count: int) -> Decimal:
        """Fee for a primary category plus ``additional_count`` more."""
        if additional_count < 0:
            raise InvalidAccountState("Number of additional services cannot be negative")
        return to_cents(self.base_fee + self.additional_service_fee * additional_count)

    def calculate(self, category_set: ServiceCategorySet, override: Optional[Decimal] = None) -> Decimal:
        """Monthly fee for ``category_set``.

        Raises ``InvalidAccountState`` when the set has no primary
        category, lists the primary as additional, or ``override`` is
        negative.  A present override replaces the computed price.
        """
        category_set.validate()
        if override is not None:
            if not override.is_finite():
                raise InvalidAccountState("Fee override must be a finite amount")
            if override < 0:
                raise InvalidAccountState("Fee override cannot be negative")
            return to_cents(override)
        return self.quote(category_set.additional_count)

    def breakdown(self, category_set: ServiceCategorySet, override: Optional[Decimal] = None) -> FeeBreakdown:
        return self._breakdown(category_set.additional_count, override, self.calculate(category_set, override))

    def quote_breakdown(self, additional_count: int) -> FeeBreakdown:
        """Itemized ``quote`` for a prospective number of additional services."""
        return self._breakdown(additional_count, None, self.quote(additional_count))

    def _breakdown(self, count: int, override: Optional[Decimal], monthly_fee: Decimal) -> FeeBreakdown:
        return FeeBreakdown(
            base_fee=self.base_fee,
            additional_services=count,
            additional_service_fee=self.additional_service_fee,
            additional_total=to_cents(self.additional_service_fee * count),
            fee_override=to_cents(override) if override is not None else None,
            monthly_fee=monthly_fee,
            currency=self.currency,
        )

    def fee_for_account(self, account: ProfessionalAccount) -> Optional[Decimal]:
        """Fee for a stored account; ``None`` for non-professional accounts."""
        if not account.is_professional:
            return None
        return self.calculate(account.category_set, account.fee_override)


fee_calculator = FeeCalculator()
