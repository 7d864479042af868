"""
Business logic for professional accounts.

Every change to an account's categories or pricing goes through
``AccountService._commit_change``, which

1. takes the account's in-process lock,
2. opens a ``BEGIN IMMEDIATE`` transaction and reads the account,
3. applies a pure change (``category_service`` rules),
4. recomputes the fee with :class:`FeeCalculator`,
5. writes categories, fee and audit row, and commits.

Readers therefore only ever see a category set together with the fee
computed from it.  The persisted ``monthly_fee`` is the value billing
and the presentation layer must use.
"""

import logging
import threading
import weakref
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..core.db import get_connection
from ..core.exceptions import ConcurrentModification, InvalidAccountState, ProDirectoryError
from ..schemas.account import AccountCreate, ProfessionalAccount, account_from_record
from . import category_service
from .account_store import AccountStore
from .audit_service import AuditService
from .category_service import SimilarCategoryWarning
from .fee_service import FeeBreakdown, fee_calculator

logger = logging.getLogger(__name__)

BILLING_NEXT_CYCLE = "next_cycle"
BILLING_IMMEDIATE = "immediate"


class AccountLocks:
    """One lock per account id, kept alive only while someone holds it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: "weakref.WeakValueDictionary[int, threading.Lock]" = weakref.WeakValueDictionary()

    def for_account(self, account_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(account_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[account_id] = lock
            return lock


@dataclass(frozen=True)
class AddServiceOutcome:
    account: ProfessionalAccount
    applied: bool
    warning: Optional[SimilarCategoryWarning] = None
    billing_type: Optional[str] = None


def billing_type_for(account: ProfessionalAccount) -> str:
    """When the surcharge for a newly added service is collected.

    Accounts with an active paid subscription pay it with their next
    cycle; anyone else completes payment for the new total right away.
    """
    if account.subscription_status == "active" and account.stripe_customer_id:
        return BILLING_NEXT_CYCLE
    return BILLING_IMMEDIATE


class AccountService:
    """Account creation, category mutations and fee maintenance."""

    calculator = fee_calculator
    _locks = AccountLocks()

    @classmethod
    def _commit_change(
        cls,
        account_id: int,
        change: Callable[[ProfessionalAccount], Optional[ProfessionalAccount]],
        action: str,
        actor: Optional[str],
        details: Optional[Dict[str, Any]] = None,
    ) -> Tuple[ProfessionalAccount, bool]:
        """Apply ``change`` atomically; return ``(account, written)``.

        ``change`` returns the new account state (fee not yet updated) or
        ``None`` to leave the account untouched.  Any exception it raises
        aborts the transaction with nothing written.
        """
        try:
            with cls._locks.for_account(account_id):
                with AccountStore.transaction(account_id) as (conn, current):
                    updated = change(current)
                    if updated is None:
                        return current, False
                    updated = updated.model_copy(update={"monthly_fee": cls.calculator.fee_for_account(updated)})
                    if not AccountStore.write_account(updated, expected_version=current.version, conn=conn):
                        raise ConcurrentModification(f"Account {account_id} was modified concurrently")
                    audit_details = {
                        "previous_fee": current.monthly_fee,
                        "monthly_fee": updated.monthly_fee,
                        "additional_service_categories": list(updated.additional_service_categories),
                    }
                    audit_details.update(details or {})
                    AuditService.log(actor, action, "account", account_id, details=audit_details, conn=conn)
                    stored = AccountStore.read_account(account_id, conn=conn)
        except ProDirectoryError as exc:
            logger.warning("Rejected %s on account %s: %s", action, account_id, exc)
            raise
        logger.info(
            "%s on account %s by %s: fee %s -> %s",
            action,
            account_id,
            actor,
            current.monthly_fee,
            stored.monthly_fee,
        )
        return stored, True

    @classmethod
    def create_account(cls, data: AccountCreate, actor: Optional[str] = None) -> ProfessionalAccount:
        """Professional signup: primary category only, fee = base fee."""
        account = ProfessionalAccount(
            username=data.username,
            email=data.email,
            business_name=data.business_name,
            is_professional=True,
            primary_service_category=data.primary_service_category,
            subscription_status=data.subscription_status,
            stripe_customer_id=data.stripe_customer_id,
        )
        return cls._insert(account, "create", actor)

    @classmethod
    def import_account(cls, record: Mapping[str, Any], actor: Optional[str] = None) -> ProfessionalAccount:
        """Store a legacy record (any field spelling) with a freshly computed fee.

        The record's own fee is only kept in the audit trail; the stored
        fee is always derived from the imported categories.
        """
        account = account_from_record(record)
        if not account.username:
            raise InvalidAccountState("Imported account has no username")
        legacy_fee = account.monthly_fee
        account = account.model_copy(update={"id": None, "version": 0, "created_at": None, "updated_at": None})
        return cls._insert(account, "import", actor, details={"legacy_fee": legacy_fee})

    @classmethod
    def _insert(
        cls,
        account: ProfessionalAccount,
        action: str,
        actor: Optional[str],
        details: Optional[Dict[str, Any]] = None,
    ) -> ProfessionalAccount:
        conn = get_connection()
        try:
            account = account.model_copy(update={"monthly_fee": cls.calculator.fee_for_account(account)})
            account_id = AccountStore.create_account(account, conn)
            audit_details = {
                "primary_service_category": account.primary_service_category,
                "additional_service_categories": list(account.additional_service_categories),
                "monthly_fee": account.monthly_fee,
            }
            audit_details.update(details or {})
            AuditService.log(actor, action, "account", account_id, details=audit_details, conn=conn)
            conn.commit()
        except ProDirectoryError as exc:
            conn.rollback()
            logger.warning("Rejected %s of account %s: %s", action, account.username, exc)
            raise
        finally:
            conn.close()
        logger.info("Account %s (%s) stored via %s with fee %s", account_id, account.username, action, account.monthly_fee)
        return AccountStore.read_account(account_id)

    @classmethod
    def get_account(cls, account_id: int) -> ProfessionalAccount:
        return AccountStore.read_account(account_id)

    @classmethod
    def list_accounts(cls, limit: int = 50, offset: int = 0) -> List[ProfessionalAccount]:
        return AccountStore.list_accounts(limit=limit, offset=offset)

    @classmethod
    def add_service(
        cls,
        account_id: int,
        category: str,
        accept_similar: bool = False,
        actor: Optional[str] = None,
    ) -> AddServiceOutcome:
        """Add an additional category and reprice the account.

        Returns an outcome with ``applied=False`` and a warning when the
        category resembles one already listed and ``accept_similar`` is
        false.  Raises ``DuplicateCategory`` for exact duplicates.
        """
        warnings: List[SimilarCategoryWarning] = []

        def change(current: ProfessionalAccount) -> Optional[ProfessionalAccount]:
            result = category_service.add_service(current.category_set, category, accept_similar=accept_similar)
            if isinstance(result, SimilarCategoryWarning):
                warnings.append(result)
                return None
            return current.with_categories(result)

        account, written = cls._commit_change(
            account_id, change, "add_service", actor, details={"category": category.strip()}
        )
        if not written:
            logger.info("Similar category warning on account %s: %s", account_id, warnings[0].message)
            return AddServiceOutcome(account=account, applied=False, warning=warnings[0])
        return AddServiceOutcome(account=account, applied=True, billing_type=billing_type_for(account))

    @classmethod
    def remove_service(cls, account_id: int, category: str, actor: Optional[str] = None) -> ProfessionalAccount:
        """Remove an additional category and reprice the account."""

        def change(current: ProfessionalAccount) -> ProfessionalAccount:
            return current.with_categories(category_service.remove_service(current.category_set, category))

        account, _ = cls._commit_change(
            account_id, change, "remove_service", actor, details={"category": category.strip()}
        )
        return account

    @classmethod
    def set_fee_override(
        cls,
        account_id: int,
        override: Optional[Decimal],
        actor: Optional[str] = None,
    ) -> ProfessionalAccount:
        """Set (or clear with ``None``) special pricing and reprice in the same transaction."""
        if override is not None and not override.is_finite():
            raise InvalidAccountState("Fee override must be a finite amount")
        if override is not None and override < 0:
            raise InvalidAccountState("Fee override cannot be negative")

        def change(current: ProfessionalAccount) -> ProfessionalAccount:
            if not current.is_professional:
                raise InvalidAccountState(f"Account {account_id} is not a professional account")
            return current.model_copy(update={"fee_override": override})

        account, _ = cls._commit_change(
            account_id, change, "set_fee_override", actor, details={"fee_override": override}
        )
        return account

    @classmethod
    def get_fee_breakdown(cls, account_id: int) -> Tuple[ProfessionalAccount, FeeBreakdown]:
        """Live fee breakdown for the stored categories, with the account itself."""
        account = AccountStore.read_account(account_id)
        if not account.is_professional:
            raise InvalidAccountState(f"Account {account_id} is not a professional account")
        return account, cls.calculator.breakdown(account.category_set, account.fee_override)

    @classmethod
    def reconcile_fees(cls, actor: Optional[str] = None) -> List[Dict[str, Any]]:
        """Repair persisted fees that no longer match their categories.

        Each account is re-checked inside its own transaction, so a
        concurrent mutation is never overwritten.  Returns one entry per
        corrected account.
        """
        corrections: List[Dict[str, Any]] = []
        for candidate in AccountStore.list_accounts(professional_only=True):
            if candidate.monthly_fee == cls.calculator.fee_for_account(candidate):
                continue
            previous: List[Optional[Decimal]] = []

            def change(current: ProfessionalAccount) -> Optional[ProfessionalAccount]:
                if current.monthly_fee == cls.calculator.fee_for_account(current):
                    return None
                previous.append(current.monthly_fee)
                return current

            account, written = cls._commit_change(candidate.id, change, "reconcile_fee", actor)
            if written:
                corrections.append(
                    {"account_id": account.id, "previous_fee": previous[0], "monthly_fee": account.monthly_fee}
                )
        if corrections:
            logger.warning("Reconciled %d drifted account fee(s)", len(corrections))
        return corrections
