"""
SQLite-backed store for professional accounts.

This is the only module that knows the ``professional_accounts`` column
layout.  Rows are converted to :class:`ProfessionalAccount` with
``account_from_record`` on the way out and serialized (sorted JSON
category list, fees as decimal strings) on the way in.  Category
invariants are checked on every write, not only when displaying.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator, List, Optional, Tuple

from ..core.db import get_connection
from ..core.exceptions import AccountNotFound, DuplicateAccount
from ..schemas.account import ProfessionalAccount, account_from_record

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, username, email, business_name, is_professional, primary_service_category, "
    "additional_service_categories, monthly_fee, fee_override, subscription_status, "
    "stripe_customer_id, version, created_at, updated_at"
)


def _money(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)


def _check_invariants(account: ProfessionalAccount) -> None:
    if account.is_professional:
        account.category_set.validate()


class AccountStore:
    """Read/write access to stored accounts."""

    @staticmethod
    def _fetch(conn: sqlite3.Connection, account_id: int) -> ProfessionalAccount:
        row = conn.execute(
            f"SELECT {_COLUMNS} FROM professional_accounts WHERE id = ?", (account_id,)
        ).fetchone()
        if not row:
            raise AccountNotFound(account_id)
        return account_from_record(dict(row))

    @classmethod
    def read_account(cls, account_id: int, conn: Optional[sqlite3.Connection] = None) -> ProfessionalAccount:
        """Return the stored account or raise ``AccountNotFound``."""
        if conn is not None:
            return cls._fetch(conn, account_id)
        own_conn = get_connection()
        try:
            return cls._fetch(own_conn, account_id)
        finally:
            own_conn.close()

    @classmethod
    def list_accounts(
        cls,
        limit: Optional[int] = None,
        offset: int = 0,
        professional_only: bool = False,
    ) -> List[ProfessionalAccount]:
        query = f"SELECT {_COLUMNS} FROM professional_accounts"
        params: list = []
        if professional_only:
            query += " WHERE is_professional = 1"
        query += " ORDER BY id"
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])
        conn = get_connection()
        try:
            rows = conn.execute(query, tuple(params)).fetchall()
        finally:
            conn.close()
        return [account_from_record(dict(row)) for row in rows]

    @classmethod
    def create_account(cls, account: ProfessionalAccount, conn: sqlite3.Connection) -> int:
        """Insert ``account`` on ``conn`` (not committed) and return its id."""
        _check_invariants(account)
        try:
            cursor = conn.execute(
                """
                INSERT INTO professional_accounts (
                    username, email, business_name, is_professional, primary_service_category,
                    additional_service_categories, monthly_fee, fee_override, subscription_status,
                    stripe_customer_id
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    account.username,
                    account.email,
                    account.business_name,
                    1 if account.is_professional else 0,
                    account.primary_service_category,
                    json.dumps(list(account.additional_service_categories)),
                    _money(account.monthly_fee),
                    _money(account.fee_override),
                    account.subscription_status,
                    account.stripe_customer_id,
                ),
            )
        except sqlite3.IntegrityError:
            raise DuplicateAccount(account.username)
        return cursor.lastrowid

    @classmethod
    def write_account(
        cls,
        account: ProfessionalAccount,
        expected_version: int,
        conn: sqlite3.Connection,
    ) -> bool:
        """Update the stored row if its version is still ``expected_version``.

        Returns ``False`` (and writes nothing) when another writer got
        there first.  Categories and fee are written in one statement.
        """
        _check_invariants(account)
        cursor = conn.execute(
            """
            UPDATE professional_accounts
               SET email = ?, business_name = ?, is_professional = ?, primary_service_category = ?,
                   additional_service_categories = ?, monthly_fee = ?, fee_override = ?,
                   subscription_status = ?, stripe_customer_id = ?,
                   version = version + 1, updated_at = CURRENT_TIMESTAMP
             WHERE id = ? AND version = ?
            """,
            (
                account.email,
                account.business_name,
                1 if account.is_professional else 0,
                account.primary_service_category,
                json.dumps(list(account.additional_service_categories)),
                _money(account.monthly_fee),
                _money(account.fee_override),
                account.subscription_status,
                account.stripe_customer_id,
                account.id,
                expected_version,
            ),
        )
        if cursor.rowcount != 1:
            logger.debug("Version check failed for account %s (expected %s)", account.id, expected_version)
            return False
        return True

    @classmethod
    @contextmanager
    def transaction(cls, account_id: int) -> Iterator[Tuple[sqlite3.Connection, ProfessionalAccount]]:
        """Open a write transaction and yield ``(conn, current_account)``.

        ``BEGIN IMMEDIATE`` takes the database write lock up front, so no
        other writer can change the account between this read and the
        caller's write.  Commits on normal exit, rolls back on error.
        """
        conn = get_connection()
        try:
            conn.execute("BEGIN IMMEDIATE")
            account = cls._fetch(conn, account_id)
            yield conn, account
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
