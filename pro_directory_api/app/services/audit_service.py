"""
Audit service for recording and querying account changes.

Mutations pass their open connection to :meth:`AuditService.log` so the
audit row commits or rolls back together with the change it describes.
"""

from __future__ import annotations

import json
import sqlite3
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..core.db import get_connection


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class AuditService:
    """Writes and reads rows of the ``audit_logs`` table."""

    @classmethod
    def log(
        cls,
        actor: Optional[str],
        action: str,
        object_type: str,
        object_id: Optional[int] = None,
        details: Optional[dict] = None,
        conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        """Insert an audit record.

        Parameters
        ----------
        actor : Optional[str]
            Who performed the action (token subject); ``None`` for the system.
        action : str
            Short verb, e.g. ``"add_service"`` or ``"reconcile_fee"``.
        object_type : str
            Kind of object affected, e.g. ``"account"``.
        object_id : Optional[int]
            Primary key of the affected object.
        details : Optional[dict]
            Extra structured data, stored as JSON (decimals as strings).
        conn : Optional[sqlite3.Connection]
            Connection of an open transaction.  When given, the row is
            written on it and not committed here.
        """
        details_json = json.dumps(details, default=_json_default, sort_keys=True) if details else None
        params = (actor, action, object_type, object_id, details_json)
        sql = "INSERT INTO audit_logs (actor, action, object_type, object_id, details) VALUES (?, ?, ?, ?, ?)"
        if conn is not None:
            conn.execute(sql, params)
            return
        own_conn = get_connection()
        try:
            own_conn.execute(sql, params)
            own_conn.commit()
        finally:
            own_conn.close()

    @classmethod
    def list_logs(
        cls,
        object_type: Optional[str] = None,
        object_id: Optional[int] = None,
        action: Optional[str] = None,
        actor: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """Audit records matching the filters, newest first."""
        where_clauses: List[str] = []
        params: List[Any] = []
        if object_type:
            where_clauses.append("object_type = ?")
            params.append(object_type)
        if object_id is not None:
            where_clauses.append("object_id = ?")
            params.append(object_id)
        if action:
            where_clauses.append("action = ?")
            params.append(action)
        if actor:
            where_clauses.append("actor = ?")
            params.append(actor)
        query = "SELECT id, actor, action, object_type, object_id, timestamp, details FROM audit_logs"
        if where_clauses:
            query += " WHERE " + " AND ".join(where_clauses)
        query += " ORDER BY id DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        conn = get_connection()
        try:
            rows = conn.execute(query, tuple(params)).fetchall()
        finally:
            conn.close()
        logs = []
        for row in rows:
            logs.append(
                {
                    "id": row["id"],
                    "actor": row["actor"],
                    "action": row["action"],
                    "object_type": row["object_type"],
                    "object_id": row["object_id"],
                    "timestamp": row["timestamp"],
                    "details": json.loads(row["details"]) if row["details"] else None,
                }
            )
        return logs
