from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def is_duplicate_key(err: Exception) -> bool:
    """True when MySQL rejected a write because of a UNIQUE/PRIMARY key."""

    return isinstance(err, IntegrityError) and getattr(err, "errno", None) == errorcode.ER_DUP_ENTRY


def in_clause(values: Sequence[Any]) -> str:
    """Placeholder list for `IN (...)`; callers guarantee a non-empty sequence."""

    return ", ".join(["%s"] * len(values))


def is_row_referenced(err: Exception) -> bool:
    """True when a DELETE was blocked by a RESTRICT foreign key."""

    return isinstance(err, IntegrityError) and getattr(err, "errno", None) in (
        errorcode.ER_ROW_IS_REFERENCED,
        errorcode.ER_ROW_IS_REFERENCED_2,
    )
