from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

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


def in_clause(column: str, values: Iterable[Any]) -> Tuple[str, List[Any]]:
    """Build ``column IN (%s,...)`` for a non-empty value set, or an always-false clause."""
    params = list(values)
    if not params:
        return "1=0", []
    placeholders = ",".join(["%s"] * len(params))
    return f"{column} IN ({placeholders})", params


def where(clauses: Sequence[str]) -> str:
    return " AND ".join(clauses) if clauses else "1=1"
