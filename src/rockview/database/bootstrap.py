from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _run_sql_file(db_config: dict, path: str | Path) -> None:
    target = DBConfig.from_dict(db_config)
    sql = _strip_comments(_strip_create_db_and_use(Path(path).read_text(encoding="utf-8")))

    conn = _connect(target)
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _run_sql_file(db_config, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _run_sql_file(db_config, seed_path)


def ensure_demo_users(db_config: dict) -> None:
    """Create one demo account per role on top of seed.sql's hierarchy."""
    target = DBConfig.from_dict(db_config)

    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)

        def get_id(sql: str, value) -> int:
            cur.execute(sql, (value,))
            row = cur.fetchone()
            if not row:
                raise RuntimeError(f"Missing seed row for {value!r}; run seed.sql first")
            return int(row["id"])

        district_id = get_id("SELECT district_id AS id FROM districts WHERE district_number=%s", 1)
        area_id = get_id("SELECT area_supervisor_id AS id FROM area_supervisors WHERE name=%s", "Ajah Area")
        centre_id = get_id("SELECT cith_centre_id AS id FROM cith_centres WHERE name=%s", "Abraham Adesanya Centre")

        def upsert_user(name: str, email: str, password: str, role: str, column: str | None, ref_id: int | None) -> None:
            password_hash = generate_password_hash(password)
            refs = {"district_id": None, "area_supervisor_id": None, "cith_centre_id": None}
            if column:
                refs[column] = ref_id
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            existing = cur.fetchone()
            if existing:
                cur.execute(
                    """
                    UPDATE users
                    SET name=%s, password_hash=%s, role=%s,
                        district_id=%s, area_supervisor_id=%s, cith_centre_id=%s, is_active=1
                    WHERE email=%s
                    """,
                    (name, password_hash, role, refs["district_id"], refs["area_supervisor_id"], refs["cith_centre_id"], email),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO users (name, email, phone, password_hash, role,
                                       district_id, area_supervisor_id, cith_centre_id)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    (name, email, "08000000000", password_hash, role,
                     refs["district_id"], refs["area_supervisor_id"], refs["cith_centre_id"]),
                )

        upsert_user("Admin Demo", "admin@rockview.local", "admin123", "admin", None, None)
        upsert_user("Pastor Demo", "pastor@rockview.local", "pastor123", "district_pastor", "district_id", district_id)
        upsert_user("Area Demo", "area@rockview.local", "area123", "area_supervisor", "area_supervisor_id", area_id)
        upsert_user("Leader Demo", "leader@rockview.local", "leader123", "cith_centre", "cith_centre_id", centre_id)

        conn.commit()
        logger.info("demo users ready")
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
