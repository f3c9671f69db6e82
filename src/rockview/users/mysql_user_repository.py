from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import ROLE_REFERENCE_FIELD, Assignment, User
from .repository import UserRepository

_COLUMNS = (
    "user_id, email, password_hash, name, phone, role, "
    "district_id, zonal_supervisor_id, area_supervisor_id, cith_centre_id, is_active, created_at"
)


def _user(r: dict) -> User:
    def ref(key: str) -> Optional[int]:
        v = r.get(key)
        return int(v) if v is not None else None

    return User(
        user_id=int(r["user_id"]),
        email=r["email"],
        password_hash=r["password_hash"],
        name=r["name"],
        phone=r.get("phone") or "",
        role=Role(r["role"]),
        district_id=ref("district_id"),
        zonal_supervisor_id=ref("zonal_supervisor_id"),
        area_supervisor_id=ref("area_supervisor_id"),
        cith_centre_id=ref("cith_centre_id"),
        is_active=bool(r.get("is_active", True)),
        created_at=r.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE LOWER(email)=LOWER(%s)", (email,))
            row = fetchone(cur)
            return _user(row) if row else None

    def get_many(self, user_ids: Iterable[int]) -> Sequence[User]:
        ids_sql, params = in_clause("user_id", sorted({int(u) for u in user_ids}))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {ids_sql}", tuple(params))
            return [_user(r) for r in fetchall(cur)]

    def create_user(
        self,
        *,
        email: str,
        password_hash: str,
        name: str,
        phone: str,
        role: Role,
        assignment: Assignment,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(email, password_hash, name, phone, role,
                                  district_id, zonal_supervisor_id, area_supervisor_id, cith_centre_id, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (
                    email,
                    password_hash,
                    name,
                    phone,
                    role.value,
                    assignment.district_id,
                    assignment.zonal_supervisor_id,
                    assignment.area_supervisor_id,
                    assignment.cith_centre_id,
                ),
            )
            return int(cur.lastrowid)

    def update_profile(self, user_id: int, *, name: str, phone: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET name=%s, phone=%s WHERE user_id=%s", (name, phone, int(user_id)))
            return cur.rowcount >= 0

    def update_password(self, user_id: int, *, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET password_hash=%s WHERE user_id=%s", (password_hash, int(user_id)))
            return cur.rowcount > 0

    def assign_role(self, user_id: int, *, role: Role, assignment: Assignment) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET role=%s, district_id=%s, zonal_supervisor_id=%s, area_supervisor_id=%s, cith_centre_id=%s
                WHERE user_id=%s
                """,
                (
                    role.value,
                    assignment.district_id,
                    assignment.zonal_supervisor_id,
                    assignment.area_supervisor_id,
                    assignment.cith_centre_id,
                    int(user_id),
                ),
            )
            return cur.rowcount >= 0

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (int(user_id),))
            return cur.rowcount > 0

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY created_at DESC, user_id DESC")
            return [_user(r) for r in fetchall(cur)]

    def list_by_role(self, role: Role) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE role=%s ORDER BY user_id", (role.value,))
            return [_user(r) for r in fetchall(cur)]

    def list_seat_holders(self, role: Role, target_id: int) -> Sequence[User]:
        column = ROLE_REFERENCE_FIELD.get(role)
        if not column:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users WHERE role=%s AND {column}=%s ORDER BY user_id",
                (role.value, int(target_id)),
            )
            return [_user(r) for r in fetchall(cur)]

    def list_in_hierarchy(
        self,
        *,
        district_ids: Iterable[int] = (),
        zonal_supervisor_ids: Iterable[int] = (),
        area_supervisor_ids: Iterable[int] = (),
        cith_centre_ids: Iterable[int] = (),
    ) -> Sequence[User]:
        ors: list[str] = []
        params: list[object] = []
        for column, ids in (
            ("district_id", district_ids),
            ("zonal_supervisor_id", zonal_supervisor_ids),
            ("area_supervisor_id", area_supervisor_ids),
            ("cith_centre_id", cith_centre_ids),
        ):
            ids = [int(i) for i in ids]
            if ids:
                clause, p = in_clause(column, ids)
                ors.append(clause)
                params.extend(p)
        if not ors:
            return []

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users WHERE {' OR '.join(ors)} ORDER BY name",
                tuple(params),
            )
            return [_user(r) for r in fetchall(cur)]
