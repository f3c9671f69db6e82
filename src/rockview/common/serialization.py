from __future__ import annotations

import dataclasses
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable

from ..common.pagination import Page
from ..users.model import User


def to_jsonable(value: Any, *, exclude: Iterable[str] = ()) -> Any:
    """Turn dataclasses, enums, dates and decimals into JSON-ready values."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        skip = set(exclude)
        return {
            f.name: to_jsonable(getattr(value, f.name))
            for f in dataclasses.fields(value)
            if f.name not in skip
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (frozenset, set)):
        return sorted(to_jsonable(v) for v in value)
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    return value


def user_dict(user: User) -> dict:
    return to_jsonable(user, exclude=("password_hash",))


def user_brief(user: User) -> dict:
    return {"user_id": user.user_id, "name": user.name, "email": user.email, "phone": user.phone, "role": user.role.value}


def page_dict(page: Page, key: str, item) -> dict:
    return {
        key: [item(x) for x in page.items],
        "total": page.total,
        "current_page": page.page,
        "total_pages": page.total_pages,
        "limit": page.limit,
    }
