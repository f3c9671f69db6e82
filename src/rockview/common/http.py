"""Request helpers shared by the controllers."""

from __future__ import annotations

from enum import Enum
from functools import wraps
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from flask import current_app, g, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from .datetime_utils import parse_optional_date
from .pagination import PageRequest
from .validators import optional_id, parse_enum

E = TypeVar("E", bound=Enum)


def auth_guard(users: UserRepository) -> Callable[..., Callable]:
    """Build a ``roles_required(*roles)`` decorator bound to a user store.

    The caller is re-read from the store on every request so role and
    hierarchy changes apply immediately.
    """

    def roles_required(*roles: Role):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                verify_jwt_in_request()
                try:
                    user_id = int(get_jwt_identity())
                except (TypeError, ValueError):
                    raise AuthenticationError("Invalid token")
                user = users.get_by_id(user_id)
                if not user or not user.is_active:
                    raise AuthenticationError("User no longer exists or is inactive")
                if roles and user.role not in roles:
                    raise AuthorizationError(f"User role {user.role.value} is not authorized to access this route")
                g.current_user = user
                return view(*args, **kwargs)

            return wrapper

        return decorator

    return roles_required


def current_user() -> User:
    return g.current_user


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def arg_date(name: str):
    return parse_optional_date(request.args.get(name))


def arg_id(name: str) -> Optional[int]:
    return optional_id(request.args.get(name), name)


def arg_enum(enum_cls: Type[E], name: str) -> Optional[E]:
    raw = request.args.get(name)
    if not raw:
        return None
    return parse_enum(enum_cls, raw, name)


def arg_flag(name: str) -> bool:
    return (request.args.get(name) or "").strip().lower() in ("1", "true", "yes", "on")


def page_request(default_limit: Optional[int] = None) -> PageRequest:
    cfg = current_app.config
    return PageRequest.parse(
        request.args.get("page"),
        request.args.get("limit"),
        default_limit=default_limit or cfg.get("DEFAULT_PAGE_SIZE", 10),
        max_limit=cfg.get("MAX_PAGE_SIZE", 100),
    )
