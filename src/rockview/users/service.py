from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..access.policy import VisibilityPolicy
from ..common.validators import require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH, MIN_PHONE_LENGTH
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from .model import User
from .repository import UserRepository
from .seats import SeatRules

logger = logging.getLogger(__name__)


def _normalize_email(email: Optional[str]) -> str:
    email = require_non_empty(email, "Email").lower()
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        raise ValidationError("Email is invalid")
    return email


def _phone(phone: Optional[str]) -> str:
    phone = require_non_empty(phone, "Phone")
    if len(phone) < MIN_PHONE_LENGTH:
        raise ValidationError(f"Phone must be at least {MIN_PHONE_LENGTH} characters long")
    return phone


class AuthService:
    """Use cases: register and authenticate."""

    def __init__(self, users: UserRepository, seats: SeatRules):
        self._users = users
        self._seats = seats

    def register(
        self,
        *,
        email: Optional[str],
        password: Optional[str],
        name: Optional[str],
        phone: Optional[str],
        role: Role,
        target_id: Optional[int],
    ) -> User:
        email = _normalize_email(email)
        name = require_non_empty(name, "Name")
        phone = _phone(phone)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be self-registered")
        if self._users.get_by_email(email):
            raise ConflictError("Email already in use")

        assignment = self._seats.claim(role, target_id)
        user_id = self._users.create_user(
            email=email,
            password_hash=generate_password_hash(password),
            name=name,
            phone=phone,
            role=role,
            assignment=assignment,
        )
        logger.info("Registered user %s as %s", user_id, role.value)
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def authenticate(self, email: Optional[str], password: Optional[str]) -> User:
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self._users.get_by_email(email.strip())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # placeholder or corrupted hash values
            ok = False
        if not ok:
            raise AuthenticationError("Invalid email or password")
        return user


class UserService:
    """Use cases: profile, account and user management."""

    def __init__(self, users: UserRepository, seats: SeatRules, policy: VisibilityPolicy):
        self._users = users
        self._seats = seats
        self._policy = policy

    def get(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user: User, *, name: Optional[str], phone: Optional[str]) -> User:
        new_name = require_non_empty(name, "Name") if name is not None else user.name
        new_phone = _phone(phone) if phone is not None else user.phone
        self._users.update_profile(user.user_id, name=new_name, phone=new_phone)
        return self.get(user.user_id)

    def change_password(self, user: User, *, current_password: Optional[str], new_password: Optional[str]) -> None:
        if not current_password or not check_password_hash(user.password_hash, current_password):
            raise AuthenticationError("Current password is incorrect")
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)
        self._users.update_password(user.user_id, password_hash=generate_password_hash(new_password))

    def _ensure_not_last_admin(self, user: User) -> None:
        if user.is_admin and len(self._users.list_by_role(Role.ADMIN)) <= 1:
            raise ConflictError("The last admin account cannot be deleted")

    def delete_account(self, user: User) -> None:
        self._ensure_not_last_admin(user)
        self._users.delete_by_id(user.user_id)
        logger.info("User %s deleted their account", user.user_id)

    # -------- admin --------
    def list_all(self, admin: User) -> Sequence[User]:
        if not admin.is_admin:
            raise AuthorizationError("Only admins can list all users")
        return self._users.list_all()

    def list_hierarchy(self, actor: User) -> List[User]:
        """Users whose slot falls inside the actor's visible scope."""
        if actor.is_admin:
            return list(self._users.list_all())
        scope = self._policy.scope_for(actor)
        found = self._users.list_in_hierarchy(
            district_ids=scope.district_ids,
            zonal_supervisor_ids=scope.zone_ids,
            area_supervisor_ids=scope.area_ids,
            cith_centre_ids=scope.centre_ids,
        )
        return [u for u in found if u.user_id != actor.user_id]

    def delete_user(self, admin: User, user_id: int) -> None:
        if not admin.is_admin:
            raise AuthorizationError("Only admins can delete users")
        if user_id == admin.user_id:
            raise ValidationError("You cannot delete your own account from user management")
        target = self.get(user_id)
        self._ensure_not_last_admin(target)
        self._users.delete_by_id(target.user_id)
        logger.info("Admin %s deleted user %s", admin.user_id, target.user_id)

    def update_role(self, admin: User, user_id: int, *, role: Role, target_id: Optional[int]) -> User:
        if not admin.is_admin:
            raise AuthorizationError("Only admins can change roles")
        target = self.get(user_id)
        if target.is_admin and role != Role.ADMIN and len(self._users.list_by_role(Role.ADMIN)) <= 1:
            raise ConflictError("The last admin cannot be demoted")

        assignment = self._seats.claim(role, target_id, exclude_user_id=target.user_id)
        self._users.assign_role(target.user_id, role=role, assignment=assignment)
        logger.info("Admin %s moved user %s to %s #%s", admin.user_id, target.user_id, role.value, target_id)
        return self.get(target.user_id)
