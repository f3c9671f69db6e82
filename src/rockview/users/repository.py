from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Assignment, User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_many(self, user_ids: Iterable[int]) -> Sequence[User]:
        raise NotImplementedError

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
        raise NotImplementedError

    def update_profile(self, user_id: int, *, name: str, phone: str) -> bool:
        raise NotImplementedError

    def update_password(self, user_id: int, *, password_hash: str) -> bool:
        raise NotImplementedError

    def assign_role(self, user_id: int, *, role: Role, assignment: Assignment) -> bool:
        """Set the role and replace every hierarchy reference column."""

        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def list_by_role(self, role: Role) -> Sequence[User]:
        raise NotImplementedError

    def list_seat_holders(self, role: Role, target_id: int) -> Sequence[User]:
        """Users of ``role`` whose hierarchy reference equals ``target_id``."""

        raise NotImplementedError

    def list_in_hierarchy(
        self,
        *,
        district_ids: Iterable[int] = (),
        zonal_supervisor_ids: Iterable[int] = (),
        area_supervisor_ids: Iterable[int] = (),
        cith_centre_ids: Iterable[int] = (),
    ) -> Sequence[User]:
        """Users referencing any of the given ids (OR across columns)."""

        raise NotImplementedError
