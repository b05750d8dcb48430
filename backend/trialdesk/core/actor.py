"""The authenticated user performing an operation."""

from dataclasses import dataclass

from .enums import RoleName


@dataclass(frozen=True)
class Actor:
    """
    Identity and role supplied by the authentication layer.

    Services take an Actor explicitly instead of reading request state.
    """

    user_id: str
    role: RoleName

    @property
    def is_staff(self) -> bool:
        return self.role in (RoleName.ADMIN, RoleName.SUPERVISOR)

    def is_teacher(self, teacher_id: str) -> bool:
        return self.role == RoleName.TEACHER and self.user_id == teacher_id
