from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Student:
    student_id: str
    name: str
    email: str
    password_hash: str = ""

    def to_dict(self) -> dict:
        return {"student_id": self.student_id, "name": self.name, "email": self.email}


@dataclass(frozen=True)
class Lecturer:
    """Teaching staff; administrators are lecturers flagged with is_admin."""

    lecturer_id: int
    name: str
    email: str
    password_hash: str = ""
    is_admin: bool = False

    def to_dict(self) -> dict:
        return {
            "lecturer_id": self.lecturer_id,
            "name": self.name,
            "email": self.email,
            "is_admin": self.is_admin,
        }


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, decoded from the access token."""

    user_id: str
    role: Role
    email: Optional[str] = None
    name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_lecturer(self) -> bool:
        return self.role == Role.LECTURER

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT

    @property
    def user_type(self) -> str:
        # Admins are stored as lecturers.
        return Role.STUDENT.value if self.is_student else Role.LECTURER.value

    def to_dict(self) -> dict:
        return {"id": self.user_id, "role": self.role.value, "email": self.email, "name": self.name}
