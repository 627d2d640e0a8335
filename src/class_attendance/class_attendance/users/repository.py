from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Lecturer, Student


class StudentRepository(Protocol):
    def list_all(self) -> Sequence[Student]:
        raise NotImplementedError

    def get_by_id(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Student]:
        raise NotImplementedError

    def create(self, *, student_id: str, name: str, email: str, password_hash: str) -> None:
        raise NotImplementedError

    def update(self, student_id: str, fields: dict) -> bool:
        raise NotImplementedError

    def delete(self, student_id: str) -> bool:
        raise NotImplementedError

    def is_enrolled_in_course(self, student_id: str, course_code: str) -> bool:
        """True when the student is in any section of the course."""

        raise NotImplementedError


class LecturerRepository(Protocol):
    def list_all(self) -> Sequence[Lecturer]:
        raise NotImplementedError

    def get_by_id(self, lecturer_id: int) -> Optional[Lecturer]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Lecturer]:
        raise NotImplementedError

    def create(self, *, name: str, email: str, password_hash: str, is_admin: bool) -> int:
        raise NotImplementedError

    def update(self, lecturer_id: int, fields: dict) -> bool:
        raise NotImplementedError

    def delete(self, lecturer_id: int) -> bool:
        raise NotImplementedError
