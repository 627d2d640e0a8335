from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Course, EnrolledStudent, Section


class CourseRepository(Protocol):
    def list_all(self) -> Sequence[Course]:
        raise NotImplementedError

    def get_by_code(self, course_code: str) -> Optional[Course]:
        raise NotImplementedError

    def create(self, *, course_code: str, course_name: str) -> None:
        raise NotImplementedError

    def update_name(self, course_code: str, course_name: str) -> bool:
        raise NotImplementedError

    def delete(self, course_code: str) -> bool:
        raise NotImplementedError


class SectionRepository(Protocol):
    def list_all(self) -> Sequence[Section]:
        raise NotImplementedError

    def get_by_id(self, section_id: int) -> Optional[Section]:
        raise NotImplementedError

    def list_by_course(self, course_code: str) -> Sequence[Section]:
        raise NotImplementedError

    def list_by_lecturer(self, lecturer_id: int) -> Sequence[Section]:
        """Sections taught by a lecturer, with enrolled student counts."""

        raise NotImplementedError

    def lecturer_teaches_course(self, lecturer_id: int, course_code: str) -> bool:
        raise NotImplementedError

    def create(self, *, section_name: str, course_code: str, lecturer_id: int) -> int:
        raise NotImplementedError

    def update(self, section_id: int, fields: dict) -> bool:
        raise NotImplementedError

    def delete(self, section_id: int) -> bool:
        raise NotImplementedError


class EnrollmentRepository(Protocol):
    def is_enrolled(self, section_id: int, student_id: str) -> bool:
        raise NotImplementedError

    def list_students(self, section_id: int) -> Sequence[EnrolledStudent]:
        raise NotImplementedError

    def list_students_by_course(self, course_code: str) -> Sequence[EnrolledStudent]:
        raise NotImplementedError

    def list_sections_for_student(self, student_id: str) -> Sequence[Section]:
        raise NotImplementedError

    def add(self, section_id: int, student_id: str) -> bool:
        """Returns False when the student was already enrolled."""

        raise NotImplementedError

    def add_many(self, section_id: int, student_ids: Sequence[str]) -> int:
        raise NotImplementedError

    def remove(self, section_id: int, student_id: str) -> bool:
        raise NotImplementedError

    def remove_many(self, section_id: int, student_ids: Sequence[str]) -> int:
        raise NotImplementedError
