from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_list, require_non_empty, require_positive_int
from ..core.enums import Action
from ..core.exceptions import (
    AuthorizationError,
    CourseNotFound,
    LecturerNotFound,
    NotFoundError,
    SectionNotFound,
    ValidationError,
)
from ..users.model import Actor
from ..users.policy import AccessPolicy
from ..users.repository import LecturerRepository
from .model import Course, EnrolledStudent, Section
from .repository import CourseRepository, EnrollmentRepository, SectionRepository

logger = logging.getLogger(__name__)


class CourseService:
    def __init__(self, courses: CourseRepository, sections: SectionRepository, enrollments: EnrollmentRepository):
        self._courses = courses
        self._sections = sections
        self._enrollments = enrollments

    def list_courses(self) -> Sequence[Course]:
        return self._courses.list_all()

    def get_course(self, course_code: str) -> Course:
        course = self._courses.get_by_code(str(course_code))
        if not course:
            raise CourseNotFound("Course not found")
        return course

    def create_course(self, *, course_code: str, course_name: str) -> Course:
        course_code = require_non_empty(course_code, "course_code")
        course_name = require_non_empty(course_name, "course_name")
        self._courses.create(course_code=course_code, course_name=course_name)
        logger.info("Created course %s", course_code)
        return Course(course_code=course_code, course_name=course_name)

    def rename_course(self, course_code: str, course_name: str) -> Course:
        course_name = require_non_empty(course_name, "course_name")
        self.get_course(course_code)
        self._courses.update_name(course_code, course_name)
        return Course(course_code=course_code, course_name=course_name)

    def delete_course(self, course_code: str) -> None:
        if not self._courses.delete(course_code):
            raise CourseNotFound("Course not found")
        logger.info("Deleted course %s", course_code)

    def sections_of(self, course_code: str) -> Sequence[Section]:
        self.get_course(course_code)
        return self._sections.list_by_course(course_code)

    def students_of(self, course_code: str) -> Sequence[EnrolledStudent]:
        self.get_course(course_code)
        return self._enrollments.list_students_by_course(course_code)


class SectionService:
    """Sections and their enrollment edges."""

    def __init__(
        self,
        sections: SectionRepository,
        enrollments: EnrollmentRepository,
        courses: CourseRepository,
        lecturers: LecturerRepository,
        policy: AccessPolicy,
    ):
        self._sections = sections
        self._enrollments = enrollments
        self._courses = courses
        self._lecturers = lecturers
        self._policy = policy

    def list_sections(self, actor: Actor) -> Sequence[Section]:
        self._policy.require(actor, Action.MANAGE_CATALOG)
        return self._sections.list_all()

    def get_section(self, section_id: int) -> Section:
        section = self._sections.get_by_id(int(section_id))
        if not section:
            raise SectionNotFound("Section not found")
        return section

    def sections_for_lecturer(self, actor: Actor, lecturer_id: int) -> Sequence[Section]:
        self._policy.require(actor, Action.VIEW_LECTURER_REPORTS, lecturer_id)
        return self._sections.list_by_lecturer(int(lecturer_id))

    def sections_for_student(self, student_id: str) -> Sequence[Section]:
        return self._enrollments.list_sections_for_student(str(student_id))

    def create_section(self, actor: Actor, *, section_name: str, course_code: str, lecturer_id: Optional[int] = None) -> Section:
        section_name = require_non_empty(section_name, "section_name")
        course_code = require_non_empty(course_code, "course_code")

        if actor.is_admin:
            lecturer_id = require_positive_int(lecturer_id, "lecturer_id")
        elif actor.is_lecturer:
            # Lecturers may only open sections for themselves.
            if lecturer_id is not None and str(lecturer_id) != actor.user_id:
                raise AuthorizationError("Lecturers can only create their own sections")
            lecturer_id = int(actor.user_id)
        else:
            raise AuthorizationError("You do not have permission to perform this action")

        if not self._courses.get_by_code(course_code):
            raise CourseNotFound("Course not found")
        if not self._lecturers.get_by_id(lecturer_id):
            raise LecturerNotFound("Lecturer not found")

        section_id = self._sections.create(section_name=section_name, course_code=course_code, lecturer_id=lecturer_id)
        logger.info("Created section %s (%s) for lecturer %s", section_id, course_code, lecturer_id)
        return self.get_section(section_id)

    def update_section(self, actor: Actor, section_id: int, data: dict) -> Section:
        self._policy.require(actor, Action.MANAGE_SECTION, section_id)
        fields = {}
        if "section_name" in data:
            fields["section_name"] = require_non_empty(data["section_name"], "section_name")
        if "course_code" in data:
            course_code = require_non_empty(data["course_code"], "course_code")
            if not self._courses.get_by_code(course_code):
                raise CourseNotFound("Course not found")
            fields["course_code"] = course_code
        if "lecturer_id" in data:
            if not actor.is_admin:
                raise AuthorizationError("Only administrators can reassign a section")
            fields["lecturer_id"] = require_positive_int(data["lecturer_id"], "lecturer_id")
        if not fields:
            raise ValidationError("No fields to update")

        self._sections.update(int(section_id), fields)
        return self.get_section(section_id)

    def delete_section(self, actor: Actor, section_id: int) -> None:
        self._policy.require(actor, Action.MANAGE_CATALOG)
        if not self._sections.delete(int(section_id)):
            raise SectionNotFound("Section not found")
        logger.info("Deleted section %s", section_id)

    def list_students(self, actor: Actor, section_id: int) -> Sequence[EnrolledStudent]:
        self._policy.require(actor, Action.VIEW_SECTION_ATTENDANCE, section_id)
        return self._enrollments.list_students(int(section_id))

    def enroll(self, actor: Actor, section_id: int, student_id: str) -> bool:
        self._policy.require(actor, Action.MANAGE_ENROLLMENT, section_id)
        student_id = require_non_empty(student_id, "student_id")
        added = self._enrollments.add(int(section_id), student_id)
        if not added:
            logger.info("Student %s already enrolled in section %s", student_id, section_id)
        return added

    def enroll_many(self, actor: Actor, section_id: int, student_ids) -> int:
        self._policy.require(actor, Action.MANAGE_ENROLLMENT, section_id)
        ids = [require_non_empty(s, "student_ids") for s in require_list(student_ids, "student_ids")]
        return self._enrollments.add_many(int(section_id), ids)

    def unenroll(self, actor: Actor, section_id: int, student_id: str) -> None:
        self._policy.require(actor, Action.MANAGE_ENROLLMENT, section_id)
        if not self._enrollments.remove(int(section_id), str(student_id)):
            raise NotFoundError("Student is not enrolled in this section")

    def unenroll_many(self, actor: Actor, section_id: int, student_ids) -> int:
        self._policy.require(actor, Action.MANAGE_ENROLLMENT, section_id)
        ids = [require_non_empty(s, "student_ids") for s in require_list(student_ids, "student_ids")]
        return self._enrollments.remove_many(int(section_id), ids)
