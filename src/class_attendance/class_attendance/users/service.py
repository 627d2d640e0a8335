from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, LecturerNotFound, StudentNotFound, ValidationError
from .model import Actor, Lecturer, Student
from .repository import LecturerRepository, StudentRepository
from .tokens import JwtCodec

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _password_ok(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password)
    except (ValueError, TypeError):
        # e.g. placeholder or corrupted hashes
        return False


class AuthService:
    """Use case: log in by email and verify access tokens."""

    def __init__(self, students: StudentRepository, lecturers: LecturerRepository, codec: JwtCodec):
        self._students = students
        self._lecturers = lecturers
        self._codec = codec

    def login(self, email: str, password: str) -> Tuple[str, Actor]:
        email = require_non_empty(email, "email")
        password = require_non_empty(password, "password")

        # Students first, then lecturers (admins are lecturers with is_admin).
        actor: Optional[Actor] = None
        student = self._students.get_by_email(email)
        if student and _password_ok(student.password_hash, password):
            actor = Actor(user_id=student.student_id, role=Role.STUDENT, email=student.email, name=student.name)
        else:
            lecturer = None if student else self._lecturers.get_by_email(email)
            if lecturer and _password_ok(lecturer.password_hash, password):
                actor = Actor(
                    user_id=str(lecturer.lecturer_id),
                    role=Role.ADMIN if lecturer.is_admin else Role.LECTURER,
                    email=lecturer.email,
                    name=lecturer.name,
                )

        if actor is None:
            logger.info("Failed login for %s", email)
            raise AuthenticationError("Invalid email or password")

        logger.info("User %s logged in as %s", actor.user_id, actor.role.value)
        return self._codec.encode(actor), actor

    def verify(self, token: str) -> Actor:
        if not token:
            raise AuthenticationError("Access token required")
        return self._codec.decode(token)

    def profile(self, actor: Actor) -> dict:
        """Fresh account data for the token holder (no password hash)."""

        if actor.is_student:
            student = self._students.get_by_id(actor.user_id)
            if not student:
                raise StudentNotFound("User not found")
            return {**student.to_dict(), "role": actor.role.value}

        lecturer = self._lecturers.get_by_id(int(actor.user_id))
        if not lecturer:
            raise LecturerNotFound("User not found")
        role = Role.ADMIN if lecturer.is_admin else Role.LECTURER
        return {**lecturer.to_dict(), "role": role.value}


class StudentService:
    """Use case: manage student accounts (admin)."""

    def __init__(self, students: StudentRepository):
        self._students = students

    def list_students(self) -> Sequence[Student]:
        return self._students.list_all()

    def get_student(self, student_id: str) -> Student:
        student = self._students.get_by_id(str(student_id))
        if not student:
            raise StudentNotFound("Student not found")
        return student

    def create_student(self, *, student_id: str, name: str, email: str, password: str) -> Student:
        student_id = require_non_empty(student_id, "student_id")
        name = require_non_empty(name, "name")
        email = require_non_empty(email, "email")
        require_min_length(password or "", "password", MIN_PASSWORD_LENGTH)

        self._students.create(
            student_id=student_id,
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
        )
        logger.info("Created student %s", student_id)
        return self.get_student(student_id)

    def update_student(self, student_id: str, data: dict) -> Student:
        fields = {}
        for key in ("name", "email"):
            if key in data:
                fields[key] = require_non_empty(data[key], key)
        if data.get("password"):
            require_min_length(data["password"], "password", MIN_PASSWORD_LENGTH)
            fields["password_hash"] = generate_password_hash(data["password"])
        if not fields:
            raise ValidationError("No fields to update")

        self.get_student(student_id)
        self._students.update(str(student_id), fields)
        return self.get_student(student_id)

    def delete_student(self, student_id: str) -> None:
        if not self._students.delete(str(student_id)):
            raise StudentNotFound("Student not found")
        logger.info("Deleted student %s", student_id)


class LecturerService:
    """Use case: manage lecturer accounts (admin)."""

    def __init__(self, lecturers: LecturerRepository):
        self._lecturers = lecturers

    def list_lecturers(self) -> Sequence[Lecturer]:
        return self._lecturers.list_all()

    def get_lecturer(self, lecturer_id: int) -> Lecturer:
        lecturer = self._lecturers.get_by_id(int(lecturer_id))
        if not lecturer:
            raise LecturerNotFound("Lecturer not found")
        return lecturer

    def create_lecturer(self, *, name: str, email: str, password: str, is_admin: bool = False) -> Lecturer:
        name = require_non_empty(name, "name")
        email = require_non_empty(email, "email")
        require_min_length(password or "", "password", MIN_PASSWORD_LENGTH)

        lecturer_id = self._lecturers.create(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            is_admin=bool(is_admin),
        )
        logger.info("Created lecturer %s (admin=%s)", lecturer_id, bool(is_admin))
        return self.get_lecturer(lecturer_id)

    def update_lecturer(self, lecturer_id: int, data: dict) -> Lecturer:
        fields = {}
        for key in ("name", "email"):
            if key in data:
                fields[key] = require_non_empty(data[key], key)
        if "is_admin" in data:
            fields["is_admin"] = 1 if data["is_admin"] else 0
        if data.get("password"):
            require_min_length(data["password"], "password", MIN_PASSWORD_LENGTH)
            fields["password_hash"] = generate_password_hash(data["password"])
        if not fields:
            raise ValidationError("No fields to update")

        self.get_lecturer(lecturer_id)
        self._lecturers.update(int(lecturer_id), fields)
        return self.get_lecturer(lecturer_id)

    def delete_lecturer(self, lecturer_id: int) -> None:
        if not self._lecturers.delete(int(lecturer_id)):
            raise LecturerNotFound("Lecturer not found")
        logger.info("Deleted lecturer %s", lecturer_id)
