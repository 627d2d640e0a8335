from __future__ import annotations

from typing import Any, Optional

from ..core.enums import Action
from ..core.exceptions import AuthorizationError, SectionNotFound
from ..courses.repository import SectionRepository
from .model import Actor

_TOKEN_ACTIONS = {Action.ISSUE_TOKEN, Action.VIEW_TOKEN, Action.INVALIDATE_TOKEN}
_SECTION_ACTIONS = {
    Action.OVERRIDE_PRESENCE,
    Action.VIEW_SECTION_ATTENDANCE,
    Action.MANAGE_ENROLLMENT,
    Action.MANAGE_SECTION,
}
_ADMIN_ACTIONS = {Action.MANAGE_CATALOG, Action.VIEW_ADMIN_REPORTS, Action.RUN_ATTENDANCE_CHECK}


class AccessPolicy:
    """Single capability check: may `actor` perform `action` on `resource`?

    Resources are plain identifiers: a course code for token actions, a
    section id for section actions, a student id or lecturer id otherwise.
    """

    def __init__(self, sections: SectionRepository):
        self._sections = sections

    def allows(self, actor: Optional[Actor], action: Action, resource: Any = None) -> bool:
        if actor is None:
            return False

        if action in _ADMIN_ACTIONS:
            return actor.is_admin

        if action == Action.RECORD_SCAN:
            return actor.is_student and str(resource) == actor.user_id

        if action == Action.VIEW_STUDENT_HISTORY:
            return not actor.is_student or str(resource) == actor.user_id

        if action in (Action.VIEW_SESSION_ATTENDANCE, Action.VIEW_COURSE_ROSTER):
            return not actor.is_student

        if action == Action.VIEW_LECTURER_REPORTS:
            return actor.is_admin or (actor.is_lecturer and str(resource) == actor.user_id)

        if actor.is_admin:
            return True
        if not actor.is_lecturer:
            return False

        if action in _TOKEN_ACTIONS:
            return self._sections.lecturer_teaches_course(int(actor.user_id), str(resource))

        if action in _SECTION_ACTIONS:
            section = self._sections.get_by_id(int(resource))
            if not section:
                raise SectionNotFound("Section not found")
            return str(section.lecturer_id) == actor.user_id

        return False

    def require(self, actor: Optional[Actor], action: Action, resource: Any = None) -> None:
        if not self.allows(actor, action, resource):
            raise AuthorizationError("You do not have permission to perform this action")
