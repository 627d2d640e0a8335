import pytest

from src.class_attendance.class_attendance.core.enums import Action, Role
from src.class_attendance.class_attendance.core.exceptions import AuthorizationError, SectionNotFound
from src.class_attendance.class_attendance.courses.model import Section
from src.class_attendance.class_attendance.users.model import Actor
from src.class_attendance.class_attendance.users.policy import AccessPolicy
from tests.fakes import InMemorySections

ADMIN = Actor(user_id="1", role=Role.ADMIN)
LECTURER = Actor(user_id="7", role=Role.LECTURER)
STUDENT = Actor(user_id="S1", role=Role.STUDENT)


@pytest.fixture
def policy():
    return AccessPolicy(
        InMemorySections(
            [
                Section(section_id=1, section_name="A", course_code="CS101", lecturer_id=7),
                Section(section_id=2, section_name="B", course_code="CS201", lecturer_id=8),
            ]
        )
    )


def test_token_actions_require_teaching_the_course(policy):
    assert policy.allows(LECTURER, Action.ISSUE_TOKEN, "CS101")
    assert not policy.allows(LECTURER, Action.ISSUE_TOKEN, "CS201")
    assert policy.allows(ADMIN, Action.ISSUE_TOKEN, "CS201")
    assert not policy.allows(STUDENT, Action.ISSUE_TOKEN, "CS101")


def test_section_actions_require_owning_the_section(policy):
    assert policy.allows(LECTURER, Action.OVERRIDE_PRESENCE, 1)
    assert not policy.allows(LECTURER, Action.OVERRIDE_PRESENCE, 2)
    assert policy.allows(ADMIN, Action.OVERRIDE_PRESENCE, 2)
    with pytest.raises(SectionNotFound):
        policy.allows(LECTURER, Action.VIEW_SECTION_ATTENDANCE, 99)


def test_students_act_only_for_themselves(policy):
    assert policy.allows(STUDENT, Action.RECORD_SCAN, "S1")
    assert not policy.allows(STUDENT, Action.RECORD_SCAN, "S2")
    assert not policy.allows(LECTURER, Action.RECORD_SCAN, "S1")
    assert policy.allows(STUDENT, Action.VIEW_STUDENT_HISTORY, "S1")
    assert not policy.allows(STUDENT, Action.VIEW_STUDENT_HISTORY, "S2")
    assert policy.allows(LECTURER, Action.VIEW_STUDENT_HISTORY, "S2")
    assert not policy.allows(STUDENT, Action.VIEW_SESSION_ATTENDANCE, "sess")


def test_admin_only_actions(policy):
    for action in (Action.MANAGE_CATALOG, Action.VIEW_ADMIN_REPORTS, Action.RUN_ATTENDANCE_CHECK):
        assert policy.allows(ADMIN, action)
        assert not policy.allows(LECTURER, action)


def test_lecturer_reports_are_own_only(policy):
    assert policy.allows(LECTURER, Action.VIEW_LECTURER_REPORTS, 7)
    assert not policy.allows(LECTURER, Action.VIEW_LECTURER_REPORTS, 8)
    assert policy.allows(ADMIN, Action.VIEW_LECTURER_REPORTS, 8)


def test_require_raises_and_anonymous_is_denied(policy):
    assert not policy.allows(None, Action.VIEW_STUDENT_HISTORY, "S1")
    with pytest.raises(AuthorizationError):
        policy.require(STUDENT, Action.MANAGE_CATALOG)
