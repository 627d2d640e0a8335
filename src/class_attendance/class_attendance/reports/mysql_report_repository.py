from __future__ import annotations

from datetime import date
from typing import Dict, Optional, Sequence, Tuple

from ..attendance.model import PresenceRecord
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import (
    AttendanceReportRow,
    AuditRow,
    CourseRecordCount,
    CourseSectionDetail,
    ReportFilters,
    SectionDayCount,
    StudentPresenceRatio,
)
from .repository import ReportRepository

# log type -> (table, id column, name column, has email)
_AUDIT_COLUMNS = {
    "students": ("students", "student_id", "name", True),
    "lecturers": ("lecturers", "lecturer_id", "name", True),
    "courses": ("courses", "course_code", "course_name", False),
    "sections": ("sections", "section_id", "section_name", False),
}


class MySQLReportRepository(ReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def present_counts(
        self,
        section_ids: Sequence[int],
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        course_code: Optional[str] = None,
    ) -> Sequence[SectionDayCount]:
        if not section_ids:
            return []

        where = [f"ar.section_id IN ({in_clause(section_ids)})"]
        params: list = list(section_ids)
        if start_date:
            where.append("DATE(ar.attended_at) >= %s")
            params.append(start_date)
        if end_date:
            where.append("DATE(ar.attended_at) <= %s")
            params.append(end_date)
        if course_code:
            where.append("c.course_code = %s")
            params.append(course_code)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT DATE(ar.attended_at) AS report_date, s.section_id, s.section_name,
                       c.course_code, c.course_name,
                       COUNT(DISTINCT ar.student_id) AS present_students
                FROM attendance_records ar
                JOIN sections s ON s.section_id = ar.section_id
                JOIN courses c ON c.course_code = s.course_code
                WHERE {' AND '.join(where)}
                GROUP BY DATE(ar.attended_at), s.section_id, s.section_name, c.course_code, c.course_name
                ORDER BY report_date DESC, c.course_code, s.section_name
                """,
                tuple(params),
            )
            return [
                SectionDayCount(
                    report_date=r["report_date"],
                    section_id=int(r["section_id"]),
                    section_name=r["section_name"],
                    course_code=r["course_code"],
                    course_name=r["course_name"],
                    present_students=int(r["present_students"]),
                )
                for r in fetchall(cur)
            ]

    def enrolled_counts(self, section_ids: Sequence[int]) -> Dict[int, int]:
        if not section_ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT section_id, COUNT(DISTINCT student_id) AS total_students
                FROM sections_students
                WHERE section_id IN ({in_clause(section_ids)})
                GROUP BY section_id
                """,
                tuple(section_ids),
            )
            return {int(r["section_id"]): int(r["total_students"]) for r in fetchall(cur)}

    def distinct_enrolled_students(self, section_ids: Sequence[int]) -> int:
        if not section_ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT COUNT(DISTINCT student_id) AS n FROM sections_students WHERE section_id IN ({in_clause(section_ids)})",
                tuple(section_ids),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def present_students_on(self, section_ids: Sequence[int], on_date: date) -> int:
        if not section_ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(DISTINCT student_id) AS n
                FROM attendance_records
                WHERE section_id IN ({in_clause(section_ids)}) AND DATE(attended_at)=%s
                """,
                (*section_ids, on_date),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def recent_records(self, section_ids: Sequence[int], limit: int) -> Sequence[PresenceRecord]:
        if not section_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT ar.record_id, ar.student_id, ar.section_id, ar.session_id, ar.qrcode_id,
                       ar.attended_at, st.name AS student_name, s.section_name, s.course_code
                FROM attendance_records ar
                JOIN sections s ON s.section_id = ar.section_id
                JOIN students st ON st.student_id = ar.student_id
                WHERE ar.section_id IN ({in_clause(section_ids)})
                ORDER BY ar.attended_at DESC
                LIMIT %s
                """,
                (*section_ids, int(limit)),
            )
            return [
                PresenceRecord(
                    record_id=int(r["record_id"]),
                    student_id=str(r["student_id"]),
                    section_id=int(r["section_id"]),
                    session_id=str(r["session_id"]),
                    qrcode_id=int(r["qrcode_id"]) if r.get("qrcode_id") is not None else None,
                    attended_at=r["attended_at"],
                    student_name=r.get("student_name"),
                    section_name=r.get("section_name"),
                    course_code=r.get("course_code"),
                )
                for r in fetchall(cur)
            ]

    def student_presence_counts(self) -> Sequence[StudentPresenceRatio]:
        # Two derived tables keep the enrollment join from multiplying presence rows.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT st.student_id, st.name, st.email,
                       e.enrolled_sections,
                       COALESCE(p.presence_count, 0) AS presence_count
                FROM students st
                JOIN (
                    SELECT student_id, COUNT(DISTINCT section_id) AS enrolled_sections
                    FROM sections_students GROUP BY student_id
                ) e ON e.student_id = st.student_id
                LEFT JOIN (
                    SELECT student_id, COUNT(record_id) AS presence_count
                    FROM attendance_records GROUP BY student_id
                ) p ON p.student_id = st.student_id
                ORDER BY st.student_id
                """
            )
            return [
                StudentPresenceRatio(
                    student_id=str(r["student_id"]),
                    name=r["name"],
                    email=r["email"],
                    presence_count=int(r["presence_count"]),
                    enrolled_sections=int(r["enrolled_sections"]),
                )
                for r in fetchall(cur)
            ]

    def entity_counts(self) -> Dict[str, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT (SELECT COUNT(*) FROM students) AS students,
                       (SELECT COUNT(*) FROM lecturers) AS lecturers,
                       (SELECT COUNT(*) FROM courses) AS courses,
                       (SELECT COUNT(*) FROM sections) AS sections
                """
            )
            r = fetchone(cur) or {}
            return {k: int(r.get(k) or 0) for k in ("students", "lecturers", "courses", "sections")}

    def day_presence(self, on_date: date) -> Tuple[int, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(DISTINCT ar.section_id, ar.student_id) AS present
                FROM attendance_records ar
                JOIN sections_students ss
                  ON ss.section_id = ar.section_id AND ss.student_id = ar.student_id
                WHERE DATE(ar.attended_at)=%s
                """,
                (on_date,),
            )
            present = int((fetchone(cur) or {}).get("present") or 0)
            cur.execute(
                """
                SELECT COUNT(*) AS enrolled
                FROM sections_students
                WHERE section_id IN (
                    SELECT DISTINCT section_id FROM attendance_records WHERE DATE(attended_at)=%s
                )
                """,
                (on_date,),
            )
            enrolled = int((fetchone(cur) or {}).get("enrolled") or 0)
            return present, enrolled

    def daily_record_counts(self, since: date) -> Sequence[Tuple[date, int]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DATE(attended_at) AS day, COUNT(record_id) AS n
                FROM attendance_records
                WHERE DATE(attended_at) >= %s
                GROUP BY DATE(attended_at)
                ORDER BY day ASC
                """,
                (since,),
            )
            return [(r["day"], int(r["n"])) for r in fetchall(cur)]

    def course_record_counts(self) -> Sequence[CourseRecordCount]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.course_code, c.course_name,
                       (SELECT COUNT(*) FROM attendance_records ar
                        JOIN sections s2 ON s2.section_id = ar.section_id
                        WHERE s2.course_code = c.course_code) AS record_count,
                       COUNT(DISTINCT ss.student_id) AS enrolled_students
                FROM courses c
                JOIN sections s ON s.course_code = c.course_code
                JOIN sections_students ss ON ss.section_id = s.section_id
                GROUP BY c.course_code, c.course_name
                """
            )
            return [
                CourseRecordCount(
                    course_code=r["course_code"],
                    course_name=r["course_name"],
                    record_count=int(r["record_count"]),
                    enrolled_students=int(r["enrolled_students"]),
                )
                for r in fetchall(cur)
            ]

    def attendance_rows(self, filters: ReportFilters) -> Sequence[AttendanceReportRow]:
        where = []
        params: list = []
        if filters.start_date and not filters.end_date:
            where.append("DATE(ar.attended_at) = %s")
            params.append(filters.start_date)
        elif filters.start_date and filters.end_date:
            where.append("DATE(ar.attended_at) BETWEEN %s AND %s")
            params.extend([filters.start_date, filters.end_date])
        elif filters.end_date:
            where.append("DATE(ar.attended_at) <= %s")
            params.append(filters.end_date)
        if filters.course_code:
            where.append("c.course_code = %s")
            params.append(filters.course_code)
        if filters.lecturer_id is not None:
            where.append("l.lecturer_id = %s")
            params.append(filters.lecturer_id)
        if filters.section_id is not None:
            where.append("sec.section_id = %s")
            params.append(filters.section_id)

        where_sql = ("WHERE " + " AND ".join(where)) if where else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT ar.record_id, ar.attended_at, ar.qrcode_id,
                       st.student_id, st.name AS student_name,
                       sec.section_id, sec.section_name,
                       c.course_code, c.course_name,
                       l.lecturer_id, l.name AS lecturer_name
                FROM attendance_records ar
                JOIN students st ON st.student_id = ar.student_id
                JOIN sections sec ON sec.section_id = ar.section_id
                JOIN courses c ON c.course_code = sec.course_code
                JOIN lecturers l ON l.lecturer_id = sec.lecturer_id
                {where_sql}
                ORDER BY ar.attended_at DESC
                """,
                tuple(params),
            )
            return [
                AttendanceReportRow(
                    record_id=int(r["record_id"]),
                    attended_at=r["attended_at"],
                    student_id=str(r["student_id"]),
                    student_name=r["student_name"],
                    section_id=int(r["section_id"]),
                    section_name=r["section_name"],
                    course_code=r["course_code"],
                    course_name=r["course_name"],
                    lecturer_id=int(r["lecturer_id"]),
                    lecturer_name=r["lecturer_name"],
                    is_manual_override=r.get("qrcode_id") is None,
                )
                for r in fetchall(cur)
            ]

    def course_details(self, course_code: str) -> Sequence[CourseSectionDetail]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT sec.section_id, sec.section_name, l.lecturer_id, l.name AS lecturer_name
                FROM sections sec
                LEFT JOIN lecturers l ON l.lecturer_id = sec.lecturer_id
                WHERE sec.course_code = %s
                ORDER BY sec.section_id
                """,
                (course_code,),
            )
            return [
                CourseSectionDetail(
                    section_id=int(r["section_id"]),
                    section_name=r["section_name"],
                    lecturer_id=int(r["lecturer_id"]) if r["lecturer_id"] is not None else None,
                    lecturer_name=r["lecturer_name"],
                )
                for r in fetchall(cur)
            ]

    def audit_rows(self, log_type: str, limit: int) -> Sequence[AuditRow]:
        table, id_column, name_column, has_email = _AUDIT_COLUMNS[log_type]
        email_sql = ", email" if has_email else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {id_column} AS entity_id, {name_column} AS name{email_sql}, created_at, updated_at
                FROM {table}
                ORDER BY updated_at DESC
                LIMIT %s
                """,
                (limit,),
            )
            return [
                AuditRow(
                    entity_id=str(r["entity_id"]),
                    name=r["name"],
                    email=r.get("email"),
                    created_at=r["created_at"],
                    updated_at=r["updated_at"],
                )
                for r in fetchall(cur)
            ]
