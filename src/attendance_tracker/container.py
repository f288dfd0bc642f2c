from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .accounts.mysql_account_repository import MySQLAccountRepository
from .accounts.service import AccountService, AuthService
from .assistant.llm_client import CompletionClient, OpenAICompletionClient
from .assistant.service import AttendanceAssistant
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository, MySQLSessionRepository
from .attendance.service import AttendanceService
from .catalog.mysql_catalog_repository import MySQLCatalogRepository
from .catalog.service import CatalogService
from .classes.feed import ClassChangeFeed
from .classes.mysql_class_repository import MySQLClassRepository, MySQLEnrollmentRepository
from .classes.service import ClassService
from .core.constants import DEFAULT_LLM_BASE_URL, DEFAULT_LLM_MODEL
from .database.connection import DBConfig, DatabaseConnection
from .people.mysql_people_repository import MySQLStudentRepository, MySQLTeacherRepository
from .people.service import ProfileService
from .reports.mysql_report_repository import MySQLReportRepository
from .reports.service import ReportService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    accounts_repo: MySQLAccountRepository
    catalog_repo: MySQLCatalogRepository
    teachers_repo: MySQLTeacherRepository
    students_repo: MySQLStudentRepository
    classes_repo: MySQLClassRepository
    enrollments_repo: MySQLEnrollmentRepository
    sessions_repo: MySQLSessionRepository
    attendance_repo: MySQLAttendanceRepository
    reports_repo: MySQLReportRepository

    class_feed: ClassChangeFeed

    auth_service: AuthService
    account_service: AccountService
    catalog_service: CatalogService
    profile_service: ProfileService
    class_service: ClassService
    attendance_service: AttendanceService
    report_service: ReportService
    assistant: AttendanceAssistant


def wire_container(
    *,
    conn: Optional[DatabaseConnection],
    accounts_repo,
    catalog_repo,
    teachers_repo,
    students_repo,
    classes_repo,
    enrollments_repo,
    sessions_repo,
    attendance_repo,
    reports_repo,
    completion_client: CompletionClient,
    class_feed: Optional[ClassChangeFeed] = None,
) -> Container:
    """Assemble services over the given repositories (MySQL or in-memory)."""
    class_feed = class_feed or ClassChangeFeed()

    catalog_service = CatalogService(catalog_repo)
    auth_service = AuthService(accounts_repo, teachers_repo, students_repo)
    account_service = AccountService(accounts_repo, teachers_repo, students_repo, catalog_service)
    profile_service = ProfileService(teachers_repo, students_repo, classes_repo, catalog_service, auth_service)
    class_service = ClassService(
        classes_repo,
        enrollments_repo,
        teachers_repo,
        students_repo,
        catalog_service,
        class_feed,
    )
    attendance_service = AttendanceService(sessions_repo, attendance_repo, enrollments_repo, class_service)
    report_service = ReportService(
        reports_repo,
        classes_repo,
        enrollments_repo,
        sessions_repo,
        attendance_repo,
        students_repo,
        class_service,
    )
    assistant = AttendanceAssistant(classes_repo, enrollments_repo, sessions_repo, attendance_repo, completion_client)

    return Container(
        conn=conn,
        accounts_repo=accounts_repo,
        catalog_repo=catalog_repo,
        teachers_repo=teachers_repo,
        students_repo=students_repo,
        classes_repo=classes_repo,
        enrollments_repo=enrollments_repo,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        reports_repo=reports_repo,
        class_feed=class_feed,
        auth_service=auth_service,
        account_service=account_service,
        catalog_service=catalog_service,
        profile_service=profile_service,
        class_service=class_service,
        attendance_service=attendance_service,
        report_service=report_service,
        assistant=assistant,
    )


def build_container(*, db_config: dict, llm_config: Optional[dict] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    llm_config = llm_config or {}

    return wire_container(
        conn=conn,
        accounts_repo=MySQLAccountRepository(conn),
        catalog_repo=MySQLCatalogRepository(conn),
        teachers_repo=MySQLTeacherRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        classes_repo=MySQLClassRepository(conn),
        enrollments_repo=MySQLEnrollmentRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        reports_repo=MySQLReportRepository(conn),
        completion_client=OpenAICompletionClient(
            api_key=llm_config.get("api_key"),
            base_url=llm_config.get("base_url") or DEFAULT_LLM_BASE_URL,
            model=llm_config.get("model") or DEFAULT_LLM_MODEL,
        ),
    )
