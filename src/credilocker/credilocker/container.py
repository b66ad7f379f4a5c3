from __future__ import annotations

from dataclasses import dataclass

from .cep.mysql_cep_repository import MySQLCepRepository
from .cep.service import CepService
from .cocurricular.mysql_activity_repository import MySQLActivityRepository, MySQLAttendanceRepository
from .cocurricular.service import CoCurricularService
from .core.constants import DEFAULT_BUCKET, DEFAULT_SIGNED_URL_SECONDS
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .field_projects.mysql_field_project_repository import MySQLFieldProjectRepository
from .field_projects.service import FieldProjectService
from .reports.service import ReportService
from .storage.local_storage import LocalFileStorage
from .storage.service import UploadService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.service import StudentService
from .users.mysql_teacher_repository import MySQLTeacherRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    storage: LocalFileStorage

    teachers_repo: MySQLTeacherRepository
    students_repo: MySQLStudentRepository
    field_projects_repo: MySQLFieldProjectRepository
    cep_repo: MySQLCepRepository
    activities_repo: MySQLActivityRepository
    attendance_repo: MySQLAttendanceRepository

    auth_service: AuthService
    student_service: StudentService
    upload_service: UploadService
    field_project_service: FieldProjectService
    cep_service: CepService
    cocurricular_service: CoCurricularService
    dashboard_service: DashboardService
    report_service: ReportService


def build_container(
    *,
    db_config: dict,
    storage_root: str,
    secret_key: str,
    bucket: str = DEFAULT_BUCKET,
    signed_url_ttl: int = DEFAULT_SIGNED_URL_SECONDS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    storage = LocalFileStorage(storage_root, secret_key=secret_key, bucket=bucket)

    teachers_repo = MySQLTeacherRepository(conn)
    students_repo = MySQLStudentRepository(conn)
    field_projects_repo = MySQLFieldProjectRepository(conn)
    cep_repo = MySQLCepRepository(conn)
    activities_repo = MySQLActivityRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    upload_service = UploadService(storage, signed_url_ttl=signed_url_ttl)

    return Container(
        conn=conn,
        storage=storage,
        teachers_repo=teachers_repo,
        students_repo=students_repo,
        field_projects_repo=field_projects_repo,
        cep_repo=cep_repo,
        activities_repo=activities_repo,
        attendance_repo=attendance_repo,
        auth_service=AuthService(teachers_repo, students_repo),
        student_service=StudentService(students_repo),
        upload_service=upload_service,
        field_project_service=FieldProjectService(field_projects_repo, students_repo, upload_service),
        cep_service=CepService(cep_repo, students_repo, upload_service),
        cocurricular_service=CoCurricularService(activities_repo, attendance_repo, students_repo),
        dashboard_service=DashboardService(field_projects_repo, cep_repo, activities_repo, attendance_repo),
        report_service=ReportService(students_repo, field_projects_repo, cep_repo, activities_repo, attendance_repo),
    )
