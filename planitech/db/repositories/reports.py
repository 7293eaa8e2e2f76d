from typing import Optional

from sqlmodel import select

from planitech.db.repositories.base import BaseRepository
from planitech.db.models.reports import InterventionReport
from planitech.db.models.tasks import Task
from planitech.db.models.projects import Project
from planitech.db.models.users import User
from planitech.features.reports.schemas import ReportOut


class InterventionReportRepository(BaseRepository[InterventionReport]):
    model = InterventionReport

    def _select_report_out(self):
        return (
            select(
                InterventionReport,
                User.username.label("technician_name"),
                Task.title.label("task_title"),
                Project.title.label("project_title"),
            )
            .select_from(InterventionReport)
            .join(User, User.id == InterventionReport.technician_id, isouter=True)
            .join(Task, Task.id == InterventionReport.task_id, isouter=True)
            .join(Project, Project.id == Task.project_id, isouter=True)
            .order_by(InterventionReport.created_at.desc(), InterventionReport.id.desc())
        )

    def _rows_to_out(self, rows) -> list[ReportOut]:
        return [
            ReportOut.model_validate(report).model_copy(
                update={"technician_name": tech, "task_title": task_title, "project_title": project_title}
            )
            for report, tech, task_title, project_title in rows
        ]

    def list_all(self) -> list[ReportOut]:
        return self._rows_to_out(self.session.exec(self._select_report_out()).all())

    def list_for_technician(self, technician_id: int) -> list[ReportOut]:
        stmt = self._select_report_out().where(InterventionReport.technician_id == technician_id)
        return self._rows_to_out(self.session.exec(stmt).all())

    def list_for_task(self, task_id: int, *, technician_id: Optional[int] = None) -> list[ReportOut]:
        stmt = self._select_report_out().where(InterventionReport.task_id == task_id)
        if technician_id is not None:
            stmt = stmt.where(InterventionReport.technician_id == technician_id)
        return self._rows_to_out(self.session.exec(stmt).all())

    def get_out(self, report_id: int) -> Optional[ReportOut]:
        rows = self.session.exec(self._select_report_out().where(InterventionReport.id == report_id)).all()
        items = self._rows_to_out(rows)
        return items[0] if items else None
