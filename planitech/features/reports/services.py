"""
➡️ But : Rapports d'intervention rédigés par les techniciens.

Règles :

création réservée au technicien assigné à la tâche ;

un technicien ne voit et ne modifie que ses propres rapports ;

suppression : admin ou auteur du rapport.

Chaque mutation est tracée dans le journal du projet et notifiée comme `task-updated`.
"""

import logging
from typing import Optional

from planitech.core.errors import AccessDenied, NotFound, ValidationError
from planitech.db.models.reports import InterventionReport
from planitech.db.models.tasks import Task
from planitech.db.models.users import User
from planitech.db.repositories.reports import InterventionReportRepository
from planitech.db.repositories.tasks import TaskRepository
from planitech.features.access.services import ProjectAccessService
from planitech.features.activity.services import ActivityService
from planitech.features.reports.schemas import REPORT_STATUSES, ReportCreateIn, ReportOut, ReportUpdateIn
from planitech.features.tasks.services import TASK_UPDATED
from planitech.realtime.notifier import Notifier
from planitech.security.access import Permission, Role

logger = logging.getLogger(__name__)

# rôles pouvant modifier n'importe quel rapport (le technicien : seulement les siens)
_REVIEWER_ROLES = (Role.ADMIN, Role.PROJECT_LEAD, Role.SUPPORT)


class ReportService:
    def __init__(
        self,
        *,
        repo: InterventionReportRepository,
        task_repo: TaskRepository,
        access_svc: ProjectAccessService,
        activity: ActivityService,
        notifier: Optional[Notifier] = None,
    ):
        self.repo = repo
        self.task_repo = task_repo
        self.access_svc = access_svc
        self.activity = activity
        self.notifier = notifier

    # -------- Helpers --------

    def _get_task(self, task_id: int) -> Task:
        task = self.task_repo.get(task_id)
        if not task:
            raise NotFound("Task not found")
        return task

    def _get_report(self, report_id: int) -> InterventionReport:
        report = self.repo.get(report_id)
        if not report:
            raise NotFound("Intervention report not found")
        return report

    def _record(self, user: User, task: Task, report_id: int, action: str, changes: Optional[dict] = None) -> None:
        self.activity.record(
            project_id=task.project_id,
            user_id=user.id,
            action=action,
            entity_type="intervention_report",
            entity_id=report_id,
            changes=changes,
        )
        if self.notifier is not None:
            self.notifier.publish(
                task.project_id,
                TASK_UPDATED,
                {"action": f"report_{action}", "projectId": task.project_id, "taskId": task.id, "reportId": report_id},
            )

    # -------- Reads --------

    def list_all(self) -> list[ReportOut]:
        return self.repo.list_all()

    def list_mine(self, user: User) -> list[ReportOut]:
        return self.repo.list_for_technician(user.id)

    def list_for_task(self, user: User, task_id: int) -> list[ReportOut]:
        task = self._get_task(task_id)
        self.access_svc.resolve(user, task.project_id).require(Permission.READ)
        technician_id = user.id if Role.parse(user.role) is Role.TECHNICIAN else None
        return self.repo.list_for_task(task_id, technician_id=technician_id)

    # -------- Writes --------

    def create(self, user: User, payload: ReportCreateIn) -> ReportOut:
        task = self._get_task(payload.task_id)
        if task.assigned_to != user.id:
            raise AccessDenied("You can only create reports for tasks assigned to you")
        report = self.repo.create(technician_id=user.id, status="draft", **payload.model_dump())
        self._record(user, task, report.id, "created", {"title": report.title, "time_spent": report.time_spent})
        logger.info("Report %s created on task %s by user %s", report.id, task.id, user.id)
        return self.repo.get_out(report.id)

    def update(self, user: User, report_id: int, payload: ReportUpdateIn) -> ReportOut:
        report = self._get_report(report_id)
        role = Role.parse(user.role)
        if role is Role.TECHNICIAN:
            if report.technician_id != user.id:
                raise AccessDenied("You can only edit your own reports")
        elif role not in _REVIEWER_ROLES:
            raise AccessDenied("Insufficient privileges")

        changes = payload.model_dump(exclude_none=True)
        if "status" in changes and changes["status"] not in REPORT_STATUSES:
            raise ValidationError("Invalid status")

        report = self.repo.update(report, **changes)
        self._record(user, self._get_task(report.task_id), report.id, "updated", changes)
        logger.info("Report %s updated by user %s", report.id, user.id)
        return self.repo.get_out(report.id)

    def delete(self, user: User, report_id: int) -> None:
        report = self._get_report(report_id)
        if Role.parse(user.role) is not Role.ADMIN and report.technician_id != user.id:
            raise AccessDenied("Insufficient privileges to delete this report")
        task = self._get_task(report.task_id)
        self.repo.delete(report)
        self._record(user, task, report_id, "deleted")
        logger.info("Report %s deleted by user %s", report_id, user.id)
