import logging
from typing import Optional

from planitech.core.errors import AccessDenied, NotFound
from planitech.db.models.notes import TaskNote
from planitech.db.models.tasks import Task
from planitech.db.models.users import User
from planitech.db.repositories.notes import TaskNoteRepository
from planitech.db.repositories.tasks import TaskRepository
from planitech.features.access.services import ProjectAccessService
from planitech.features.activity.services import ActivityService
from planitech.features.notes.schemas import NoteCreateIn, NoteOut, NoteUpdateIn
from planitech.features.tasks.services import TASK_UPDATED
from planitech.realtime.notifier import Notifier
from planitech.security.access import Permission, Role

logger = logging.getLogger(__name__)


class NoteService:
    """
    Notes de suivi sur une tâche.
    - technicien : uniquement sur les tâches qui lui sont assignées
    - admin / chef_projet : sur toute tâche
    - autres rôles : lecture seule
    Modification / suppression : auteur ou admin.
    """

    def __init__(
        self,
        *,
        repo: TaskNoteRepository,
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

    def _get_note(self, note_id: int) -> TaskNote:
        note = self.repo.get(note_id)
        if not note:
            raise NotFound("Note not found")
        return note

    def _assert_author_or_admin(self, user: User, note: TaskNote, verb: str) -> None:
        if note.user_id != user.id and Role.parse(user.role) is not Role.ADMIN:
            raise AccessDenied(f"You can only {verb} your own notes")

    def _record(self, user: User, task: Task, note_id: int, action: str, changes: Optional[dict] = None) -> None:
        self.activity.record(
            project_id=task.project_id,
            user_id=user.id,
            action=action,
            entity_type="task_note",
            entity_id=note_id,
            changes=changes,
        )
        if self.notifier is not None:
            self.notifier.publish(
                task.project_id,
                TASK_UPDATED,
                {"action": f"note_{action}", "projectId": task.project_id, "taskId": task.id, "noteId": note_id},
            )

    # -------- Reads --------

    def list_for_task(self, user: User, task_id: int) -> list[NoteOut]:
        task = self.task_repo.get(task_id)
        if not task:
            raise NotFound("Task not found")
        self.access_svc.resolve(user, task.project_id).require(Permission.READ)
        return self.repo.list_for_task(task_id)

    # -------- Writes --------

    def create(self, user: User, payload: NoteCreateIn) -> NoteOut:
        role = Role.parse(user.role)
        if role not in (Role.TECHNICIAN, Role.ADMIN, Role.PROJECT_LEAD):
            raise AccessDenied("Insufficient privileges to add notes")
        task = self.task_repo.get(payload.task_id)
        if role is Role.TECHNICIAN:
            if not task or task.assigned_to != user.id:
                raise AccessDenied("Task not found or access denied")
        elif not task:
            raise NotFound("Task not found")

        note = self.repo.create(user_id=user.id, **payload.model_dump())
        self._record(user, task, note.id, "created", {"time_spent": note.time_spent})
        logger.info("Note %s added to task %s by user %s", note.id, task.id, user.id)
        return self.repo.get_out(note.id)

    def update(self, user: User, note_id: int, payload: NoteUpdateIn) -> NoteOut:
        note = self._get_note(note_id)
        self._assert_author_or_admin(user, note, "edit")
        note = self.repo.update(note, **payload.model_dump())
        task = self.task_repo.get(note.task_id)
        if task:
            self._record(user, task, note.id, "updated", {"time_spent": note.time_spent})
        logger.info("Note %s updated by user %s", note.id, user.id)
        return self.repo.get_out(note.id)

    def delete(self, user: User, note_id: int) -> None:
        note = self._get_note(note_id)
        self._assert_author_or_admin(user, note, "delete")
        task = self.task_repo.get(note.task_id)
        self.repo.delete(note)
        if task:
            self._record(user, task, note_id, "deleted")
        logger.info("Note %s deleted by user %s", note_id, user.id)
