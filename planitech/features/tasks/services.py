import logging
from typing import Iterable, Optional

from planitech.core.errors import ConflictError, NotFound, ValidationError
from planitech.db.models.tasks import Task
from planitech.db.models.users import User
from planitech.db.repositories.tasks import TaskDependencyRepository, TaskRepository
from planitech.db.repositories.users import UserRepository
from planitech.features.access.services import ProjectAccessService
from planitech.features.activity.services import ActivityService
from planitech.features.tasks.schemas import (
    DependencyCreateIn,
    DependencyOut,
    TaskCreateIn,
    TaskOut,
    TaskUpdateIn,
)
from planitech.realtime.notifier import Notifier
from planitech.security.access import Permission

logger = logging.getLogger(__name__)

TASK_UPDATED = "task-updated"

# colonnes non nulles : un None explicite est ignoré
_REQUIRED_FIELDS = ("title", "duration", "progress", "priority", "status")


class TaskService:
    """
    Logique métier des tâches d'un projet.
    - Lecture : permission `read` sur le projet.
    - Création / modification / dépendances : permission `write`.
    - Suppression : permission `delete`.
    """

    def __init__(
        self,
        *,
        repo: TaskRepository,
        dep_repo: TaskDependencyRepository,
        user_repo: UserRepository,
        access_svc: ProjectAccessService,
        activity: ActivityService,
        notifier: Optional[Notifier] = None,
    ):
        self.repo = repo
        self.dep_repo = dep_repo
        self.user_repo = user_repo
        self.access_svc = access_svc
        self.activity = activity
        self.notifier = notifier

    # -------- Helpers --------

    def _publish(self, project_id: int, payload: dict) -> None:
        if self.notifier is not None:
            self.notifier.publish(project_id, TASK_UPDATED, payload)

    def _get_task(self, task_id: int) -> Task:
        task = self.repo.get(task_id)
        if not task:
            raise NotFound("Task not found")
        return task

    def _with_dependencies(self, tasks: Iterable[TaskOut]) -> list[TaskOut]:
        tasks = list(tasks)
        by_task: dict[int, list[DependencyOut]] = {}
        for dep in self.dep_repo.list_for_tasks(t.id for t in tasks):
            by_task.setdefault(dep.task_id, []).append(dep)
        return [t.model_copy(update={"dependencies": by_task.get(t.id, [])}) for t in tasks]

    def _check_assignee(self, user_id: Optional[int]) -> None:
        if user_id is not None and not self.user_repo.get(user_id):
            raise ValidationError("Assigned user not found")

    def _check_parent(self, parent_id: Optional[int], project_id: int, *, task_id: Optional[int] = None) -> None:
        if parent_id is None:
            return
        if task_id is not None and parent_id == task_id:
            raise ValidationError("A task cannot be its own parent")
        parent = self.repo.get(parent_id)
        if not parent or parent.project_id != project_id:
            raise ValidationError("Parent task must belong to the same project")
        if task_id is None:
            return
        # remonter la chaîne des parents : la tâche ne doit pas y figurer
        seen = {parent.id}
        while parent.parent_task_id is not None:
            if parent.parent_task_id == task_id:
                raise ValidationError("Circular parent relationship")
            if parent.parent_task_id in seen:
                break
            seen.add(parent.parent_task_id)
            parent = self.repo.get(parent.parent_task_id)
            if parent is None:
                break

    def _out(self, task_id: int) -> TaskOut:
        return self._with_dependencies([self.repo.get_out(task_id)])[0]

    # -------- Reads --------

    def list_for_project(self, user: User, project_id: int) -> list[TaskOut]:
        self.access_svc.resolve(user, project_id).require(Permission.READ)
        return self._with_dependencies(self.repo.list_for_project(project_id))

    def get(self, user: User, task_id: int) -> TaskOut:
        task = self._get_task(task_id)
        self.access_svc.resolve(user, task.project_id).require(Permission.READ)
        return self._out(task.id)

    # -------- Writes --------

    def create(self, user: User, project_id: int, payload: TaskCreateIn) -> TaskOut:
        self.access_svc.resolve(user, project_id).require(Permission.WRITE)
        self._check_assignee(payload.assigned_to)
        self._check_parent(payload.parent_task_id, project_id)

        task = self.repo.create(project_id=project_id, created_by=user.id, **payload.model_dump(exclude_none=True))
        self.activity.record(
            project_id=project_id,
            user_id=user.id,
            action="created",
            entity_type="task",
            entity_id=task.id,
            changes={"title": task.title, "assigned_to": task.assigned_to, "priority": task.priority},
        )
        logger.info("Task %s created in project %s by user %s", task.id, project_id, user.id)
        out = self._out(task.id)
        self._publish(project_id, {"action": "created", "projectId": project_id, "task": out.model_dump(mode="json")})
        return out

    def update(self, user: User, task_id: int, payload: TaskUpdateIn) -> TaskOut:
        task = self._get_task(task_id)
        self.access_svc.resolve(user, task.project_id).require(Permission.WRITE)

        changes = payload.model_dump(exclude_unset=True)
        for key in _REQUIRED_FIELDS:
            if key in changes and changes[key] is None:
                del changes[key]
        if "assigned_to" in changes:
            self._check_assignee(changes["assigned_to"])
        if "parent_task_id" in changes:
            self._check_parent(changes["parent_task_id"], task.project_id, task_id=task.id)

        task = self.repo.update(task, **changes)
        self.activity.record(
            project_id=task.project_id,
            user_id=user.id,
            action="updated",
            entity_type="task",
            entity_id=task.id,
            changes=changes,
        )
        logger.info("Task %s updated by user %s", task.id, user.id)
        out = self._out(task.id)
        self._publish(
            task.project_id,
            {"action": "updated", "projectId": task.project_id, "task": out.model_dump(mode="json")},
        )
        return out

    def delete(self, user: User, task_id: int) -> None:
        task = self._get_task(task_id)
        project_id = task.project_id
        self.access_svc.resolve(user, project_id).require(Permission.DELETE)

        title = task.title
        self.repo.delete_cascade(task)
        self.activity.record(
            project_id=project_id,
            user_id=user.id,
            action="deleted",
            entity_type="task",
            entity_id=task_id,
            changes={"title": title},
        )
        logger.info("Task %s deleted by user %s", task_id, user.id)
        self._publish(project_id, {"action": "deleted", "projectId": project_id, "taskId": task_id})

    def add_dependency(self, user: User, task_id: int, payload: DependencyCreateIn) -> DependencyOut:
        task = self._get_task(task_id)
        self.access_svc.resolve(user, task.project_id).require(Permission.WRITE)

        if payload.depends_on_task_id == task.id:
            raise ValidationError("A task cannot depend on itself")
        other = self.repo.get(payload.depends_on_task_id)
        if not other:
            raise NotFound("One or both tasks not found")
        if other.project_id != task.project_id:
            raise ValidationError("Tasks must belong to the same project")
        if self.dep_repo.get_pair(task.id, other.id):
            raise ConflictError("Dependency already exists")

        dep = self.dep_repo.create(
            task_id=task.id,
            depends_on_task_id=other.id,
            dependency_type=payload.dependency_type,
            lag=payload.lag,
        )
        self.activity.record(
            project_id=task.project_id,
            user_id=user.id,
            action="dependency_added",
            entity_type="task",
            entity_id=task.id,
            changes={"depends_on_task_id": other.id, "dependency_type": dep.dependency_type, "lag": dep.lag},
        )
        logger.info("Dependency %s -> %s added by user %s", task.id, other.id, user.id)
        out = DependencyOut(
            id=dep.id,
            task_id=dep.task_id,
            depends_on_task_id=dep.depends_on_task_id,
            depends_on_title=other.title,
            dependency_type=dep.dependency_type,
            lag=dep.lag,
        )
        self._publish(
            task.project_id,
            {"action": "dependency_added", "projectId": task.project_id, "dependency": out.model_dump()},
        )
        return out
