from typing import Iterable, Optional, Sequence

from sqlalchemy import delete, update
from sqlalchemy.orm import aliased
from sqlmodel import select, or_

from planitech.db.repositories.base import BaseRepository
from planitech.db.models.tasks import Task, TaskDependency
from planitech.db.models.projects import Project
from planitech.db.models.reports import InterventionReport
from planitech.db.models.notes import TaskNote
from planitech.db.models.users import User
from planitech.features.tasks.schemas import DependencyOut, TaskOut


class TaskRepository(BaseRepository[Task]):
    """CRUD Tasks + projections jointes (noms d'assigné/créateur, tâche parente, projet)."""
    model = Task

    # ---------- HELPERS ----------

    def _select_task_out(self):
        """Projection SQL standardisée pour construire TaskOut."""
        assignee = aliased(User)
        creator = aliased(User)
        parent = aliased(Task)
        return (
            select(
                Task,
                assignee.username.label("assigned_to_name"),
                creator.username.label("created_by_name"),
                parent.title.label("parent_task_title"),
                Project.title.label("project_title"),
            )
            .select_from(Task)
            .join(assignee, assignee.id == Task.assigned_to, isouter=True)
            .join(creator, creator.id == Task.created_by, isouter=True)
            .join(parent, parent.id == Task.parent_task_id, isouter=True)
            .join(Project, Project.id == Task.project_id, isouter=True)
        )

    def _rows_to_task_out(self, rows) -> list[TaskOut]:
        items = []
        for task, assigned_to_name, created_by_name, parent_task_title, project_title in rows:
            items.append(
                TaskOut.model_validate(task).model_copy(
                    update={
                        "assigned_to_name": assigned_to_name,
                        "created_by_name": created_by_name,
                        "parent_task_title": parent_task_title,
                        "project_title": project_title,
                    }
                )
            )
        return items

    # ---------- LECTURES ----------

    def list_for_project(self, project_id: int) -> list[TaskOut]:
        stmt = self._select_task_out().where(Task.project_id == project_id).order_by(Task.created_at, Task.id)
        return self._rows_to_task_out(self.session.exec(stmt).all())

    def get_out(self, task_id: int) -> Optional[TaskOut]:
        rows = self.session.exec(self._select_task_out().where(Task.id == task_id)).all()
        items = self._rows_to_task_out(rows)
        return items[0] if items else None

    def list_open_assigned_to(self, user_id: int) -> list[TaskOut]:
        """Tâches assignées non terminées, échéance la plus proche d'abord."""
        stmt = (
            self._select_task_out()
            .where(Task.assigned_to == user_id, Task.status != "completed")
            .order_by(Task.end_date.is_(None), Task.end_date.asc(), Task.id)
        )
        return self._rows_to_task_out(self.session.exec(stmt).all())

    def is_assigned_to(self, task_id: int, user_id: int) -> bool:
        stmt = select(Task.id).where(Task.id == task_id, Task.assigned_to == user_id)
        return self.session.exec(stmt).first() is not None

    # ---------- SUPPRESSION ----------

    def delete_cascade(self, task: Task) -> None:
        """Supprime la tâche, ses dépendances (dans les deux sens), notes et rapports."""
        self.session.exec(delete(InterventionReport).where(InterventionReport.task_id == task.id))
        self.session.exec(delete(TaskNote).where(TaskNote.task_id == task.id))
        self.session.exec(
            delete(TaskDependency).where(
                or_(TaskDependency.task_id == task.id, TaskDependency.depends_on_task_id == task.id)
            )
        )
        # les sous-tâches remontent à la racine
        self.session.exec(update(Task).where(Task.parent_task_id == task.id).values(parent_task_id=None))
        self.session.delete(task)
        self.session.commit()


class TaskDependencyRepository(BaseRepository[TaskDependency]):
    model = TaskDependency

    def get_pair(self, task_id: int, depends_on_task_id: int) -> Optional[TaskDependency]:
        stmt = select(TaskDependency).where(
            TaskDependency.task_id == task_id,
            TaskDependency.depends_on_task_id == depends_on_task_id,
        )
        return self.session.exec(stmt).first()

    def list_for_tasks(self, task_ids: Iterable[int]) -> Sequence[DependencyOut]:
        task_ids = list(task_ids)
        if not task_ids:
            return []
        stmt = (
            select(TaskDependency, Task.title)
            .join(Task, Task.id == TaskDependency.depends_on_task_id)
            .where(TaskDependency.task_id.in_(task_ids))
            .order_by(TaskDependency.id)
        )
        return [
            DependencyOut(
                id=dep.id,
                task_id=dep.task_id,
                depends_on_task_id=dep.depends_on_task_id,
                depends_on_title=title,
                dependency_type=dep.dependency_type,
                lag=dep.lag,
            )
            for dep, title in self.session.exec(stmt).all()
        ]
