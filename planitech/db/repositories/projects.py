from typing import Optional, Sequence

from sqlalchemy import delete, null, update
from sqlmodel import select, or_

from planitech.db.repositories.base import BaseRepository
from planitech.db.models.projects import Project, ProjectMember
from planitech.db.models.tasks import Task, TaskDependency
from planitech.db.models.reports import InterventionReport
from planitech.db.models.notes import TaskNote
from planitech.db.models.activity_log import ActivityLog
from planitech.db.models.users import User
from planitech.db.models.clients import Client
from planitech.features.projects.schemas import ProjectListItemOut, ProjectMemberOut, ProjectOut
from planitech.security.access import Permissions


class ProjectRepository(BaseRepository[Project]):
    """CRUD Projects + requêtes spécifiques (listes jointes, suppression en cascade)."""
    model = Project

    # ---------- HELPERS ----------

    def _to_list_item(self, row) -> ProjectListItemOut:
        project, creator_name, member_role = row
        return ProjectListItemOut(
            **ProjectOut.model_validate(project).model_dump(),
            created_by_name=creator_name,
            member_role=member_role,
        )

    # ---------- LISTES ----------

    def list_all(self) -> list[ProjectListItemOut]:
        """Tous les projets (rôles ayant la lecture globale), plus récents d'abord."""
        stmt = (
            select(Project, User.username, null().label("member_role"))
            .join(User, User.id == Project.created_by, isouter=True)
            .order_by(Project.updated_at.desc(), Project.id.desc())
        )
        return [self._to_list_item(r) for r in self.session.exec(stmt).all()]

    def list_for_member(self, user_id: int) -> list[ProjectListItemOut]:
        """Projets créés par l'utilisateur ou dont il est membre."""
        stmt = (
            select(Project, User.username, ProjectMember.role)
            .join(User, User.id == Project.created_by, isouter=True)
            .join(
                ProjectMember,
                (ProjectMember.project_id == Project.id) & (ProjectMember.user_id == user_id),
                isouter=True,
            )
            .where(or_(Project.created_by == user_id, ProjectMember.user_id == user_id))
            .order_by(Project.updated_at.desc(), Project.id.desc())
        )
        return [self._to_list_item(r) for r in self.session.exec(stmt).all()]

    def list_by_client(self, client_id: int) -> Sequence[Project]:
        stmt = (
            select(Project)
            .where(Project.client_id == client_id)
            .order_by(Project.created_at.desc(), Project.id.desc())
        )
        return self.session.exec(stmt).all()

    # ---------- DÉTAIL ----------

    def creator_and_client_names(self, project: Project) -> tuple[Optional[str], Optional[str]]:
        creator = self.session.get(User, project.created_by)
        client = self.session.get(Client, project.client_id) if project.client_id else None
        return (creator.username if creator else None, client.name if client else None)

    # ---------- SUPPRESSION ----------

    def delete_cascade(self, project: Project) -> None:
        """
        Supprime le projet et tout ce qui en dépend (tâches, dépendances, notes,
        rapports, membres, journal). Un seul commit à la fin.
        """
        task_ids = select(Task.id).where(Task.project_id == project.id)
        self.session.exec(delete(InterventionReport).where(InterventionReport.task_id.in_(task_ids)))
        self.session.exec(delete(TaskNote).where(TaskNote.task_id.in_(task_ids)))
        self.session.exec(
            delete(TaskDependency).where(
                or_(TaskDependency.task_id.in_(task_ids), TaskDependency.depends_on_task_id.in_(task_ids))
            )
        )
        # casse l'arbre parent/enfant avant de supprimer les tâches
        self.session.exec(update(Task).where(Task.project_id == project.id).values(parent_task_id=None))
        self.session.exec(delete(Task).where(Task.project_id == project.id))
        self.session.exec(delete(ProjectMember).where(ProjectMember.project_id == project.id))
        self.session.exec(delete(ActivityLog).where(ActivityLog.project_id == project.id))
        self.session.delete(project)
        self.session.commit()


class ProjectMemberRepository(BaseRepository[ProjectMember]):
    model = ProjectMember

    def get_for(self, project_id: int, user_id: int) -> Optional[ProjectMember]:
        stmt = select(ProjectMember).where(
            ProjectMember.project_id == project_id,
            ProjectMember.user_id == user_id,
        )
        return self.session.exec(stmt).first()

    def list_for_project(self, project_id: int) -> list[ProjectMemberOut]:
        stmt = (
            select(ProjectMember, User.username)
            .join(User, User.id == ProjectMember.user_id)
            .where(ProjectMember.project_id == project_id)
            .order_by(ProjectMember.id)
        )
        return [
            ProjectMemberOut(
                user_id=member.user_id,
                username=username,
                role=member.role,
                permissions=Permissions.from_recorded(member.permissions).as_dict(),
            )
            for member, username in self.session.exec(stmt).all()
        ]
