"""
➡️ But : Logique métier des projets (liste, détail, CRUD, membres, journal).

Chaque opération suit le même pipeline :
    accès résolu (ProjectAccessService) -> persistance -> ligne d'audit -> événement temps réel

🔹 Avantages :

Les routes ne font qu'appeler le service ; aucune règle d'accès dans la couche HTTP.
"""

import logging
from typing import Optional

from planitech.core.errors import AccessDenied, ConflictError, NotFound
from planitech.db.models.users import User
from planitech.db.repositories.clients import ClientRepository
from planitech.db.repositories.projects import ProjectMemberRepository, ProjectRepository
from planitech.db.repositories.users import UserRepository
from planitech.features.access.services import ProjectAccessService
from planitech.features.activity.services import ActivityService
from planitech.features.projects.schemas import (
    ActivityOut,
    MemberAddIn,
    ProjectAccessOut,
    ProjectCreateIn,
    ProjectDetailOut,
    ProjectListItemOut,
    ProjectMemberOut,
    ProjectOut,
    ProjectUpdateIn,
)
from planitech.realtime.notifier import Notifier
from planitech.security.access import BLANKET_READ_ROLES, Permission, Permissions, Role

logger = logging.getLogger(__name__)

PROJECT_UPDATED = "project-updated"

# colonnes non nulles : un None explicite est ignoré
_REQUIRED_FIELDS = ("title", "status")


class ProjectService:
    def __init__(
        self,
        *,
        repo: ProjectRepository,
        member_repo: ProjectMemberRepository,
        user_repo: UserRepository,
        client_repo: ClientRepository,
        access_svc: ProjectAccessService,
        activity: ActivityService,
        notifier: Optional[Notifier] = None,
    ):
        self.repo = repo
        self.member_repo = member_repo
        self.user_repo = user_repo
        self.client_repo = client_repo
        self.access_svc = access_svc
        self.activity = activity
        self.notifier = notifier

    # -------- Helpers --------

    def _publish(self, project_id: int, payload: dict) -> None:
        if self.notifier is not None:
            self.notifier.publish(project_id, PROJECT_UPDATED, payload)

    def _check_client(self, client_id: Optional[int]) -> None:
        if client_id is not None and not self.client_repo.get(client_id):
            raise NotFound("Client not found")

    # -------- Reads --------

    def list_for_user(self, user: User) -> list[ProjectListItemOut]:
        if Role.parse(user.role) in BLANKET_READ_ROLES:
            return self.repo.list_all()
        return self.repo.list_for_member(user.id)

    def get_detail(self, user: User, project_id: int) -> ProjectDetailOut:
        project, access = self.access_svc.resolve_with_project(user, project_id)
        access.require(Permission.READ)
        creator_name, client_name = self.repo.creator_and_client_names(project)
        return ProjectDetailOut(
            **ProjectOut.model_validate(project).model_dump(),
            created_by_name=creator_name,
            client_name=client_name,
            members=self.member_repo.list_for_project(project.id),
            access=ProjectAccessOut(
                is_owner=access.is_owner,
                role=access.role,
                permissions=access.permissions.as_dict(),
            ),
        )

    def list_activity(self, user: User, project_id: int) -> list[ActivityOut]:
        self.access_svc.resolve(user, project_id).require(Permission.READ)
        return self.activity.list_for_project(project_id)

    # -------- Writes --------

    def create(self, user: User, payload: ProjectCreateIn) -> ProjectOut:
        self._check_client(payload.client_id)
        project = self.repo.create(created_by=user.id, **payload.model_dump(exclude_none=True))
        self.activity.record(
            project_id=project.id,
            user_id=user.id,
            action="created",
            entity_type="project",
            entity_id=project.id,
            changes={"title": project.title},
        )
        logger.info("Project %s created by user %s", project.id, user.id)
        out = ProjectOut.model_validate(project)
        self._publish(project.id, {"action": "created", "project": out.model_dump(mode="json")})
        return out

    def update(self, user: User, project_id: int, payload: ProjectUpdateIn) -> ProjectOut:
        project, access = self.access_svc.resolve_with_project(user, project_id)
        if not access.can_edit_project:
            raise AccessDenied("Insufficient permissions")
        changes = payload.model_dump(exclude_unset=True)
        for key in _REQUIRED_FIELDS:
            if key in changes and changes[key] is None:
                del changes[key]
        if "client_id" in changes:
            self._check_client(changes["client_id"])
        project = self.repo.update(project, **changes)
        self.activity.record(
            project_id=project.id,
            user_id=user.id,
            action="updated",
            entity_type="project",
            entity_id=project.id,
            changes=changes,
        )
        logger.info("Project %s updated by user %s", project.id, user.id)
        out = ProjectOut.model_validate(project)
        self._publish(project.id, {"action": "updated", "project": out.model_dump(mode="json")})
        return out

    def delete(self, user: User, project_id: int) -> None:
        project, access = self.access_svc.resolve_with_project(user, project_id)
        if not access.can_delete_project:
            raise AccessDenied("Only project owner can delete the project")
        # le journal du projet part avec lui : la suppression est tracée dans les logs
        self.repo.delete_cascade(project)
        logger.info("Project %s deleted by user %s", project_id, user.id)
        self._publish(project_id, {"action": "deleted", "projectId": project_id})

    def add_member(self, user: User, project_id: int, payload: MemberAddIn) -> ProjectMemberOut:
        _, access = self.access_svc.resolve_with_project(user, project_id)
        if not access.is_owner:
            raise AccessDenied("Only project owner can add members")
        member_user = self.user_repo.get_by_username(payload.username)
        if not member_user:
            raise NotFound("User not found")
        if self.member_repo.get_for(project_id, member_user.id):
            raise ConflictError("User is already a member of this project")

        recorded = payload.permissions.model_dump(exclude_none=True) if payload.permissions else None
        permissions = Permissions.from_recorded(recorded).as_dict()
        self.member_repo.create(
            project_id=project_id,
            user_id=member_user.id,
            role=payload.role,
            permissions=permissions,
        )
        self.activity.record(
            project_id=project_id,
            user_id=user.id,
            action="member_added",
            entity_type="project_member",
            entity_id=member_user.id,
            changes={"username": member_user.username, "role": payload.role, "permissions": permissions},
        )
        logger.info("User %s added to project %s by user %s", member_user.id, project_id, user.id)
        out = ProjectMemberOut(
            user_id=member_user.id,
            username=member_user.username,
            role=payload.role,
            permissions=permissions,
        )
        self._publish(project_id, {"action": "member_added", "projectId": project_id, "member": out.model_dump()})
        return out
