import logging
from typing import Tuple

from planitech.core.errors import AccessDenied, NotFound
from planitech.db.models.projects import Project
from planitech.db.models.users import User
from planitech.db.repositories.projects import ProjectMemberRepository, ProjectRepository
from planitech.security.access import ProjectAccess, evaluate_project_access

logger = logging.getLogger(__name__)


class ProjectAccessService:
    """
    Résout l'accès d'un utilisateur à un projet :
    charge le projet (404 si absent, quel que soit le rôle), la ligne
    d'appartenance éventuelle, puis délègue à `evaluate_project_access`.
    """

    def __init__(self, project_repo: ProjectRepository, member_repo: ProjectMemberRepository):
        self.project_repo = project_repo
        self.member_repo = member_repo

    def get_project(self, project_id: int) -> Project:
        project = self.project_repo.get(project_id)
        if not project:
            raise NotFound("Project not found")
        return project

    def resolve_with_project(self, user: User, project_id: int) -> Tuple[Project, ProjectAccess]:
        project = self.get_project(project_id)
        membership = self.member_repo.get_for(project_id, user.id)
        try:
            access = evaluate_project_access(
                user_id=user.id,
                role=user.role,
                project=project,
                membership=membership,
            )
        except AccessDenied:
            logger.info("Access denied: user %s (%s) on project %s", user.id, user.role, project_id)
            raise
        return project, access

    def resolve(self, user: User, project_id: int) -> ProjectAccess:
        return self.resolve_with_project(user, project_id)[1]
