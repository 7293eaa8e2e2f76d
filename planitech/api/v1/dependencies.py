"""
➡️ But : Centraliser les dépendances réutilisables des routes.

Exemples :

get_project_service() : crée un ProjectService à partir d'une session DB.

get_current_user() : vérifie le token Bearer et charge l'utilisateur (avec son rôle).

require_roles(...) : garde "rôle requis" posée au niveau de la route.

🔹 Avantages :

Routes plus propres (pas de code dupliqué).

Facile à injecter dans plusieurs endpoints (Depends()).
"""

import logging
from typing import Optional

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from planitech.core.config import jwt_settings
from planitech.core.errors import AccessDenied, AuthError
from planitech.db.models.users import User
from planitech.db.session import get_session

from planitech.db.repositories.users import UserRepository
from planitech.db.repositories.clients import ClientRepository
from planitech.db.repositories.projects import ProjectRepository, ProjectMemberRepository
from planitech.db.repositories.tasks import TaskRepository, TaskDependencyRepository
from planitech.db.repositories.reports import InterventionReportRepository
from planitech.db.repositories.notes import TaskNoteRepository
from planitech.db.repositories.activity_log import ActivityLogRepository

from planitech.features.authentication.services import AuthService
from planitech.features.users.services import UserService
from planitech.features.access.services import ProjectAccessService
from planitech.features.activity.services import ActivityService
from planitech.features.projects.services import ProjectService
from planitech.features.tasks.services import TaskService
from planitech.features.clients.services import ClientService
from planitech.features.reports.services import ReportService
from planitech.features.notes.services import NoteService

from planitech.realtime.notifier import Notifier
from planitech.security.access import Role

logger = logging.getLogger(__name__)


# -----------------------------
# Realtime
# -----------------------------
def get_notifier(request: Request) -> Optional[Notifier]:
    # posé par le lifespan ; absent si l'app tourne sans lifespan
    return getattr(request.app.state, "notifier", None)


# -----------------------------
# Repositories
# -----------------------------
def get_user_repository(session: Session = Depends(get_session)) -> UserRepository:
    return UserRepository(session)

def get_client_repository(session: Session = Depends(get_session)) -> ClientRepository:
    return ClientRepository(session)

def get_project_repository(session: Session = Depends(get_session)) -> ProjectRepository:
    return ProjectRepository(session)

def get_project_member_repository(session: Session = Depends(get_session)) -> ProjectMemberRepository:
    return ProjectMemberRepository(session)

def get_task_repository(session: Session = Depends(get_session)) -> TaskRepository:
    return TaskRepository(session)

def get_task_dependency_repository(session: Session = Depends(get_session)) -> TaskDependencyRepository:
    return TaskDependencyRepository(session)

def get_report_repository(session: Session = Depends(get_session)) -> InterventionReportRepository:
    return InterventionReportRepository(session)

def get_note_repository(session: Session = Depends(get_session)) -> TaskNoteRepository:
    return TaskNoteRepository(session)

def get_activity_service(session: Session = Depends(get_session)) -> ActivityService:
    return ActivityService(ActivityLogRepository(session))


# -----------------------------
# Auth
# -----------------------------
def get_auth_service(user_repo: UserRepository = Depends(get_user_repository)) -> AuthService:
    return AuthService(user_repo=user_repo, jwt_settings=jwt_settings)


bearer_scheme = HTTPBearer(auto_error=False)

def get_access_token_from_bearer(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> str:
    if not credentials or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthError("Access token required")
    return credentials.credentials


def get_current_user(
    access_token: str = Depends(get_access_token_from_bearer),
    auth_svc: AuthService = Depends(get_auth_service),
) -> User:
    return auth_svc.get_current_user(access_token=access_token)


def require_roles(*roles: Role):
    """
    Garde de rôle : Depends(require_roles(Role.ADMIN, Role.PROJECT_LEAD)).
    Retourne l'utilisateur courant si son rôle est autorisé, sinon 403.
    """
    allowed = set(roles)

    def _guard(user: User = Depends(get_current_user)) -> User:
        if Role.parse(user.role) not in allowed:
            logger.info("Role %s refused on guarded route (allowed: %s)", user.role, sorted(r.value for r in allowed))
            raise AccessDenied("Insufficient privileges")
        return user

    return _guard


# -----------------------------
# Services
# -----------------------------
def get_user_service(
    repo: UserRepository = Depends(get_user_repository),
    task_repo: TaskRepository = Depends(get_task_repository),
) -> UserService:
    return UserService(repo, task_repo)

def get_project_access_service(
    project_repo: ProjectRepository = Depends(get_project_repository),
    member_repo: ProjectMemberRepository = Depends(get_project_member_repository),
) -> ProjectAccessService:
    return ProjectAccessService(project_repo, member_repo)

def get_project_service(
    repo: ProjectRepository = Depends(get_project_repository),
    member_repo: ProjectMemberRepository = Depends(get_project_member_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    client_repo: ClientRepository = Depends(get_client_repository),
    access_svc: ProjectAccessService = Depends(get_project_access_service),
    activity: ActivityService = Depends(get_activity_service),
    notifier: Optional[Notifier] = Depends(get_notifier),
) -> ProjectService:
    return ProjectService(
        repo=repo,
        member_repo=member_repo,
        user_repo=user_repo,
        client_repo=client_repo,
        access_svc=access_svc,
        activity=activity,
        notifier=notifier,
    )

def get_task_service(
    repo: TaskRepository = Depends(get_task_repository),
    dep_repo: TaskDependencyRepository = Depends(get_task_dependency_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    access_svc: ProjectAccessService = Depends(get_project_access_service),
    activity: ActivityService = Depends(get_activity_service),
    notifier: Optional[Notifier] = Depends(get_notifier),
) -> TaskService:
    return TaskService(
        repo=repo,
        dep_repo=dep_repo,
        user_repo=user_repo,
        access_svc=access_svc,
        activity=activity,
        notifier=notifier,
    )

def get_client_service(
    repo: ClientRepository = Depends(get_client_repository),
    project_repo: ProjectRepository = Depends(get_project_repository),
) -> ClientService:
    return ClientService(repo, project_repo)

def get_report_service(
    repo: InterventionReportRepository = Depends(get_report_repository),
    task_repo: TaskRepository = Depends(get_task_repository),
    access_svc: ProjectAccessService = Depends(get_project_access_service),
    activity: ActivityService = Depends(get_activity_service),
    notifier: Optional[Notifier] = Depends(get_notifier),
) -> ReportService:
    return ReportService(
        repo=repo,
        task_repo=task_repo,
        access_svc=access_svc,
        activity=activity,
        notifier=notifier,
    )

def get_note_service(
    repo: TaskNoteRepository = Depends(get_note_repository),
    task_repo: TaskRepository = Depends(get_task_repository),
    access_svc: ProjectAccessService = Depends(get_project_access_service),
    activity: ActivityService = Depends(get_activity_service),
    notifier: Optional[Notifier] = Depends(get_notifier),
) -> NoteService:
    return NoteService(
        repo=repo,
        task_repo=task_repo,
        access_svc=access_svc,
        activity=activity,
        notifier=notifier,
    )
