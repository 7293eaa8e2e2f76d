from typing import List

from fastapi import APIRouter, Depends, status

from planitech.api.v1.dependencies import get_current_user, get_project_service
from planitech.db.models.users import User
from planitech.features.projects.schemas import (
    ActivityOut,
    MemberAddIn,
    ProjectCreateIn,
    ProjectDetailOut,
    ProjectListItemOut,
    ProjectMemberOut,
    ProjectOut,
    ProjectUpdateIn,
)
from planitech.features.projects.services import ProjectService

router = APIRouter(
    prefix="/projects",
    tags=["projects"],
    responses={404: {"description": "Not Found"}, 403: {"description": "Forbidden"}},
)

# -----------------------------
# List / create
# -----------------------------
@router.get(
    "",
    summary="Lister mes projets",
    description="Admin, chef de projet, support et technicien voient tous les projets ; "
                "les membres voient ceux qu'ils ont créés ou rejoints.",
    response_model=List[ProjectListItemOut],
)
def list_projects(user: User = Depends(get_current_user), svc: ProjectService = Depends(get_project_service)):
    return svc.list_for_user(user)

@router.post(
    "",
    summary="Créer un projet",
    status_code=status.HTTP_201_CREATED,
    response_model=ProjectOut,
)
def create_project(
    payload: ProjectCreateIn,
    user: User = Depends(get_current_user),
    svc: ProjectService = Depends(get_project_service),
):
    return svc.create(user, payload)

# -----------------------------
# Detail / update / delete
# -----------------------------
@router.get(
    "/{project_id}",
    summary="Détail d'un projet",
    description="Inclut le créateur, le client, les membres et le descripteur d'accès de l'appelant.",
    response_model=ProjectDetailOut,
)
def get_project(
    project_id: int,
    user: User = Depends(get_current_user),
    svc: ProjectService = Depends(get_project_service),
):
    return svc.get_detail(user, project_id)

@router.put(
    "/{project_id}",
    summary="Modifier un projet (propriétaire ou admin)",
    response_model=ProjectOut,
)
def update_project(
    project_id: int,
    payload: ProjectUpdateIn,
    user: User = Depends(get_current_user),
    svc: ProjectService = Depends(get_project_service),
):
    return svc.update(user, project_id, payload)

@router.delete(
    "/{project_id}",
    summary="Supprimer un projet (propriétaire)",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_project(
    project_id: int,
    user: User = Depends(get_current_user),
    svc: ProjectService = Depends(get_project_service),
):
    svc.delete(user, project_id)
    return None

# -----------------------------
# Members / activity
# -----------------------------
@router.post(
    "/{project_id}/members",
    summary="Ajouter un membre (propriétaire)",
    status_code=status.HTTP_201_CREATED,
    response_model=ProjectMemberOut,
)
def add_member(
    project_id: int,
    payload: MemberAddIn,
    user: User = Depends(get_current_user),
    svc: ProjectService = Depends(get_project_service),
):
    return svc.add_member(user, project_id, payload)

@router.get(
    "/{project_id}/activity",
    summary="Journal d'activité (100 dernières entrées)",
    response_model=List[ActivityOut],
)
def list_activity(
    project_id: int,
    user: User = Depends(get_current_user),
    svc: ProjectService = Depends(get_project_service),
):
    return svc.list_activity(user, project_id)
