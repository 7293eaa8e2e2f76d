from typing import List

from fastapi import APIRouter, Depends, status

from planitech.api.v1.dependencies import get_current_user, get_task_service
from planitech.db.models.users import User
from planitech.features.tasks.schemas import DependencyCreateIn, DependencyOut, TaskCreateIn, TaskOut, TaskUpdateIn
from planitech.features.tasks.services import TaskService

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
    responses={404: {"description": "Not Found"}, 403: {"description": "Forbidden"}},
)

@router.get(
    "/project/{project_id}",
    summary="Tâches d'un projet (avec dépendances)",
    response_model=List[TaskOut],
)
def list_project_tasks(
    project_id: int,
    user: User = Depends(get_current_user),
    svc: TaskService = Depends(get_task_service),
):
    return svc.list_for_project(user, project_id)

@router.post(
    "/project/{project_id}",
    summary="Créer une tâche",
    status_code=status.HTTP_201_CREATED,
    response_model=TaskOut,
)
def create_task(
    project_id: int,
    payload: TaskCreateIn,
    user: User = Depends(get_current_user),
    svc: TaskService = Depends(get_task_service),
):
    return svc.create(user, project_id, payload)

@router.get(
    "/{task_id}",
    summary="Détail d'une tâche",
    response_model=TaskOut,
)
def get_task(task_id: int, user: User = Depends(get_current_user), svc: TaskService = Depends(get_task_service)):
    return svc.get(user, task_id)

@router.put(
    "/{task_id}",
    summary="Modifier une tâche",
    description="Mise à jour partielle : seuls les champs envoyés sont modifiés.",
    response_model=TaskOut,
)
def update_task(
    task_id: int,
    payload: TaskUpdateIn,
    user: User = Depends(get_current_user),
    svc: TaskService = Depends(get_task_service),
):
    return svc.update(user, task_id, payload)

@router.delete(
    "/{task_id}",
    summary="Supprimer une tâche",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_task(task_id: int, user: User = Depends(get_current_user), svc: TaskService = Depends(get_task_service)):
    svc.delete(user, task_id)
    return None

@router.post(
    "/{task_id}/dependencies",
    summary="Ajouter une dépendance",
    description="Les deux tâches doivent appartenir au même projet.",
    status_code=status.HTTP_201_CREATED,
    response_model=DependencyOut,
)
def add_dependency(
    task_id: int,
    payload: DependencyCreateIn,
    user: User = Depends(get_current_user),
    svc: TaskService = Depends(get_task_service),
):
    return svc.add_dependency(user, task_id, payload)
