from typing import List

from fastapi import APIRouter, Depends, status

from planitech.api.v1.dependencies import get_client_service, get_current_user, require_roles
from planitech.db.models.users import User
from planitech.features.clients.schemas import ClientIn, ClientOut
from planitech.features.clients.services import ClientService
from planitech.features.projects.schemas import ProjectOut
from planitech.security.access import Role

router = APIRouter(
    prefix="/clients",
    tags=["clients"],
    responses={404: {"description": "Not Found"}},
)

managers = require_roles(Role.ADMIN, Role.PROJECT_LEAD)
admin_only = require_roles(Role.ADMIN)

@router.get("", summary="Lister les clients", response_model=List[ClientOut])
def list_clients(_: User = Depends(get_current_user), svc: ClientService = Depends(get_client_service)):
    return svc.list_all()

@router.get("/{client_id}", summary="Détail d'un client", response_model=ClientOut)
def get_client(client_id: int, _: User = Depends(get_current_user), svc: ClientService = Depends(get_client_service)):
    return svc.get(client_id)

@router.get("/{client_id}/projects", summary="Projets d'un client", response_model=List[ProjectOut])
def list_client_projects(
    client_id: int,
    _: User = Depends(get_current_user),
    svc: ClientService = Depends(get_client_service),
):
    return svc.list_projects(client_id)

@router.post(
    "",
    summary="Créer un client (admin, chef de projet)",
    status_code=status.HTTP_201_CREATED,
    response_model=ClientOut,
)
def create_client(payload: ClientIn, user: User = Depends(managers), svc: ClientService = Depends(get_client_service)):
    return svc.create(user, payload)

@router.put("/{client_id}", summary="Modifier un client (admin, chef de projet)", response_model=ClientOut)
def update_client(
    client_id: int,
    payload: ClientIn,
    user: User = Depends(managers),
    svc: ClientService = Depends(get_client_service),
):
    return svc.update(user, client_id, payload)

@router.delete(
    "/{client_id}",
    summary="Supprimer un client (admin)",
    description="Refusé tant que des projets référencent le client.",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_client(client_id: int, user: User = Depends(admin_only), svc: ClientService = Depends(get_client_service)):
    svc.delete(user, client_id)
    return None
