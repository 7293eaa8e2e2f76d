from typing import List

from fastapi import APIRouter, Depends, status

from planitech.api.v1.dependencies import get_user_service, require_roles
from planitech.db.models.users import User
from planitech.features.users.schemas import UserAdminOut, UserCreateIn, UserOut, UserUpdateIn
from planitech.features.users.services import UserService
from planitech.security.access import Role

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    responses={403: {"description": "Admin only"}},
)

admin_only = require_roles(Role.ADMIN)

@router.get(
    "/users",
    summary="Lister les comptes",
    response_model=List[UserAdminOut],
)
def list_users(_: User = Depends(admin_only), svc: UserService = Depends(get_user_service)):
    return svc.list_users()

@router.post(
    "/users",
    summary="Créer un compte",
    description="Rôle parmi admin, chef_projet, technicien, support (défaut : technicien).",
    status_code=status.HTTP_201_CREATED,
    response_model=UserOut,
)
def create_user(
    payload: UserCreateIn,
    admin: User = Depends(admin_only),
    svc: UserService = Depends(get_user_service),
):
    return svc.create_user(admin, payload)

@router.put(
    "/users/{user_id}",
    summary="Modifier un compte",
    response_model=UserOut,
)
def update_user(
    user_id: int,
    payload: UserUpdateIn,
    admin: User = Depends(admin_only),
    svc: UserService = Depends(get_user_service),
):
    return svc.update_user(admin, user_id, payload)

@router.delete(
    "/users/{user_id}",
    summary="Supprimer un compte",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_user(
    user_id: int,
    admin: User = Depends(admin_only),
    svc: UserService = Depends(get_user_service),
):
    svc.delete_user(admin, user_id)
    return None
