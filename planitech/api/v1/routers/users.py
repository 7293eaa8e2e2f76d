"""
➡️ But : Définir les endpoints "profil" de l'utilisateur connecté.

Réceptionne les requêtes HTTP, appelle UserService, retourne les schémas de sortie.
Les routes ne contiennent ni SQL ni logique métier.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from planitech.api.v1.dependencies import get_current_user, get_user_service
from planitech.db.models.users import User
from planitech.features.tasks.schemas import TaskOut
from planitech.features.users.schemas import ProfileUpdateIn, UserOut, UserSearchOut
from planitech.features.users.services import UserService

router = APIRouter(
    prefix="/users",
    tags=["users"],
    responses={404: {"description": "Not Found"}},
)

@router.get(
    "/me",
    summary="Mon profil",
    response_model=UserOut,
)
def get_me(user: User = Depends(get_current_user), svc: UserService = Depends(get_user_service)):
    return svc.me(user)

@router.put(
    "/me",
    summary="Mettre à jour mon profil",
    description="Prénom, nom et email uniquement. Le rôle ne se change que via /admin.",
    response_model=UserOut,
)
def update_me(
    payload: ProfileUpdateIn,
    user: User = Depends(get_current_user),
    svc: UserService = Depends(get_user_service),
):
    return svc.update_me(user, payload)

@router.get(
    "/me/tasks",
    summary="Mes tâches en cours",
    description="Tâches assignées non terminées, échéance la plus proche d'abord.",
    response_model=List[TaskOut],
)
def my_tasks(user: User = Depends(get_current_user), svc: UserService = Depends(get_user_service)):
    return svc.my_tasks(user)

@router.get(
    "/search",
    summary="Rechercher des utilisateurs",
    description="Au moins 2 caractères ; 10 résultats maximum.",
    response_model=List[UserSearchOut],
)
def search(
    q: Optional[str] = Query(None, description="Texte recherché (username, email, nom)"),
    _: User = Depends(get_current_user),
    svc: UserService = Depends(get_user_service),
):
    return svc.search(q)
