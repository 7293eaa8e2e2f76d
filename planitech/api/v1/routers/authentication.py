from fastapi import APIRouter, Depends, status

from planitech.api.v1.dependencies import get_auth_service, get_current_user
from planitech.db.models.users import User
from planitech.features.authentication.services import AuthService
from planitech.features.authentication.schemas import AuthOut, LoginIn, RegisterIn
from planitech.features.users.schemas import UserOut

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
    responses={401: {"description": "Unauthorized"}},
)

# -----------------------------
# Register
# -----------------------------
@router.post(
    "/register",
    summary="Créer un compte",
    description="Crée un compte `member` et retourne directement un token de session (24h).",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthOut,
)
def register(payload: RegisterIn, svc: AuthService = Depends(get_auth_service)):
    return svc.register(payload)

# -----------------------------
# Login
# -----------------------------
@router.post(
    "/login",
    summary="Se connecter",
    description="Connexion par nom d'utilisateur **ou** email.",
    response_model=AuthOut,
)
def login(payload: LoginIn, svc: AuthService = Depends(get_auth_service)):
    return svc.login(payload)

# -----------------------------
# Me
# -----------------------------
@router.get(
    "/me",
    summary="Utilisateur courant (depuis le token)",
    response_model=UserOut,
)
def me(user: User = Depends(get_current_user)):
    return UserOut.model_validate(user)
