import logging

from planitech.core.errors import AuthError, ConflictError
from planitech.db.models.users import User
from planitech.db.repositories.users import UserRepository
from planitech.security.access import Role
from planitech.security.password import verify_password, hash_password
from planitech.security.tokens import JWTSettings, create_access_token, verify_token
from planitech.features.authentication.schemas import AuthOut, LoginIn, RegisterIn
from planitech.features.users.schemas import UserOut

logger = logging.getLogger(__name__)


class AuthService:
    """
    Service d'authentification : orchestre le repository users + les tokens.
    Ne contient pas d'accès SQL direct et lève des erreurs métier (planitech.core.errors).
    """

    def __init__(self, *, user_repo: UserRepository, jwt_settings: JWTSettings):
        self.user_repo = user_repo
        self.jwt = jwt_settings

    def _auth_out(self, user: User, message: str) -> AuthOut:
        token = create_access_token(
            user_id=user.id,
            username=user.username,
            email=user.email,
            settings=self.jwt,
        )
        return AuthOut(
            message=message,
            token=token,
            expires_in=int(self.jwt.ttl.total_seconds()),
            user=UserOut.model_validate(user),
        )

    # ---------- Register ----------
    def register(self, payload: RegisterIn) -> AuthOut:
        if self.user_repo.username_or_email_taken(username=payload.username, email=payload.email):
            raise ConflictError("Username or email already exists")
        user = self.user_repo.create(
            username=payload.username,
            email=payload.email,
            hashed_password=hash_password(payload.password),
            first_name=payload.first_name,
            last_name=payload.last_name,
            role=Role.MEMBER.value,
        )
        logger.info("User registered: %s (id=%s)", user.username, user.id)
        return self._auth_out(user, "User created successfully")

    # ---------- Login ----------
    def login(self, payload: LoginIn) -> AuthOut:
        user = self.user_repo.get_by_login(payload.username)
        if not user or not verify_password(payload.password, user.hashed_password):
            # Ne pas révéler si l'utilisateur existe
            logger.warning("Failed login attempt for %r", payload.username)
            raise AuthError("Invalid credentials")
        logger.info("User logged in: %s", user.username)
        return self._auth_out(user, "Login successful")

    # ---------- Current user depuis access token ----------
    def get_current_user(self, *, access_token: str) -> User:
        try:
            identity = verify_token(access_token, self.jwt)
        except AuthError as e:
            logger.warning("Rejected token: %s", e.message)
            raise
        user = self.user_repo.get(identity.user_id)
        if not user:
            logger.warning("Token for unknown user id=%s", identity.user_id)
            raise AuthError("User not found")
        return user
