"""
➡️ But : Contenir la logique métier autour des comptes utilisateurs.

UserService :

profil courant (lecture / mise à jour), recherche, tâches assignées ;

administration des comptes (liste, création, modification, suppression).

Les contrôles de rôle "admin only" sont posés par les dépendances du router.

🔹 Avantages :

Routes fines, règles métier regroupées et testables.
"""

import logging
from typing import Optional

from planitech.core.errors import ConflictError, NotFound, ValidationError
from planitech.db.models.users import User
from planitech.db.repositories.users import UserRepository
from planitech.db.repositories.tasks import TaskRepository
from planitech.features.tasks.schemas import TaskOut
from planitech.features.users.schemas import (
    ProfileUpdateIn,
    UserAdminOut,
    UserCreateIn,
    UserOut,
    UserSearchOut,
    UserUpdateIn,
)
from planitech.security.access import Role, STAFF_ROLES
from planitech.security.password import hash_password

logger = logging.getLogger(__name__)

SEARCH_MIN_LENGTH = 2
SEARCH_LIMIT = 10


def _staff_role(value: Optional[str], *, default: Optional[Role]) -> Optional[str]:
    if value is None:
        return default.value if default else None
    if value not in {r.value for r in STAFF_ROLES}:
        raise ValidationError("Invalid role specified")
    return value


class UserService:
    def __init__(self, repo: UserRepository, task_repo: TaskRepository):
        self.repo = repo
        self.task_repo = task_repo

    # -------- Profil courant --------

    def me(self, user: User) -> UserOut:
        return UserOut.model_validate(user)

    def update_me(self, user: User, payload: ProfileUpdateIn) -> UserOut:
        changes = payload.model_dump(exclude_none=True)
        if "email" in changes and self.repo.username_or_email_taken(email=changes["email"], exclude_id=user.id):
            raise ConflictError("Email already exists")
        if changes:
            user = self.repo.update(user, **changes)
            logger.info("Profile updated: user %s (%s)", user.id, ", ".join(sorted(changes)))
        return UserOut.model_validate(user)

    def search(self, q: Optional[str]) -> list[UserSearchOut]:
        q = (q or "").strip()
        if len(q) < SEARCH_MIN_LENGTH:
            raise ValidationError("Search query must be at least 2 characters")
        return [UserSearchOut.model_validate(u) for u in self.repo.search(q, limit=SEARCH_LIMIT)]

    def my_tasks(self, user: User) -> list[TaskOut]:
        return self.task_repo.list_open_assigned_to(user.id)

    # -------- Administration --------

    def list_users(self) -> list[UserAdminOut]:
        return self.repo.list_with_creator()

    def create_user(self, admin: User, payload: UserCreateIn) -> UserOut:
        role = _staff_role(payload.role, default=Role.TECHNICIAN)
        if self.repo.username_or_email_taken(username=payload.username, email=payload.email):
            raise ConflictError("Username or email already exists")
        user = self.repo.create(
            username=payload.username,
            email=payload.email,
            hashed_password=hash_password(payload.password),
            first_name=payload.first_name,
            last_name=payload.last_name,
            role=role,
            created_by=admin.id,
        )
        logger.info("Admin %s created user %s (role=%s)", admin.id, user.id, role)
        return UserOut.model_validate(user)

    def update_user(self, admin: User, user_id: int, payload: UserUpdateIn) -> UserOut:
        user = self.repo.get(user_id)
        if not user:
            raise NotFound("User not found")
        changes = payload.model_dump(exclude_none=True)
        if "role" in changes:
            changes["role"] = _staff_role(changes["role"], default=None)
        if ("username" in changes or "email" in changes) and self.repo.username_or_email_taken(
            username=changes.get("username"), email=changes.get("email"), exclude_id=user.id
        ):
            raise ConflictError("Username or email already exists")
        password = changes.pop("password", None)
        if password:
            changes["hashed_password"] = hash_password(password)
        user = self.repo.update(user, **changes)
        logger.info("Admin %s updated user %s", admin.id, user.id)
        return UserOut.model_validate(user)

    def delete_user(self, admin: User, user_id: int) -> None:
        if admin.id == user_id:
            raise ValidationError("Cannot delete your own account")
        user = self.repo.get(user_id)
        if not user:
            raise NotFound("User not found")
        if self.repo.is_referenced(user_id):
            raise ConflictError("User is referenced by existing records and cannot be deleted")
        self.repo.delete(user)
        logger.info("Admin %s deleted user %s", admin.id, user_id)
