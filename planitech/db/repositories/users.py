"""
➡️ But : Encapsuler toutes les opérations de base de données.

UserRepository : CRUD (create, read, update, delete) sur la table users.

Ne contient aucune logique métier, juste de la persistance.

🔹 Avantages :

Réutilisable (les services n'ont pas à savoir comment la DB fonctionne).

Testable indépendamment (mock du repo sans base réelle).
"""

from __future__ import annotations

from typing import Optional, Sequence
from sqlalchemy.orm import aliased
from sqlmodel import select, or_, func

from planitech.db.repositories.base import BaseRepository
from planitech.db.models.users import User
from planitech.db.models.clients import Client
from planitech.db.models.projects import Project, ProjectMember
from planitech.db.models.tasks import Task
from planitech.db.models.reports import InterventionReport
from planitech.db.models.notes import TaskNote
from planitech.db.models.activity_log import ActivityLog
from planitech.features.users.schemas import UserAdminOut

class UserRepository(BaseRepository[User]):
    """
    Repository pour la table users.
    Hérite du CRUD générique de BaseRepository.
    Contient uniquement les requêtes spécifiques à User.
    """
    model = User

    def get_by_username(self, username: str) -> Optional[User]:
        """Retourne un utilisateur par son nom d'utilisateur."""
        return self.session.exec(
            select(self.model).where(self.model.username == username)
        ).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.session.exec(
            select(self.model).where(self.model.email == email)
        ).first()

    def get_by_login(self, login: str) -> Optional[User]:
        """Connexion possible par username OU email."""
        return self.session.exec(
            select(self.model).where(or_(self.model.username == login, self.model.email == login))
        ).first()

    def username_or_email_taken(
        self, *, username: Optional[str] = None, email: Optional[str] = None, exclude_id: Optional[int] = None
    ) -> bool:
        clauses = []
        if username is not None:
            clauses.append(self.model.username == username)
        if email is not None:
            clauses.append(self.model.email == email)
        if not clauses:
            return False
        stmt = select(func.count(self.model.id)).where(or_(*clauses))
        if exclude_id is not None:
            stmt = stmt.where(self.model.id != exclude_id)
        return self.session.exec(stmt).one() > 0

    def search(self, q: str, *, limit: int = 10) -> Sequence[User]:
        like = f"%{q}%"
        stmt = (
            select(self.model)
            .where(
                or_(
                    self.model.username.ilike(like),
                    self.model.email.ilike(like),
                    self.model.first_name.ilike(like),
                    self.model.last_name.ilike(like),
                )
            )
            .order_by(self.model.username)
            .limit(limit)
        )
        return self.session.exec(stmt).all()

    def list_with_creator(self) -> list[UserAdminOut]:
        """Liste admin : plus récents d'abord, avec le nom du créateur."""
        creator = aliased(User)
        stmt = (
            select(User, creator.username.label("created_by_username"))
            .join(creator, creator.id == User.created_by, isouter=True)
            .order_by(User.created_at.desc(), User.id.desc())
        )
        rows = self.session.exec(stmt).all()
        return [
            UserAdminOut.model_validate(user).model_copy(update={"created_by_username": creator_name})
            for user, creator_name in rows
        ]

    def is_referenced(self, user_id: int) -> bool:
        """True si l'utilisateur apparaît dans des données métier ou l'historique d'audit."""
        checks = (
            select(Project.id).where(Project.created_by == user_id),
            select(ProjectMember.id).where(ProjectMember.user_id == user_id),
            select(Task.id).where(or_(Task.created_by == user_id, Task.assigned_to == user_id)),
            select(InterventionReport.id).where(InterventionReport.technician_id == user_id),
            select(TaskNote.id).where(TaskNote.user_id == user_id),
            select(ActivityLog.id).where(ActivityLog.user_id == user_id),
            select(Client.id).where(Client.created_by == user_id),
            select(User.id).where(User.created_by == user_id),
        )
        return any(self.session.exec(stmt.limit(1)).first() is not None for stmt in checks)
