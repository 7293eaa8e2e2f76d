"""
Contrôle d'accès aux projets (RBAC + appartenance au projet).

Logique pure : aucune requête SQL, aucun import FastAPI. Le service
`ProjectAccessService` charge le projet et la ligne d'appartenance puis
délègue la décision à `evaluate_project_access`.

Ordre de précédence :
    1. admin        -> accès complet (équivalent propriétaire)
    2. chef_projet  -> accès complet (gestionnaire), sans condition de propriété
    3. support      -> lecture seule sur tous les projets
    4. technicien   -> lecture seule sur tous les projets
    5. member       -> créateur = propriétaire ; sinon permissions de la ligne
                       project_member ; sinon refus
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from planitech.core.errors import AccessDenied
from planitech.db.models.projects import Project, ProjectMember


class Role(str, Enum):
    ADMIN = "admin"
    PROJECT_LEAD = "chef_projet"
    TECHNICIAN = "technicien"
    SUPPORT = "support"
    MEMBER = "member"

    @classmethod
    def parse(cls, value: Any) -> "Role":
        """Convertit une valeur stockée en Role ; toute valeur inconnue est refusée."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise AccessDenied(f"Unknown role: {value!r}")


# Rôles qu'un administrateur peut attribuer (les comptes auto-inscrits sont "member")
STAFF_ROLES = (Role.ADMIN, Role.PROJECT_LEAD, Role.TECHNICIAN, Role.SUPPORT)

# Rôles qui voient tous les projets sans être membres
BLANKET_READ_ROLES = (Role.ADMIN, Role.PROJECT_LEAD, Role.SUPPORT, Role.TECHNICIAN)


class Permission(str, Enum):
    READ = "read"
    WRITE = "write"
    DELETE = "delete"


@dataclass(frozen=True)
class Permissions:
    read: bool = True
    write: bool = False
    delete: bool = False

    @classmethod
    def full(cls) -> "Permissions":
        return cls(read=True, write=True, delete=True)

    @classmethod
    def read_only(cls) -> "Permissions":
        return cls(read=True, write=False, delete=False)

    @classmethod
    def from_recorded(cls, recorded: Optional[Mapping[str, Any]]) -> "Permissions":
        """Permissions d'une ligne project_member ; les clés absentes gardent la lecture seule."""
        base = cls.read_only()
        if not recorded:
            return base
        return cls(
            read=bool(recorded.get("read", base.read)),
            write=bool(recorded.get("write", base.write)),
            delete=bool(recorded.get("delete", base.delete)),
        )

    def allows(self, permission: Permission) -> bool:
        return bool(getattr(self, permission.value))

    def as_dict(self) -> dict:
        return {"read": self.read, "write": self.write, "delete": self.delete}


@dataclass(frozen=True)
class ProjectAccess:
    """
    Descripteur d'accès attaché à la requête pour un projet donné.
    `role` est le libellé exposé (rôle projet) ; `user_role` est le rôle du compte.
    """
    project_id: int
    is_owner: bool
    role: str
    permissions: Permissions = field(default_factory=Permissions.read_only)
    user_role: Role = Role.MEMBER

    def can(self, permission: Permission) -> bool:
        return self.permissions.allows(permission)

    def require(self, permission: Permission) -> None:
        if not self.can(permission):
            raise AccessDenied("Insufficient permissions")

    @property
    def can_edit_project(self) -> bool:
        # le libellé de rôle d'un membre est libre : seul le rôle du compte compte
        return self.is_owner or self.user_role is Role.ADMIN

    @property
    def can_delete_project(self) -> bool:
        return self.is_owner


def evaluate_project_access(
    *,
    user_id: int,
    role: Role | str,
    project: Project,
    membership: Optional[ProjectMember] = None,
) -> ProjectAccess:
    """
    Décide l'accès de (user, role) au projet `project`.
    Lève AccessDenied si un membre simple n'est ni créateur ni membre.
    """
    role = Role.parse(role)

    if role is Role.ADMIN:
        return ProjectAccess(project.id, is_owner=True, role="admin", permissions=Permissions.full(), user_role=role)
    if role is Role.PROJECT_LEAD:
        return ProjectAccess(project.id, is_owner=False, role="manager", permissions=Permissions.full(), user_role=role)
    if role is Role.SUPPORT:
        return ProjectAccess(project.id, is_owner=False, role="support", permissions=Permissions.read_only(), user_role=role)
    if role is Role.TECHNICIAN:
        return ProjectAccess(project.id, is_owner=False, role="technicien", permissions=Permissions.read_only(), user_role=role)
    if role is Role.MEMBER:
        if project.created_by == user_id:
            return ProjectAccess(project.id, is_owner=True, role="owner", permissions=Permissions.full(), user_role=role)
        if membership is not None and membership.user_id == user_id:
            return ProjectAccess(
                project.id,
                is_owner=False,
                role=membership.role or "member",
                permissions=Permissions.from_recorded(membership.permissions),
                user_role=role,
            )
        raise AccessDenied("Access denied to this project")

    # Role est un enum fermé : chaque membre est traité ci-dessus
    raise AssertionError(f"Unhandled role: {role}")
