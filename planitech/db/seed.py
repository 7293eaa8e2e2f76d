"""
➡️ But : Remplir une base vide avec des données de démonstration (YAML).

Chaque seed est idempotent : si la table contient déjà des lignes, rien n'est inséré.
Les références entre objets passent par des clés YAML (`key`, `owner_key`, `client_key`...).
"""

import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml
from sqlmodel import Session, select

from planitech.db.models.users import User
from planitech.db.models.clients import Client
from planitech.db.models.projects import Project, ProjectMember
from planitech.db.models.tasks import Task
from planitech.security.access import Permissions, Role
from planitech.security.password import hash_password

logger = logging.getLogger(__name__)


# -----------------------------
# YAML loader
# -----------------------------
def load_seed_yaml(seed_path: str | Path) -> Dict[str, Any]:
    path = Path(seed_path)
    if not path.exists():
        raise FileNotFoundError(f"Seed YAML introuvable: {path}")

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Le YAML de seed doit contenir un objet racine (mapping).")
    return data


# -----------------------------
# Helpers
# -----------------------------
def _user_ids_by_key(session: Session, data: Dict[str, Any]) -> Dict[str, int]:
    """user key -> User.id (User.key n'existe pas en DB)."""
    usernames = {u["key"]: u["username"] for u in data.get("users", [])}
    ids: Dict[str, int] = {}
    for key, username in usernames.items():
        user = session.exec(select(User).where(User.username == username)).first()
        if user:
            ids[key] = user.id
    return ids


def _client_ids_by_key(session: Session, data: Dict[str, Any]) -> Dict[str, int]:
    names = {c["key"]: c["name"] for c in data.get("clients", []) if "key" in c}
    ids: Dict[str, int] = {}
    for key, name in names.items():
        client = session.exec(select(Client).where(Client.name == name)).first()
        if client:
            ids[key] = client.id
    return ids


# ------------------------------------------------------------
# Seed Users
# ------------------------------------------------------------
def seed_users(session: Session, data: Dict[str, Any]) -> None:
    if session.exec(select(User)).first():
        logger.info("ℹ️ Les utilisateurs existent déjà, aucune insertion effectuée.")
        return

    users: List[Dict[str, Any]] = data.get("users", [])
    if not users:
        logger.warning("⚠️ Aucun utilisateur dans le YAML (clé 'users').")
        return

    session.add_all([
        User(
            username=u["username"],
            email=u["email"],
            hashed_password=hash_password(u["password"]),
            first_name=u.get("first_name", ""),
            last_name=u.get("last_name", ""),
            role=Role.parse(u.get("role", Role.MEMBER.value)).value,
        )
        for u in users
    ])
    session.commit()
    logger.info("✅ %d utilisateurs insérés.", len(users))


# ------------------------------------------------------------
# Seed Clients
# ------------------------------------------------------------
def seed_clients(session: Session, data: Dict[str, Any]) -> None:
    if session.exec(select(Client)).first():
        logger.info("ℹ️ Les clients existent déjà, aucune insertion effectuée.")
        return

    clients: List[Dict[str, Any]] = data.get("clients", [])
    if not clients:
        logger.warning("⚠️ Aucun client dans le YAML (clé 'clients').")
        return

    user_ids = _user_ids_by_key(session, data)
    session.add_all([
        Client(
            name=c["name"],
            address=c.get("address", ""),
            site_manager=c.get("site_manager", ""),
            project_manager=c.get("project_manager", ""),
            email=c.get("email", ""),
            phone=c.get("phone", ""),
            created_by=user_ids.get(c.get("owner_key")),
        )
        for c in clients
    ])
    session.commit()
    logger.info("✅ %d clients insérés.", len(clients))


# ------------------------------------------------------------
# Seed Projects (+ membres, tâches)
# ------------------------------------------------------------
def seed_projects(session: Session, data: Dict[str, Any]) -> None:
    """
    Format YAML :
        projects:
          - title: ...
            owner_key: alice
            client_key: mairie
            members: [{user_key: bob, role: member, permissions: {write: true}}]
            tasks: [{title: ..., assignee_key: tom, priority: high}]
    """
    if session.exec(select(Project)).first():
        logger.info("ℹ️ Les projets existent déjà, aucune insertion effectuée.")
        return

    projects: List[Dict[str, Any]] = data.get("projects", [])
    if not projects:
        logger.warning("⚠️ Aucun projet dans le YAML (clé 'projects').")
        return

    user_ids = _user_ids_by_key(session, data)
    client_ids = _client_ids_by_key(session, data)

    for p in projects:
        owner_id = user_ids.get(p["owner_key"])
        if owner_id is None:
            raise ValueError(f"owner_key inconnu pour le projet {p['title']!r}: {p['owner_key']!r}")

        project = Project(
            title=p["title"],
            description=p.get("description"),
            status=p.get("status", "active"),
            budget=p.get("budget"),
            created_by=owner_id,
            client_id=client_ids.get(p.get("client_key")),
        )
        session.add(project)
        session.flush()

        for m in p.get("members", []):
            session.add(ProjectMember(
                project_id=project.id,
                user_id=user_ids[m["user_key"]],
                role=m.get("role", "member"),
                permissions=Permissions.from_recorded(m.get("permissions")).as_dict(),
            ))

        for t in p.get("tasks", []):
            session.add(Task(
                project_id=project.id,
                title=t["title"],
                description=t.get("description"),
                duration=t.get("duration", 1),
                priority=t.get("priority", "medium"),
                status=t.get("status", "not_started"),
                assigned_to=user_ids.get(t.get("assignee_key")),
                created_by=owner_id,
            ))

    session.commit()
    logger.info("✅ %d projets insérés.", len(projects))


# ------------------------------------------------------------
# Seed global
# ------------------------------------------------------------
def seed_all(session: Session, seed_path: str | Path) -> None:
    data = load_seed_yaml(seed_path)
    seed_users(session, data)
    seed_clients(session, data)
    seed_projects(session, data)
