"""
➡️ But : Configurer la base SQL et gérer les sessions de base de données.

engine : connexion à la base (sqlite:///planitech.db par défaut).

init_db() : crée les tables à partir des modèles SQLModel.

get_session() : dépendance FastAPI qui ouvre une session, la fournit aux routes, puis la ferme proprement.

🔹 Avantages :

Un seul endroit pour gérer les connexions DB.

Réutilisable par injection (Depends(get_session)).
"""

from typing import Dict, Any
from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

# Import all models for creating all tables
from planitech.db.models.users import User
from planitech.db.models.clients import Client
from planitech.db.models.projects import Project, ProjectMember
from planitech.db.models.tasks import Task, TaskDependency
from planitech.db.models.reports import InterventionReport
from planitech.db.models.notes import TaskNote
from planitech.db.models.activity_log import ActivityLog

from planitech.core.config import settings

IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def build_engine(url: str, *, echo: bool = False) -> Engine:
    assert url, "DATABASE_URL must be set"

    is_sqlite = url.startswith("sqlite:")

    connect_args: Dict[str, Any] = {}
    kwargs: Dict[str, Any] = {}
    if is_sqlite:
        # Requis pour SQLite quand utilisé dans un app serveur (multi-threads)
        connect_args["check_same_thread"] = False
    if url in IN_MEMORY_URLS:
        # une seule connexion partagée, sinon chaque connexion voit une base vide
        kwargs["poolclass"] = StaticPool

    return create_engine(
        url,
        echo=echo,
        connect_args=connect_args,
        pool_pre_ping=not is_sqlite,  # ping utile pour Postgres/MySQL ; inutile pour SQLite
        **kwargs,
    )


# verbosité SQL pilotée par la config logging (logger "sqlalchemy.engine")
engine: Engine = build_engine(settings.DATABASE_URL)


def init_db(bind: Engine | None = None) -> None:
    """
    Crée les tables si elles n'existent pas.
    Les migrations sont hors périmètre : create_all suffit pour SQLite.
    """
    SQLModel.metadata.create_all(bind or engine)


def get_session():
    """
    Dépendance FastAPI : fournit une session par requête.
    Utilisation :
        def route(..., session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session
