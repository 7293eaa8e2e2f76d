from datetime import date, datetime
from typing import Any, Dict, Optional

from sqlalchemy import Column, JSON, UniqueConstraint
from sqlmodel import Field

from .base import BaseModelDB, utcnow


class Project(BaseModelDB, table=True):
    __tablename__ = "projects"

    # Métadonnées
    title: str = Field(index=True, max_length=255)
    description: Optional[str] = Field(default=None)
    start_date: Optional[date] = Field(default=None)
    end_date: Optional[date] = Field(default=None)
    status: str = Field(default="active", max_length=20)
    budget: Optional[float] = Field(default=None)

    # Clés étrangères
    created_by: int = Field(foreign_key="users.id", index=True)
    client_id: Optional[int] = Field(default=None, foreign_key="clients.id", index=True)


class ProjectMember(BaseModelDB, table=True):
    """Appartenance (projet, utilisateur) avec un jeu de permissions {read, write, delete}."""
    __tablename__ = "project_members"
    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_project_member_project_user"),
    )

    project_id: int = Field(foreign_key="projects.id", index=True, nullable=False)
    user_id: int = Field(foreign_key="users.id", index=True, nullable=False)
    role: str = Field(default="member", max_length=20)
    # None -> lecture seule
    permissions: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    joined_at: datetime = Field(default_factory=utcnow)
