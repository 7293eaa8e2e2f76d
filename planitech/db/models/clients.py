from typing import Optional

from sqlmodel import Field

from .base import BaseModelDB


class Client(BaseModelDB, table=True):
    """Clients (maîtres d'ouvrage) rattachés à zéro ou plusieurs projets."""
    __tablename__ = "clients"

    name: str = Field(index=True, max_length=255)
    address: str = Field(default="")
    site_manager: str = Field(default="", description="Responsable de site")
    project_manager: str = Field(default="", description="Chef de projet côté client")
    email: str = Field(default="")
    phone: str = Field(default="")
    created_by: Optional[int] = Field(default=None, foreign_key="users.id")
