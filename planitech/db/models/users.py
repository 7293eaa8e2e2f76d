"""
➡️ But : Définir la structure des tables de la base (ORM).

Représente les objets persistés. Ici on représente les comptes utilisateurs
(identité, rôle, hash du mot de passe).
"""

from typing import Optional

from sqlmodel import Field

from .base import BaseModelDB


class User(BaseModelDB, table=True):
    __tablename__ = "users"

    username: str = Field(index=True, unique=True, max_length=50)
    email: str = Field(index=True, unique=True, max_length=100)
    hashed_password: str
    first_name: str = Field(default="", max_length=50)
    last_name: str = Field(default="", max_length=50)
    # admin | chef_projet | technicien | support | member (cf. planitech.security.access.Role)
    role: str = Field(default="member", max_length=20)
    created_by: Optional[int] = Field(default=None, foreign_key="users.id")
