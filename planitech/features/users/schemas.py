"""
➡️ But : Définir les formats d'entrée/sortie de l'API (couche validation).

Contient les modèles Pydantic utilisés par FastAPI :

UserCreateIn → corps de requête POST (admin)

UserUpdateIn / ProfileUpdateIn → corps PUT

UserOut → réponse de l'API

Sépare les modèles "de stockage" (ORM) de ceux "de transfert" (I/O API).

🔹 Avantages :

Validation automatique.

Documente les champs dans Swagger (types, exemples...).

Empêche d'exposer par erreur des infos sensibles (ex: hash de mot de passe).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _check_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if "@" not in value or value.startswith("@") or value.endswith("@"):
        raise ValueError("Invalid email address")
    return value


# ---------- Inputs ----------

class ProfileUpdateIn(BaseModel):
    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=100, examples=["jane@example.com"])

    @field_validator("email")
    @classmethod
    def check_email(cls, value):
        return _check_email(value)


class UserCreateIn(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: str = Field(..., max_length=100)
    password: str = Field(..., min_length=8, max_length=128)
    first_name: str = Field("", max_length=50)
    last_name: str = Field("", max_length=50)
    role: Optional[str] = Field(None, examples=["technicien"])

    @field_validator("email")
    @classmethod
    def check_email(cls, value):
        return _check_email(value)


class UserUpdateIn(BaseModel):
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[str] = Field(None, max_length=100)
    password: Optional[str] = Field(None, min_length=8, max_length=128)
    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    role: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, value):
        return _check_email(value)


# ---------- Outputs ----------

class UserOut(BaseModel):
    id: int
    username: str
    email: str
    first_name: str = ""
    last_name: str = ""
    role: str
    created_at: Optional[datetime] = None
    # hashed_password: jamais exposé

    model_config = {"from_attributes": True}


class UserAdminOut(UserOut):
    updated_at: Optional[datetime] = None
    created_by_username: Optional[str] = None


class UserSearchOut(BaseModel):
    id: int
    username: str
    email: str
    first_name: str = ""
    last_name: str = ""

    model_config = {"from_attributes": True}
