from datetime import date, datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field

ProjectStatus = Literal["active", "on_hold", "completed", "cancelled"]


# ---------- Inputs ----------

class ProjectCreateIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=255, examples=["Rénovation gymnase"])
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[float] = Field(None, ge=0)
    status: Optional[ProjectStatus] = None
    client_id: Optional[int] = None


class ProjectUpdateIn(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[float] = Field(None, ge=0)
    status: Optional[ProjectStatus] = None
    client_id: Optional[int] = None


class PermissionsIn(BaseModel):
    read: Optional[bool] = None
    write: Optional[bool] = None
    delete: Optional[bool] = None


class MemberAddIn(BaseModel):
    username: str = Field(..., min_length=1)
    role: str = Field("member", max_length=20)
    permissions: Optional[PermissionsIn] = None


# ---------- Outputs ----------

class ProjectOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: str
    budget: Optional[float] = None
    created_by: int
    client_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ProjectListItemOut(ProjectOut):
    created_by_name: Optional[str] = None
    member_role: Optional[str] = None


class ProjectMemberOut(BaseModel):
    user_id: int
    username: str
    role: str
    permissions: dict


class ProjectAccessOut(BaseModel):
    is_owner: bool
    role: str
    permissions: dict


class ProjectDetailOut(ProjectOut):
    created_by_name: Optional[str] = None
    client_name: Optional[str] = None
    members: List[ProjectMemberOut] = []
    access: Optional[ProjectAccessOut] = None


class ActivityOut(BaseModel):
    id: int
    project_id: int
    user_id: int
    username: Optional[str] = None
    action: str
    entity_type: str
    entity_id: Optional[int] = None
    changes: Optional[Any] = None
    created_at: datetime
