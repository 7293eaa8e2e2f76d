from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ClientIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: str = ""
    site_manager: str = ""
    project_manager: str = ""
    email: str = ""
    phone: str = ""


class ClientOut(BaseModel):
    id: int
    name: str
    address: str = ""
    site_manager: str = ""
    project_manager: str = ""
    email: str = ""
    phone: str = ""
    created_by: Optional[int] = None
    created_by_username: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
