from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field as PydField


class NoteCreateIn(BaseModel):
    task_id: int
    content: str = PydField(..., min_length=1)
    time_spent: float = PydField(0, ge=0)


class NoteUpdateIn(BaseModel):
    content: str = PydField(..., min_length=1)
    time_spent: float = PydField(0, ge=0)


class NoteOut(BaseModel):
    id: int
    task_id: int
    user_id: int
    content: str
    time_spent: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    model_config = {"from_attributes": True}
