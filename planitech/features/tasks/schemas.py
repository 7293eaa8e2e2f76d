from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

Priority = Literal["low", "medium", "high", "critical"]
TaskStatus = Literal["not_started", "in_progress", "completed", "on_hold", "cancelled"]
DependencyType = Literal["finish_to_start", "start_to_start", "finish_to_finish", "start_to_finish"]


# ---------- Inputs ----------

class TaskCreateIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    duration: int = Field(1, ge=0)
    priority: Priority = "medium"
    assigned_to: Optional[int] = None
    parent_task_id: Optional[int] = None
    budget: Optional[float] = Field(None, ge=0)


class TaskUpdateIn(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    duration: Optional[int] = Field(None, ge=0)
    progress: Optional[int] = Field(None, ge=0, le=100)
    priority: Optional[Priority] = None
    status: Optional[TaskStatus] = None
    assigned_to: Optional[int] = None
    parent_task_id: Optional[int] = None
    budget: Optional[float] = Field(None, ge=0)


class DependencyCreateIn(BaseModel):
    depends_on_task_id: int
    dependency_type: DependencyType = "finish_to_start"
    lag: int = 0


# ---------- Outputs ----------

class DependencyOut(BaseModel):
    id: int
    task_id: int
    depends_on_task_id: int
    depends_on_title: Optional[str] = None
    dependency_type: str
    lag: int


class TaskOut(BaseModel):
    id: int
    project_id: int
    title: str
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    duration: int
    progress: int
    priority: str
    status: str
    assigned_to: Optional[int] = None
    parent_task_id: Optional[int] = None
    budget: Optional[float] = None
    created_by: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    assigned_to_name: Optional[str] = None
    created_by_name: Optional[str] = None
    parent_task_title: Optional[str] = None
    project_title: Optional[str] = None
    dependencies: List[DependencyOut] = []

    model_config = {"from_attributes": True}
