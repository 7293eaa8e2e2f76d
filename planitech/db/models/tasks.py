from datetime import date
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from .base import BaseModelDB


class Task(BaseModelDB, table=True):
    __tablename__ = "tasks"

    project_id: int = Field(foreign_key="projects.id", index=True, nullable=False)
    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None)
    start_date: Optional[date] = Field(default=None)
    end_date: Optional[date] = Field(default=None)
    duration: int = Field(default=1, ge=0)
    progress: int = Field(default=0, ge=0, le=100)
    priority: str = Field(default="medium", max_length=10)
    status: str = Field(default="not_started", max_length=20)
    budget: Optional[float] = Field(default=None)

    assigned_to: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    parent_task_id: Optional[int] = Field(default=None, foreign_key="tasks.id")
    created_by: int = Field(foreign_key="users.id")


class TaskDependency(BaseModelDB, table=True):
    """Arc orienté task -> depends_on_task (les deux tâches du même projet)."""
    __tablename__ = "task_dependencies"
    __table_args__ = (
        UniqueConstraint("task_id", "depends_on_task_id", name="uq_task_dependency_pair"),
    )

    task_id: int = Field(foreign_key="tasks.id", index=True, nullable=False)
    depends_on_task_id: int = Field(foreign_key="tasks.id", index=True, nullable=False)
    dependency_type: str = Field(default="finish_to_start", max_length=20)
    lag: int = Field(default=0)
