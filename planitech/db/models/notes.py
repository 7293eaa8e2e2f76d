from sqlmodel import Field

from .base import BaseModelDB


class TaskNote(BaseModelDB, table=True):
    __tablename__ = "task_notes"

    task_id: int = Field(foreign_key="tasks.id", index=True, nullable=False)
    user_id: int = Field(foreign_key="users.id", index=True, nullable=False)
    content: str
    time_spent: float = Field(default=0)
