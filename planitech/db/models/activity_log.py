from typing import Optional

from sqlmodel import Field

from .base import BaseModelDB


class ActivityLog(BaseModelDB, table=True):
    """Journal d'audit append-only des mutations d'un projet (jamais utilisé pour autoriser)."""
    __tablename__ = "activity_log"

    project_id: int = Field(foreign_key="projects.id", index=True, nullable=False)
    user_id: int = Field(foreign_key="users.id", nullable=False)
    action: str = Field(max_length=50)          # created | updated | deleted | member_added | ...
    entity_type: str = Field(max_length=30)     # project | task | intervention_report | task_note
    entity_id: Optional[int] = Field(default=None)
    changes: Optional[str] = Field(default=None, description="Change set sérialisé en JSON")
