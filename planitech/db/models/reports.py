from sqlmodel import Field

from .base import BaseModelDB


class InterventionReport(BaseModelDB, table=True):
    """Rapport d'intervention rédigé par un technicien sur une tâche qui lui est assignée."""
    __tablename__ = "intervention_reports"

    task_id: int = Field(foreign_key="tasks.id", index=True, nullable=False)
    technician_id: int = Field(foreign_key="users.id", index=True, nullable=False)

    title: str = Field(max_length=255)
    description: str = Field(default="")
    work_done: str = Field(default="")
    time_spent: float = Field(description="Temps passé (heures)")
    issues: str = Field(default="")
    recommendations: str = Field(default="")
    # draft -> submitted -> approved
    status: str = Field(default="draft", max_length=20)
