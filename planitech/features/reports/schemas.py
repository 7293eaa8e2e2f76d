from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field as PydField

REPORT_STATUSES = ("draft", "submitted", "approved")


class ReportCreateIn(BaseModel):
    task_id: int
    title: str = PydField(..., min_length=1, max_length=255)
    time_spent: float = PydField(..., gt=0, description="Heures passées")
    description: str = ""
    work_done: str = ""
    issues: str = ""
    recommendations: str = ""


class ReportUpdateIn(BaseModel):
    title: Optional[str] = PydField(None, min_length=1, max_length=255)
    time_spent: Optional[float] = PydField(None, gt=0)
    description: Optional[str] = None
    work_done: Optional[str] = None
    issues: Optional[str] = None
    recommendations: Optional[str] = None
    # valeurs autorisées vérifiées dans le service (REPORT_STATUSES)
    status: Optional[str] = None


class ReportOut(BaseModel):
    id: int
    task_id: int
    technician_id: int
    title: str
    description: str = ""
    work_done: str = ""
    time_spent: float
    issues: str = ""
    recommendations: str = ""
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    technician_name: Optional[str] = None
    task_title: Optional[str] = None
    project_title: Optional[str] = None

    model_config = {"from_attributes": True}
