from typing import Optional

from planitech.db.repositories.activity_log import ActivityLogRepository
from planitech.features.projects.schemas import ActivityOut


class ActivityService:
    """Journal d'audit des mutations d'un projet (une ligne par action)."""

    def __init__(self, repo: ActivityLogRepository):
        self.repo = repo

    def record(
        self,
        *,
        project_id: int,
        user_id: int,
        action: str,
        entity_type: str,
        entity_id: Optional[int],
        changes: Optional[dict] = None,
    ) -> None:
        self.repo.append(
            project_id=project_id,
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            changes=changes,
        )

    def list_for_project(self, project_id: int, *, limit: int = 100) -> list[ActivityOut]:
        return self.repo.list_for_project(project_id, limit=limit)
