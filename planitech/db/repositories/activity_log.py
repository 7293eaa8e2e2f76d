import json
from typing import Any, Optional

from sqlmodel import select

from planitech.db.repositories.base import BaseRepository
from planitech.db.models.activity_log import ActivityLog
from planitech.db.models.users import User
from planitech.features.projects.schemas import ActivityOut


class ActivityLogRepository(BaseRepository[ActivityLog]):
    model = ActivityLog

    def append(
        self,
        *,
        project_id: int,
        user_id: int,
        action: str,
        entity_type: str,
        entity_id: Optional[int],
        changes: Optional[dict] = None,
    ) -> ActivityLog:
        serialized = json.dumps(changes, default=str, sort_keys=True) if changes is not None else None
        return self.create(
            project_id=project_id,
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            changes=serialized,
        )

    def list_for_project(self, project_id: int, *, limit: int = 100) -> list[ActivityOut]:
        stmt = (
            select(ActivityLog, User.username)
            .join(User, User.id == ActivityLog.user_id)
            .where(ActivityLog.project_id == project_id)
            .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            .limit(limit)
        )
        items = []
        for entry, username in self.session.exec(stmt).all():
            items.append(
                ActivityOut(
                    id=entry.id,
                    project_id=entry.project_id,
                    user_id=entry.user_id,
                    username=username,
                    action=entry.action,
                    entity_type=entry.entity_type,
                    entity_id=entry.entity_id,
                    changes=_parse_changes(entry.changes),
                    created_at=entry.created_at,
                )
            )
        return items


def _parse_changes(raw: Optional[str]) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return raw
