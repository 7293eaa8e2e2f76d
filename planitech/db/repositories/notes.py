from typing import Optional

from sqlmodel import select

from planitech.db.repositories.base import BaseRepository
from planitech.db.models.notes import TaskNote
from planitech.db.models.users import User
from planitech.features.notes.schemas import NoteOut


class TaskNoteRepository(BaseRepository[TaskNote]):
    model = TaskNote

    def _select_note_out(self):
        return (
            select(TaskNote, User.username, User.first_name, User.last_name)
            .join(User, User.id == TaskNote.user_id, isouter=True)
        )

    def _rows_to_out(self, rows) -> list[NoteOut]:
        return [
            NoteOut.model_validate(note).model_copy(
                update={"username": username, "first_name": first_name, "last_name": last_name}
            )
            for note, username, first_name, last_name in rows
        ]

    def list_for_task(self, task_id: int) -> list[NoteOut]:
        stmt = (
            self._select_note_out()
            .where(TaskNote.task_id == task_id)
            .order_by(TaskNote.created_at.desc(), TaskNote.id.desc())
        )
        return self._rows_to_out(self.session.exec(stmt).all())

    def get_out(self, note_id: int) -> Optional[NoteOut]:
        rows = self.session.exec(self._select_note_out().where(TaskNote.id == note_id)).all()
        items = self._rows_to_out(rows)
        return items[0] if items else None
