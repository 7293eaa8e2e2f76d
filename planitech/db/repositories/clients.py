from typing import Optional

from sqlmodel import select, func

from planitech.db.repositories.base import BaseRepository
from planitech.db.models.clients import Client
from planitech.db.models.projects import Project
from planitech.db.models.users import User
from planitech.features.clients.schemas import ClientOut


class ClientRepository(BaseRepository[Client]):
    model = Client

    def _select_client_out(self):
        return (
            select(Client, User.username.label("created_by_username"))
            .join(User, User.id == Client.created_by, isouter=True)
        )

    def _to_out(self, row) -> ClientOut:
        client, creator = row
        return ClientOut.model_validate(client).model_copy(update={"created_by_username": creator})

    def list_by_name(self) -> list[ClientOut]:
        rows = self.session.exec(self._select_client_out().order_by(Client.name.asc(), Client.id)).all()
        return [self._to_out(r) for r in rows]

    def get_out(self, client_id: int) -> Optional[ClientOut]:
        row = self.session.exec(self._select_client_out().where(Client.id == client_id)).first()
        return self._to_out(row) if row else None

    def count_projects(self, client_id: int) -> int:
        stmt = select(func.count(Project.id)).where(Project.client_id == client_id)
        return int(self.session.exec(stmt).one())
