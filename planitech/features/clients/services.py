import logging

from planitech.core.errors import ConflictError, NotFound
from planitech.db.models.clients import Client
from planitech.db.models.users import User
from planitech.db.repositories.clients import ClientRepository
from planitech.db.repositories.projects import ProjectRepository
from planitech.features.clients.schemas import ClientIn, ClientOut
from planitech.features.projects.schemas import ProjectOut

logger = logging.getLogger(__name__)


class ClientService:
    """
    Fiches clients. Lecture pour tout utilisateur authentifié ;
    les rôles autorisés en écriture sont posés par les dépendances du router.
    """

    def __init__(self, repo: ClientRepository, project_repo: ProjectRepository):
        self.repo = repo
        self.project_repo = project_repo

    def _get(self, client_id: int) -> Client:
        client = self.repo.get(client_id)
        if not client:
            raise NotFound("Client not found")
        return client

    def list_all(self) -> list[ClientOut]:
        return self.repo.list_by_name()

    def get(self, client_id: int) -> ClientOut:
        out = self.repo.get_out(client_id)
        if not out:
            raise NotFound("Client not found")
        return out

    def list_projects(self, client_id: int) -> list[ProjectOut]:
        self._get(client_id)
        return [ProjectOut.model_validate(p) for p in self.project_repo.list_by_client(client_id)]

    def create(self, user: User, payload: ClientIn) -> ClientOut:
        client = self.repo.create(created_by=user.id, **payload.model_dump())
        logger.info("Client %s created by user %s", client.id, user.id)
        return self.repo.get_out(client.id)

    def update(self, user: User, client_id: int, payload: ClientIn) -> ClientOut:
        client = self.repo.update(self._get(client_id), **payload.model_dump())
        logger.info("Client %s updated by user %s", client.id, user.id)
        return self.repo.get_out(client.id)

    def delete(self, user: User, client_id: int) -> None:
        client = self._get(client_id)
        if self.repo.count_projects(client_id) > 0:
            raise ConflictError("Cannot delete client with associated projects")
        self.repo.delete(client)
        logger.info("Client %s deleted by user %s", client_id, user.id)
