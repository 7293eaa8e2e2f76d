import logging
from typing import Any, Optional

from planitech.realtime.registry import Connection, ConnectionRegistry, ConnectionStateError

logger = logging.getLogger(__name__)


class Notifier:
    """
    Diffusion des événements aux salles de projet.
    Envoi "fire-and-forget" : pas d'accusé, pas de rejeu ; `publish` ne lève jamais.
    """

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry

    def connect(self, connection: Connection) -> None:
        self.registry.register(connection)

    def subscribe(self, connection: Connection, project_id: int) -> None:
        # le contrôle d'accès est fait par l'appelant
        self.registry.join(connection, project_id)
        logger.info("User %s joined project %s", connection.user_id, project_id)

    def disconnect(self, connection: Connection) -> None:
        self.registry.unregister(connection)

    def publish(
        self,
        project_id: int,
        event: str,
        payload: Any,
        *,
        sender: Optional[Connection] = None,
    ) -> int:
        message = {"event": event, "data": payload}
        delivered = 0
        for connection in self.registry.members(project_id):
            if connection is sender:
                continue
            try:
                connection.send(message)
            except ConnectionStateError as e:
                # connexion fermée entre la copie de la salle et l'envoi
                logger.debug("Skipping %r for %s: %s", connection, event, e)
                continue
            except Exception:
                logger.exception("Delivery of %s to %r failed", event, connection)
                continue
            delivered += 1
        logger.debug("Published %s to project %s (%d deliveries)", event, project_id, delivered)
        return delivered
