"""
➡️ But : Brancher une websocket FastAPI sur le Notifier.

WebSocketSession : file d'envoi + tâche "pump" qui écrit sur la socket.
Publications et réponses arrivent depuis n'importe quel thread (routes REST
synchrones, handler exécuté dans le threadpool) et sont déposées sur la boucle
via `call_soon_threadsafe`, sans jamais attendre.

RealtimeHandler : interprète les messages clients `{"event", "data"}`.

| Événement client | Effet                                          |
|------------------|------------------------------------------------|
| join-project     | contrôle de lecture, abonnement, `joined-project` |
| project-update   | relais `project-updated` aux autres abonnés    |
| task-update      | relais `task-updated`                          |
| cursor-move      | relais `cursor-moved` (+ userId)               |

Toute erreur est renvoyée à l'émetteur : `{"event": "error", "data": {"error": msg}}`.
"""

import asyncio
import json
import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from planitech.core.errors import AppError, InternalError, ValidationError
from planitech.db.models.users import User
from planitech.features.access.services import ProjectAccessService
from planitech.realtime.notifier import Notifier
from planitech.realtime.registry import Connection, ConnectionStateError
from planitech.security.access import Permission

logger = logging.getLogger(__name__)

RELAYED_EVENTS = {
    "project-update": "project-updated",
    "task-update": "task-updated",
    "cursor-move": "cursor-moved",
}


class WebSocketSession:
    def __init__(self, websocket: WebSocket, loop: asyncio.AbstractEventLoop):
        self.websocket = websocket
        self.loop = loop
        self.outbox: asyncio.Queue = asyncio.Queue()
        self.connection = Connection(self._deliver)

    def _deliver(self, message: dict) -> None:
        try:
            self.loop.call_soon_threadsafe(self.outbox.put_nowait, message)
        except RuntimeError:
            # boucle fermée (arrêt de l'app)
            logger.debug("Event loop closed, dropping %s for %r", message.get("event"), self.connection)

    def reply(self, event: str, data: Any) -> None:
        self._deliver({"event": event, "data": data})

    async def pump(self) -> None:
        while True:
            message = await self.outbox.get()
            try:
                await self.websocket.send_json(message)
            except (WebSocketDisconnect, RuntimeError):
                return


def _project_id(data: Any) -> int:
    value = data
    if isinstance(data, dict):
        value = data.get("project_id", data.get("projectId"))
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("projectId is required")


class RealtimeHandler:
    def __init__(
        self,
        *,
        session: WebSocketSession,
        user: User,
        notifier: Notifier,
        access_svc: ProjectAccessService,
        db: Session,
    ):
        self.session = session
        self.user = user
        self.notifier = notifier
        self.access_svc = access_svc
        self.db = db

    @property
    def connection(self) -> Connection:
        return self.session.connection

    def handle_raw(self, raw: str) -> None:
        try:
            message = json.loads(raw)
        except ValueError:
            self.session.reply("error", {"error": "Invalid JSON message"})
            return
        if not isinstance(message, dict) or not isinstance(message.get("event"), str):
            self.session.reply("error", {"error": "Message must be an object with an 'event' field"})
            return
        self.handle(message["event"], message.get("data"))

    def handle(self, event: str, data: Any) -> None:
        try:
            if event == "join-project":
                self._join(data)
            elif event in RELAYED_EVENTS:
                self._relay(event, data)
            else:
                raise ValidationError(f"Unknown event: {event}")
        except (AppError, ConnectionStateError) as e:
            message = e.message if isinstance(e, AppError) else str(e)
            self.session.reply("error", {"error": message})
        except SQLAlchemyError:
            logger.exception("Database error while handling %s for user %s", event, self.user.id)
            self.db.rollback()
            self.session.reply("error", {"error": InternalError.default_message})

    def _join(self, data: Any) -> None:
        project_id = _project_id(data)
        # la session vit aussi longtemps que la socket : relire l'état courant
        self.db.expire_all()
        self.access_svc.resolve(self.user, project_id).require(Permission.READ)
        self.notifier.subscribe(self.connection, project_id)
        self.session.reply("joined-project", {"projectId": project_id})

    def _relay(self, event: str, data: Any) -> None:
        if not isinstance(data, dict):
            raise ValidationError("Payload must be an object")
        project_id = _project_id(data)
        if not self.connection.is_subscribed(project_id):
            raise ValidationError("Join the project before sending updates")
        payload = dict(data)
        if event == "cursor-move":
            payload = {"userId": self.user.id, **payload}
        self.notifier.publish(project_id, RELAYED_EVENTS[event], payload, sender=self.connection)
