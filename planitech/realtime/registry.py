"""
➡️ But : Tenir l'annuaire des connexions temps réel et des salles par projet.

Connection : une connexion cliente avec son cycle de vie
    CONNECTING -> AUTHENTICATED -> SUBSCRIBED -> DISCONNECTED (terminal)

ConnectionRegistry : salles `project_id -> connexions`, protégé par un verrou
(les routes REST publient depuis les threads du threadpool).

🔹 Avantages :

Aucune globale : le registre est créé au démarrage de l'app (lifespan) et fermé à l'arrêt.

Testable sans websocket : une connexion n'a besoin que d'une fonction `deliver`.
"""

import itertools
import logging
import threading
from enum import Enum
from typing import Callable, Dict, List, Optional, Set

logger = logging.getLogger(__name__)

_ids = itertools.count(1)


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    AUTHENTICATED = "authenticated"
    SUBSCRIBED = "subscribed"
    DISCONNECTED = "disconnected"


class ConnectionStateError(Exception):
    """Opération invalide pour l'état courant de la connexion."""


class Connection:
    def __init__(self, deliver: Callable[[dict], None]):
        self.id = next(_ids)
        self._deliver = deliver
        self.state = ConnectionState.CONNECTING
        self.user_id: Optional[int] = None
        self.username: Optional[str] = None
        self.projects: Set[int] = set()

    def __repr__(self) -> str:
        return f"<Connection {self.id} user={self.user_id} state={self.state.value}>"

    def _ensure_open(self) -> None:
        if self.state is ConnectionState.DISCONNECTED:
            raise ConnectionStateError(f"Connection {self.id} is closed")

    @property
    def is_open(self) -> bool:
        return self.state is not ConnectionState.DISCONNECTED

    def authenticate(self, *, user_id: int, username: str) -> None:
        self._ensure_open()
        if self.state is not ConnectionState.CONNECTING:
            raise ConnectionStateError(f"Connection {self.id} is already authenticated")
        self.user_id = user_id
        self.username = username
        self.state = ConnectionState.AUTHENTICATED

    def mark_subscribed(self, project_id: int) -> None:
        self._ensure_open()
        if self.state is ConnectionState.CONNECTING:
            raise ConnectionStateError(f"Connection {self.id} is not authenticated")
        self.projects.add(project_id)
        self.state = ConnectionState.SUBSCRIBED

    def is_subscribed(self, project_id: int) -> bool:
        return self.is_open and project_id in self.projects

    def send(self, message: dict) -> None:
        self._ensure_open()
        self._deliver(message)

    def close(self) -> None:
        self.state = ConnectionState.DISCONNECTED
        self.projects.clear()


class ConnectionRegistry:
    def __init__(self):
        self._lock = threading.Lock()
        self._connections: Set[Connection] = set()
        self._rooms: Dict[int, Set[Connection]] = {}
        self._closed = False

    def register(self, connection: Connection) -> None:
        with self._lock:
            if self._closed:
                raise ConnectionStateError("Registry is closed")
            self._connections.add(connection)

    def join(self, connection: Connection, project_id: int) -> None:
        with self._lock:
            if connection not in self._connections:
                raise ConnectionStateError(f"Connection {connection.id} is not registered")
            connection.mark_subscribed(project_id)
            self._rooms.setdefault(project_id, set()).add(connection)

    def unregister(self, connection: Connection) -> None:
        with self._lock:
            self._connections.discard(connection)
            for project_id in list(connection.projects):
                room = self._rooms.get(project_id)
                if room is None:
                    continue
                room.discard(connection)
                if not room:
                    del self._rooms[project_id]
            connection.close()

    def members(self, project_id: int) -> List[Connection]:
        """Copie de la salle : l'envoi se fait hors verrou."""
        with self._lock:
            return list(self._rooms.get(project_id, ()))

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def close(self) -> None:
        with self._lock:
            connections = list(self._connections)
            self._connections.clear()
            self._rooms.clear()
            self._closed = True
        for connection in connections:
            connection.close()
        logger.info("Realtime registry closed (%d connection(s) dropped)", len(connections))
