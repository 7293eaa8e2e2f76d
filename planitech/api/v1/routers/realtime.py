import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from planitech.core.config import jwt_settings
from planitech.core.errors import AuthError
from planitech.db.models.users import User
from planitech.db.repositories.projects import ProjectMemberRepository, ProjectRepository
from planitech.db.repositories.users import UserRepository
from planitech.db.session import get_session
from planitech.features.access.services import ProjectAccessService
from planitech.realtime.websocket import RealtimeHandler, WebSocketSession
from planitech.security.tokens import verify_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


def _bearer(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    scheme, _, value = header.partition(" ")
    return value.strip() if scheme.lower() == "bearer" else None


def _authenticate(token: str, db: Session) -> User:
    identity = verify_token(token, jwt_settings)
    user = UserRepository(db).get(identity.user_id)
    if not user:
        raise AuthError("User not found")
    return user


@router.websocket("/realtime")
async def realtime(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    db: Session = Depends(get_session),
):
    """
    Canal temps réel. Token via `?token=` ou en-tête `Authorization: Bearer`.
    Un token absent ou invalide ferme la socket (1008) avant l'acceptation.
    Les accès base (handshake, messages) passent par le threadpool : la boucle
    ne fait que lire et écrire sur les sockets.
    """
    token = token or _bearer(websocket.headers.get("authorization"))
    try:
        user = await run_in_threadpool(_authenticate, token or "", db)
    except AuthError as e:
        logger.warning("Realtime handshake rejected: %s", e.message)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    notifier = getattr(websocket.app.state, "notifier", None)
    if notifier is None:
        logger.error("Realtime notifier not initialised")
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return

    await websocket.accept()
    session = WebSocketSession(websocket, asyncio.get_running_loop())
    session.connection.authenticate(user_id=user.id, username=user.username)
    notifier.connect(session.connection)
    logger.info("User %s connected (realtime)", user.id)

    handler = RealtimeHandler(
        session=session,
        user=user,
        notifier=notifier,
        access_svc=ProjectAccessService(ProjectRepository(db), ProjectMemberRepository(db)),
        db=db,
    )
    pump = asyncio.create_task(session.pump())
    try:
        while True:
            raw = await websocket.receive_text()
            await run_in_threadpool(handler.handle_raw, raw)
    except WebSocketDisconnect:
        pass
    finally:
        pump.cancel()
        notifier.disconnect(session.connection)
        logger.info("User %s disconnected (realtime)", user.id)
