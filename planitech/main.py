"""
➡️ But : assembler toutes les pièces du puzzle.

Crée l'instance FastAPI (app).

Configure :

logs, CORS, gestionnaires d'erreurs ({"error": ...})

schéma OpenAPI personnalisé

Inclut les routers (ex : /api/v1/projects) et la websocket temps réel.

Cycle de vie (lifespan) : création des tables, puis registre des connexions
temps réel + Notifier posés sur `app.state`, fermés à l'arrêt.

🔹 Avantages :

Point unique d'exécution : uvicorn planitech.main:app --reload.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from planitech.core.config import settings
from planitech.core.errors import register_error_handlers
from planitech.core.logging import configure_logging
from planitech.core.openapi import custom_openapi
from planitech.db.session import init_db
from planitech.realtime.notifier import Notifier
from planitech.realtime.registry import ConnectionRegistry

from planitech.api.v1.routers import (
    admin,
    authentication,
    clients,
    notes,
    projects,
    realtime,
    reports,
    tasks,
    users,
)

import uvicorn

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    registry = ConnectionRegistry()
    app.state.registry = registry
    app.state.notifier = Notifier(registry)
    logger.info("%s started (env=%s)", settings.APP_NAME, settings.ENV)
    try:
        yield
    finally:
        registry.close()
        logger.info("%s stopped", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "auth", "description": "Inscription, connexion, utilisateur courant"},
        {"name": "users", "description": "Profil, recherche, tâches assignées"},
        {"name": "admin", "description": "Gestion des comptes (admin)"},
        {"name": "projects", "description": "Projets, membres et journal d'activité"},
        {"name": "tasks", "description": "Tâches et dépendances"},
        {"name": "clients", "description": "Fiches clients"},
        {"name": "intervention-reports", "description": "Rapports d'intervention des techniciens"},
        {"name": "task-notes", "description": "Notes de suivi sur les tâches"},
        {"name": "realtime", "description": "Notifications temps réel (websocket)"},
    ],
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS, allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)

register_error_handlers(app)

# Routers
app.include_router(authentication.router, prefix=settings.API_PREFIX)
app.include_router(users.router, prefix=settings.API_PREFIX)
app.include_router(admin.router, prefix=settings.API_PREFIX)
app.include_router(projects.router, prefix=settings.API_PREFIX)
app.include_router(tasks.router, prefix=settings.API_PREFIX)
app.include_router(clients.router, prefix=settings.API_PREFIX)
app.include_router(reports.router, prefix=settings.API_PREFIX)
app.include_router(notes.router, prefix=settings.API_PREFIX)
app.include_router(realtime.router, prefix=settings.API_PREFIX)


@app.get("/health", tags=["health"], summary="Sonde de vie")
def health():
    return {"status": "ok"}


# Génération du schéma OpenAPI custom
app.openapi = lambda: custom_openapi(app)

if __name__ == "__main__":
    uvicorn.run("planitech.main:app", host="127.0.0.1", port=8080, reload=(settings.ENV == "dev")) # http://localhost:8080
