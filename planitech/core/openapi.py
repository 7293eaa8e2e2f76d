"""
➡️ But : Personnaliser la documentation Swagger/OpenAPI.

custom_openapi(app) complète le schéma généré par FastAPI (description,
conventions d'authentification et d'erreurs) et le met en cache.
"""

from fastapi.openapi.utils import get_openapi


def custom_openapi(app):
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=(
            "API Planitech : projets, tâches, clients, rapports d'intervention et notes.\n\n"
            "### Conventions\n"
            "- Authentification : `Authorization: Bearer <token>` (token valable 24h).\n"
            "- Erreurs : corps JSON `{\"error\": \"<message>\"}`.\n"
            "- Temps réel : websocket `/api/v1/realtime?token=<token>`.\n"
            "- Toutes les heures sont en UTC.\n"
        ),
        routes=app.routes,
        tags=app.openapi_tags,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema
