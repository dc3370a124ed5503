"""
➡️ But : Personnaliser la documentation Swagger/OpenAPI.

custom_openapi(app) complète le schéma généré par FastAPI avec les conventions
de l'API (format des erreurs, pagination, règles du jeu).
"""

from fastapi.openapi.utils import get_openapi

def custom_openapi(app):
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=(
            "API du jeu de dés : 10 lancers de deux dés, score cumulé, classement.\n\n"
            "### Conventions\n"
            "- Toutes les heures sont en UTC.\n"
            "- Champs JSON en camelCase.\n"
            "- Pagination du classement : query params `page` & `limit` (1..100).\n"
            "- Erreurs : `{\"error\": \"...\", \"code\": \"GAME_NOT_FOUND\", \"details\": {...}}`.\n"
            "- Une partie se termine après exactement 10 lancers, une seule fois.\n"
        ),
        routes=app.routes,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema
