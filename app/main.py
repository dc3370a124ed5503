"""
➡️ But : assembler toutes les pièces du puzzle.

Crée l'instance FastAPI (app) via create_app().

Configure :

les logs (structlog),

CORS (autorisations de qui peut appeler ces API),

les handlers d'erreurs (format {"error", "code", "details"} partout),

schéma OpenAPI personnalisé

Inclut les routers (ex : /api/v1/games).

Initialise la base au démarrage (lifespan).

🔹 Point unique d'exécution : uvicorn app.main:app --reload
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.errors import DatabaseError, DiceGameError, ErrorCode, InvalidDiceError, InvalidInputError
from app.core.logging import setup_logging
from app.core.openapi import custom_openapi
from app.db.session import init_db

from app.api.v1.routers import dev, games, leaderboard, names

logger = structlog.get_logger(__name__)


# -----------------------------
# Error handlers
# -----------------------------
def _error_response(exc: DiceGameError, request: Optional[Request] = None) -> JSONResponse:
    headers: Dict[str, str] = {}
    if request is not None:
        headers.update(getattr(request.state, "rate_limit_headers", None) or {})
    headers.update(getattr(exc, "headers", None) or {})
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=headers or None,
    )

async def handle_domain_error(request: Request, exc: DiceGameError) -> JSONResponse:
    return _error_response(exc, request)

async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    issues: List[Dict[str, Any]] = [
        {"path": ".".join(str(p) for p in e.get("loc", ())), "message": e.get("msg", "")}
        for e in exc.errors()
    ]
    if any(e.get("type") == "invalid_dice" for e in exc.errors()):
        return _error_response(InvalidDiceError(details={"allErrors": issues}), request)

    first = issues[0] if issues else {"path": "", "message": "invalid"}
    return _error_response(
        InvalidInputError(
            f"Validation failed: {first['path']} - {first['message']}",
            details={"field": first["path"], "message": first["message"], "allErrors": issues},
        ),
        request,
    )

async def handle_http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "code": f"HTTP_{exc.status_code}"},
        headers=getattr(exc, "headers", None),
    )

async def handle_storage_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("storage_error", path=request.url.path, exc_info=exc)
    return _error_response(DatabaseError(), request)

async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unexpected_error", path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "An unexpected error occurred", "code": ErrorCode.INTERNAL_ERROR.value},
    )


# -----------------------------
# App factory
# -----------------------------
@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_db()
    logger.info("startup", app=settings.APP_NAME, env=settings.ENV)
    yield


def create_app(*, with_lifespan: bool = True) -> FastAPI:
    setup_logging()

    application = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        lifespan=lifespan if with_lifespan else None,
        openapi_tags=[
            {"name": "games", "description": "Cycle de vie d'une partie : création, lancers, fin"},
            {"name": "leaderboard", "description": "Classement et statistiques (lecture seule)"},
            {"name": "names", "description": "Normalisation des noms de joueurs"},
            {"name": "dev", "description": "Outils de développement (désactivés en prod)"},
        ],
    )

    # CORS (ajustez selon vos besoins)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS, allow_credentials=True,
        allow_methods=["*"], allow_headers=["*"],
    )

    application.add_exception_handler(DiceGameError, handle_domain_error)
    application.add_exception_handler(RequestValidationError, handle_validation_error)
    application.add_exception_handler(StarletteHTTPException, handle_http_error)
    application.add_exception_handler(SQLAlchemyError, handle_storage_error)
    application.add_exception_handler(Exception, handle_unexpected_error)

    # Routers
    application.include_router(games.router, prefix="/api/v1")
    application.include_router(leaderboard.router, prefix="/api/v1")
    application.include_router(names.router, prefix="/api/v1")
    application.include_router(dev.router, prefix="/api/v1")

    @application.get("/health", tags=["health"])
    def health():
        return {"status": "ok"}

    # Génération du schéma OpenAPI custom (facultatif, mais propre)
    application.openapi = lambda: custom_openapi(application)

    return application


app = create_app()

if __name__ == "__main__":
    uvicorn.run("app.main:app", host="127.0.0.1", port=8080, reload=(settings.ENV == "dev")) # http://localhost:8080
