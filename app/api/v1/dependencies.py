"""
➡️ But : Centraliser les dépendances réutilisables des routes.

Exemples :

get_game_service() : crée un GameService à partir d'une session DB.

rate_limited("roll_dice") : compte la requête pour l'IP du client, lève 429 si dépassé.

🔹 Avantages :

Routes plus propres (pas de code dupliqué).

Facile à injecter dans plusieurs endpoints (Depends()), et à surcharger en test
(app.dependency_overrides).
"""

from typing import Dict, Optional
from dataclasses import dataclass

import structlog
from fastapi import Depends, Header, Request, Response
from sqlmodel import Session

from app.core.config import settings
from app.core.errors import RateLimitedError
from app.core.rate_limit import RateLimitPolicy, RateLimitStore, default_policies, rate_limit_store
from app.db.session import get_session

from app.db.repositories.games import GameRepository
from app.db.repositories.rolls import RollRepository

from app.features.games.services import GameService
from app.features.leaderboard.services import LeaderboardService

logger = structlog.get_logger(__name__)


# -----------------------------
# Repositories
# -----------------------------
def get_game_repository(session: Session = Depends(get_session)) -> GameRepository:
    return GameRepository(session)

def get_roll_repository(session: Session = Depends(get_session)) -> RollRepository:
    return RollRepository(session)


# -----------------------------
# Game service
# -----------------------------
def get_game_service(
    session: Session = Depends(get_session),
    game_repo: GameRepository = Depends(get_game_repository),
    roll_repo: RollRepository = Depends(get_roll_repository),
) -> GameService:
    """
    Fournit une instance de GameService avec ses repositories injectés.
    Les trois partagent la même session (FastAPI met get_session en cache par requête).
    """
    return GameService(session=session, game_repo=game_repo, roll_repo=roll_repo)


# -----------------------------
# Leaderboard service
# -----------------------------
def get_leaderboard_service(
    game_repo: GameRepository = Depends(get_game_repository),
    roll_repo: RollRepository = Depends(get_roll_repository),
) -> LeaderboardService:
    return LeaderboardService(game_repo=game_repo, roll_repo=roll_repo)


# -----------------------------
# Client context (IP derrière proxy)
# -----------------------------
@dataclass
class ClientContext:
    ip: Optional[str]
    user_agent: Optional[str]

def get_client_ip_and_ua(
    request: Request,
    x_forwarded_for: Optional[str] = Header(default=None, alias="X-Forwarded-For"),
    x_real_ip: Optional[str] = Header(default=None, alias="X-Real-IP"),
    user_agent: Optional[str] = Header(default=None, alias="User-Agent"),
) -> ClientContext:
    """
    Récupère l'IP depuis X-Forwarded-For > X-Real-IP (si derrière un proxy) > socket.
    """
    ip = None
    if x_forwarded_for:
        ip = x_forwarded_for.split(",")[0].strip()
    elif x_real_ip:
        ip = x_real_ip
    elif request.client:
        ip = request.client.host
    return ClientContext(ip=ip, user_agent=user_agent)


# -----------------------------
# Rate limiting
# -----------------------------
def get_rate_limit_store() -> RateLimitStore:
    return rate_limit_store

def get_rate_limit_policies() -> Dict[str, RateLimitPolicy]:
    return default_policies()

def rate_limited(policy_name: str):
    """
    Fabrique une dépendance qui compte la requête dans la politique `policy_name`.
    Usage : dependencies=[Depends(rate_limited("roll_dice"))]
    """
    def dependency(
        request: Request,
        response: Response,
        client: ClientContext = Depends(get_client_ip_and_ua),
        store: RateLimitStore = Depends(get_rate_limit_store),
        policies: Dict[str, RateLimitPolicy] = Depends(get_rate_limit_policies),
    ) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return
        policy = policies[policy_name]
        result = store.hit(f"rate_limit:{policy.name}:{client.ip or 'unknown'}", policy)
        if not result.allowed:
            logger.warning("rate_limited", policy=policy.name, ip=client.ip, retry_after=result.retry_after)
            raise RateLimitedError(
                retry_after=result.retry_after,
                limit=result.limit,
                reset_at=result.reset_iso,
                headers=result.headers(),
            )
        headers = result.headers()
        response.headers.update(headers)
        # repris par les handlers d'erreurs de app.main (la Response injectée est perdue si la route lève)
        request.state.rate_limit_headers = headers

    return dependency
