from fastapi import APIRouter, Depends, Query

from app.api.v1.dependencies import get_leaderboard_service, rate_limited
from app.core.config import settings
from app.features.leaderboard.schemas import LeaderboardOut, StatsOut
from app.features.leaderboard.services import LeaderboardService


router = APIRouter(
    tags=["leaderboard"],
    dependencies=[Depends(rate_limited("read_only"))],
)


@router.get(
    "/leaderboard",
    summary="Classement paginé des parties terminées",
    response_model=LeaderboardOut,
)
def list_leaderboard(
    limit: int = Query(
        settings.LEADERBOARD_DEFAULT_LIMIT,
        ge=1,
        le=settings.LEADERBOARD_MAX_LIMIT,
        description="Taille de page",
    ),
    page: int = Query(1, ge=1, description="Numéro de page"),
    svc: LeaderboardService = Depends(get_leaderboard_service),
):
    return svc.list_leaderboard(limit=limit, page=page)


@router.get(
    "/stats",
    summary="Statistiques globales (parties terminées uniquement)",
    response_model=StatsOut,
)
def get_stats(
    svc: LeaderboardService = Depends(get_leaderboard_service),
):
    return svc.compute_stats()
