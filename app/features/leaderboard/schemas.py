from typing import List

from pydantic import BaseModel

from app.features.games.schemas import CAMEL_CONFIG, GameOut


class PaginationOut(BaseModel):
    model_config = CAMEL_CONFIG

    page: int
    limit: int
    total: int
    total_pages: int


class LeaderboardOut(BaseModel):
    model_config = CAMEL_CONFIG

    games: List[GameOut]
    pagination: PaginationOut


class StatsOut(BaseModel):
    """
    - sum_distribution[s] = nombre de lancers de somme s (index 0 et 1 toujours à 0)
    - pair_distribution[a-1][b-1] = nombre de lancers (dieA=a, dieB=b), ordre significatif
    """
    model_config = CAMEL_CONFIG

    total_score_all_time: int
    total_games: int
    average_score_per_game: float
    sum_distribution: List[int]
    pair_distribution: List[List[int]]
