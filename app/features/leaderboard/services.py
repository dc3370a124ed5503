import math
from typing import Optional

from app.core.config import settings
from app.core.errors import InvalidInputError
from app.db.repositories.games import GameRepository
from app.db.repositories.rolls import RollRepository
from app.features.games.services import to_game_out
from app.features.leaderboard.schemas import LeaderboardOut, PaginationOut, StatsOut

SUM_SLOTS = 13  # index = somme, 2..12 utilisés
DIE_FACES = 6


class LeaderboardService:
    """
    Lecture seule sur les parties terminées (completed_at posé ET max_rolls lancers).
    Aucune écriture : le seul écrivain est GameService.
    """

    def __init__(
        self,
        *,
        game_repo: GameRepository,
        roll_repo: RollRepository,
        max_rolls: Optional[int] = None,
        max_limit: Optional[int] = None,
    ):
        self.games = game_repo
        self.rolls = roll_repo
        self.max_rolls = max_rolls if max_rolls is not None else settings.MAX_ROLLS
        self.max_limit = max_limit if max_limit is not None else settings.LEADERBOARD_MAX_LIMIT

    # ---------------------------------------------------------------------
    # Classement
    # ---------------------------------------------------------------------

    def list_leaderboard(self, *, limit: int, page: int) -> LeaderboardOut:
        """
        Tri : score décroissant, puis partie la plus récente d'abord à score égal.
        """
        if not (1 <= limit <= self.max_limit):
            raise InvalidInputError(
                f"limit must be between 1 and {self.max_limit}", details={"field": "limit", "value": limit}
            )
        if page < 1:
            raise InvalidInputError("page must be at least 1", details={"field": "page", "value": page})

        total = self.games.count_completed(required_rolls=self.max_rolls)
        games = self.games.list_completed_ranked(
            required_rolls=self.max_rolls,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return LeaderboardOut(
            games=[to_game_out(g) for g in games],
            pagination=PaginationOut(
                page=page,
                limit=limit,
                total=total,
                total_pages=math.ceil(total / limit),
            ),
        )

    # ---------------------------------------------------------------------
    # Statistiques
    # ---------------------------------------------------------------------

    def compute_stats(self) -> StatsOut:
        total_score, total_games = self.games.completed_score_totals(required_rolls=self.max_rolls)
        average = total_score / total_games if total_games > 0 else 0

        sum_distribution = [0] * SUM_SLOTS
        for roll_sum, count in self.rolls.count_by_sum_for_completed(required_rolls=self.max_rolls):
            if 2 <= roll_sum <= 12:
                sum_distribution[roll_sum] = int(count)

        pair_distribution = [[0] * DIE_FACES for _ in range(DIE_FACES)]
        for die_a, die_b, count in self.rolls.count_by_pair_for_completed(required_rolls=self.max_rolls):
            if 1 <= die_a <= DIE_FACES and 1 <= die_b <= DIE_FACES:
                pair_distribution[die_a - 1][die_b - 1] = int(count)

        return StatsOut(
            total_score_all_time=total_score,
            total_games=total_games,
            average_score_per_game=average,
            sum_distribution=sum_distribution,
            pair_distribution=pair_distribution,
        )
