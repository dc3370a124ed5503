from datetime import datetime
from typing import Optional, Sequence, Tuple

from sqlmodel import select, func
from sqlalchemy import update

from app.db.repositories.base import BaseRepository

from app.db.models.games import Game


class GameRepository(BaseRepository[Game]):
    model = Game

    # -----------------------------
    # Cycle de vie
    # -----------------------------

    def get_for_update(self, game_id: str) -> Optional[Game]:
        """
        Lit la partie en verrouillant sa ligne (SELECT ... FOR UPDATE) jusqu'à la fin
        de la transaction. SQLite ignore le verrou : le compare-and-set de
        increment_counters reste la garde dans ce cas.
        populate_existing : on veut l'état en base, pas celui du cache de session.
        """
        stmt = (
            select(Game)
            .where(Game.id == game_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.session.exec(stmt).first()

    def increment_counters(self, game_id: str, *, expected_roll_count: int, points: int) -> bool:
        """
        roll_count += 1, total_score += points, seulement si la partie est toujours
        en cours et que roll_count n'a pas bougé depuis la lecture.
        Retourne False si un autre lancer est passé entre-temps.
        """
        stmt = (
            update(Game)
            .where(
                Game.id == game_id,
                Game.roll_count == expected_roll_count,
                Game.completed_at.is_(None),
            )
            .values(
                roll_count=Game.roll_count + 1,
                total_score=Game.total_score + points,
            )
        )
        return self.session.connection().execute(stmt).rowcount == 1

    def mark_completed(
        self,
        game_id: str,
        *,
        completed_at: datetime,
        required_rolls: int,
        player_name: Optional[str] = None,
    ) -> bool:
        """
        Pose completed_at (et le nom si fourni) une seule fois.
        Retourne False si la partie a déjà été terminée ou n'a pas le bon nombre de lancers.
        """
        values = {"completed_at": completed_at}
        if player_name is not None:
            values["player_name"] = player_name
        stmt = (
            update(Game)
            .where(
                Game.id == game_id,
                Game.completed_at.is_(None),
                Game.roll_count == required_rolls,
            )
            .values(**values)
        )
        return self.session.connection().execute(stmt).rowcount == 1

    def refresh(self, game: Game) -> Game:
        self.session.refresh(game)
        return game

    # -----------------------------
    # Leaderboard / stats
    # -----------------------------

    def _completed_where(self, required_rolls: int):
        return (Game.completed_at.is_not(None), Game.roll_count == required_rolls)

    def list_completed_ranked(self, *, required_rolls: int, offset: int, limit: int) -> Sequence[Game]:
        stmt = (
            select(Game)
            .where(*self._completed_where(required_rolls))
            .order_by(Game.total_score.desc(), Game.created_at.desc(), Game.id.asc())
            .offset(offset)
            .limit(limit)
        )
        return self.session.exec(stmt).all()

    def count_completed(self, *, required_rolls: int) -> int:
        stmt = select(func.count(Game.id)).where(*self._completed_where(required_rolls))
        return int(self.session.exec(stmt).one())

    def completed_score_totals(self, *, required_rolls: int) -> Tuple[int, int]:
        """(somme des scores, nombre de parties) sur les parties terminées."""
        stmt = select(
            func.coalesce(func.sum(Game.total_score), 0),
            func.count(Game.id),
        ).where(*self._completed_where(required_rolls))
        total, count = self.session.exec(stmt).one()
        return int(total), int(count)
