from typing import Optional, Sequence, Tuple

from sqlmodel import select, func

from app.db.repositories.base import BaseRepository

from app.db.models.games import Game
from app.db.models.rolls import Roll


class RollRepository(BaseRepository[Roll]):
    model = Roll

    def list_by_game(self, game_id: str) -> Sequence[Roll]:
        stmt = (
            select(Roll)
            .where(Roll.game_id == game_id)
            .order_by(Roll.roll_index.asc())
        )
        return self.session.exec(stmt).all()

    def get_by_attempt(self, game_id: str, attempt_id: str) -> Optional[Roll]:
        stmt = select(Roll).where(Roll.game_id == game_id, Roll.attempt_id == attempt_id)
        return self.session.exec(stmt).first()

    def _completed_join(self, stmt, required_rolls: int):
        return stmt.join(Game, Game.id == Roll.game_id).where(
            Game.completed_at.is_not(None),
            Game.roll_count == required_rolls,
        )

    def count_by_sum_for_completed(self, *, required_rolls: int) -> Sequence[Tuple[int, int]]:
        """Lignes (sum, nombre) sur les lancers des parties terminées."""
        stmt = self._completed_join(
            select(Roll.sum, func.count(Roll.id)), required_rolls
        ).group_by(Roll.sum)
        return self.session.exec(stmt).all()

    def count_by_pair_for_completed(self, *, required_rolls: int) -> Sequence[Tuple[int, int, int]]:
        """Lignes (die_a, die_b, nombre) ; (2,5) et (5,2) sont deux lignes distinctes."""
        stmt = self._completed_join(
            select(Roll.die_a, Roll.die_b, func.count(Roll.id)), required_rolls
        ).group_by(Roll.die_a, Roll.die_b)
        return self.session.exec(stmt).all()
