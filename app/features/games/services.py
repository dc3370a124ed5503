from typing import Optional, Sequence

import structlog
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.core.config import settings
from app.core.errors import (
    ConcurrentUpdateError,
    GameAlreadyCompletedError,
    GameIncompleteError,
    GameNotFoundError,
    InvalidDiceError,
    MaxRollsReachedError,
)
from app.db.models.base import utcnow
from app.db.models.games import Game
from app.db.models.rolls import Roll
from app.db.repositories.games import GameRepository
from app.db.repositories.rolls import RollRepository
from app.features.games.names import normalize_player_name
from app.features.games.schemas import DIE_MAX, DIE_MIN, GameOut, RollOut

logger = structlog.get_logger(__name__)


def validate_dice(die_a, die_b) -> None:
    for value in (die_a, die_b):
        if isinstance(value, bool) or not isinstance(value, int) or not (DIE_MIN <= value <= DIE_MAX):
            raise InvalidDiceError(details={"dieA": die_a, "dieB": die_b})


def to_game_out(game: Game) -> GameOut:
    return GameOut(
        id=game.id,
        player_name=game.player_name,
        total_score=game.total_score,
        roll_count=game.roll_count,
        created_at=game.created_at,
        completed_at=game.completed_at,
    )


def to_roll_out(roll: Roll) -> RollOut:
    return RollOut(
        id=roll.id,
        game_id=roll.game_id,
        index=roll.roll_index,
        die_a=roll.die_a,
        die_b=roll.die_b,
        sum=roll.sum,
        created_at=roll.created_at,
    )


class GameService:
    """
    Service métier Game : machine à états d'une partie.

    create -> record_roll (x MAX_ROLLS) -> finish

    Invariants tenus après chaque opération :
    - roll_count == nombre de Roll de la partie
    - total_score == somme des Roll.sum
    - index des Roll = 0..roll_count-1, sans trou ni doublon
    - une fois completed_at posé, plus rien ne bouge
    """

    def __init__(
        self,
        session: Session,
        game_repo: GameRepository,
        roll_repo: RollRepository,
        *,
        max_rolls: Optional[int] = None,
        max_retries: Optional[int] = None,
    ):
        self.session = session
        self.games = game_repo
        self.rolls = roll_repo
        self.max_rolls = max_rolls if max_rolls is not None else settings.MAX_ROLLS
        self.max_retries = max_retries if max_retries is not None else settings.ROLL_MAX_RETRIES

    # -----------------------------------
    # Helpers
    # -----------------------------------
    def _get_game_or_404(self, game_id: str) -> Game:
        game = self.games.get(game_id)
        if not game:
            raise GameNotFoundError()
        return game

    def _ensure_can_roll(self, game: Game) -> None:
        if game.completed_at is not None:
            raise GameAlreadyCompletedError()
        if game.roll_count >= self.max_rolls:
            raise MaxRollsReachedError(f"Maximum rolls ({self.max_rolls}) already reached")

    # ---------------------------------------------------------------------
    # Create / read
    # ---------------------------------------------------------------------

    def create_game(self) -> Game:
        game = self.games.create(total_score=0, roll_count=0)
        logger.info("game_created", game_id=game.id)
        return game

    def get_game(self, game_id: str) -> Game:
        return self._get_game_or_404(game_id)

    def list_rolls(self, game_id: str) -> Sequence[Roll]:
        self._get_game_or_404(game_id)
        return self.rolls.list_by_game(game_id)

    # ---------------------------------------------------------------------
    # Lancer
    # ---------------------------------------------------------------------

    def record_roll(self, game_id: str, die_a: int, die_b: int, *, attempt_id: Optional[str] = None) -> Roll:
        """
        Enregistre un lancer en une transaction :
        lecture verrouillée de la partie -> contrôles -> insert du Roll (index = roll_count)
        -> compare-and-set des compteurs.

        Si un autre lancer passe entre la lecture et l'écriture (contrainte unique
        (game_id, roll_index) ou compare-and-set raté), on rollback et on recommence
        avec l'état frais, au plus max_retries fois.
        """
        validate_dice(die_a, die_b)
        points = die_a + die_b

        for attempt in range(self.max_retries + 1):
            try:
                game = self.games.get_for_update(game_id)
                if not game:
                    raise GameNotFoundError()

                if attempt_id is not None:
                    previous = self.rolls.get_by_attempt(game_id, attempt_id)
                    if previous:
                        self.session.rollback()
                        logger.info("roll_replayed", game_id=game_id, attempt_id=attempt_id, index=previous.roll_index)
                        return previous

                self._ensure_can_roll(game)
                index = game.roll_count

                roll = self.rolls.create(
                    commit=False,          # important: même transaction que l'update de la partie
                    game_id=game_id,
                    roll_index=index,
                    die_a=die_a,
                    die_b=die_b,
                    sum=points,
                    attempt_id=attempt_id,
                )
                if not self.games.increment_counters(game_id, expected_roll_count=index, points=points):
                    raise _LostRace()

                self.session.commit()
                self.session.refresh(roll)
                logger.info("roll_recorded", game_id=game_id, index=index, die_a=die_a, die_b=die_b, sum=points)
                return roll

            except (IntegrityError, _LostRace):
                self.session.rollback()
                logger.info("roll_conflict_retry", game_id=game_id, attempt=attempt + 1)
            except Exception:
                self.session.rollback()
                raise

        logger.warning("roll_conflict_exhausted", game_id=game_id, retries=self.max_retries)
        raise ConcurrentUpdateError()

    # ---------------------------------------------------------------------
    # Fin de partie
    # ---------------------------------------------------------------------

    def finish_game(self, game_id: str, *, player_name: Optional[str] = None) -> Game:
        """
        Termine la partie : exactement max_rolls lancers requis, une seule fois.
        Le nom (optionnel) est normalisé avant toute écriture.
        """
        normalized = normalize_player_name(player_name) if player_name is not None else None

        try:
            game = self.games.get_for_update(game_id)
            if not game:
                raise GameNotFoundError()
            if game.completed_at is not None:
                raise GameAlreadyCompletedError()
            if game.roll_count != self.max_rolls:
                raise GameIncompleteError(
                    f"Game needs exactly {self.max_rolls} rolls before it can be finished",
                    details={"rollCount": game.roll_count},
                )

            done = self.games.mark_completed(
                game_id,
                completed_at=utcnow(),
                required_rolls=self.max_rolls,
                player_name=normalized,
            )
            if not done:
                # un autre finish (ou un lancer) est passé entre la lecture et l'écriture
                raise GameAlreadyCompletedError()

            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        game = self.games.refresh(game)
        logger.info("game_finished", game_id=game_id, total_score=game.total_score, player_name=game.player_name)
        return game


class _LostRace(Exception):
    """Le compare-and-set des compteurs n'a touché aucune ligne."""
