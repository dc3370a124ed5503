from typing import Optional

from sqlmodel import Field
from sqlalchemy import CheckConstraint, Column, ForeignKey, String, UniqueConstraint

from app.db.models.base import BaseModelDB


class Roll(BaseModelDB, table=True):
    """Un lancer de deux dés, à une position donnée dans sa partie."""

    __table_args__ = (
        UniqueConstraint("game_id", "roll_index", name="uq_roll_game_index"),
        UniqueConstraint("game_id", "attempt_id", name="uq_roll_game_attempt"),
        CheckConstraint("die_a BETWEEN 1 AND 6", name="ck_roll_die_a"),
        CheckConstraint("die_b BETWEEN 1 AND 6", name="ck_roll_die_b"),
        CheckConstraint("sum = die_a + die_b", name="ck_roll_sum"),
        CheckConstraint("roll_index >= 0", name="ck_roll_index"),
    )

    game_id: str = Field(
        sa_column=Column(
            String(32),
            ForeignKey("game.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        description="Partie propriétaire",
    )

    # = game.roll_count au moment de l'insertion (0..9)
    roll_index: int = Field(nullable=False)

    die_a: int = Field(nullable=False)
    die_b: int = Field(nullable=False)
    # stocké pour les group by de /stats
    sum: int = Field(nullable=False, index=True)

    # identifiant de tentative fourni par le client (rejeu idempotent)
    attempt_id: Optional[str] = Field(default=None, max_length=64)
