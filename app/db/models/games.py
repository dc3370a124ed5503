from datetime import datetime
from typing import Optional

from sqlmodel import Field
from sqlalchemy import Index

from app.db.models.base import BaseModelDB


class Game(BaseModelDB, table=True):
    """Une partie : jusqu'à 10 lancers, score cumulé, nom optionnel posé à la fin."""

    __table_args__ = (
        Index("ix_game_leaderboard", "completed_at", "total_score"),
    )

    player_name: Optional[str] = Field(default=None, max_length=50)

    # compteurs dénormalisés, modifiés uniquement par GameService.record_roll
    total_score: int = Field(default=0, nullable=False)
    roll_count: int = Field(default=0, nullable=False)

    # None = en cours ; une fois posé, la partie est en lecture seule
    completed_at: Optional[datetime] = Field(default=None)
