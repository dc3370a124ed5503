from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

# Sorties JSON en camelCase (contrat du front), noms Python en snake_case.
CAMEL_CONFIG = {
    "from_attributes": True,
    "alias_generator": to_camel,
    "populate_by_name": True,
}

DIE_MIN = 1
DIE_MAX = 6


def check_die(value: Any) -> int:
    """
    Un dé valide est un int (pas un bool, pas un float, pas une str) dans [1, 6].
    Le type d'erreur "invalid_dice" est reconnu par le handler de validation.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise PydanticCustomError("invalid_dice", "Dice values must be integers between 1 and 6")
    if not (DIE_MIN <= value <= DIE_MAX):
        raise PydanticCustomError("invalid_dice", "Dice values must be integers between 1 and 6")
    return value


# -----------------------------
# Game
# -----------------------------

class GameOut(BaseModel):
    model_config = CAMEL_CONFIG

    id: str
    player_name: Optional[str] = None
    total_score: int
    roll_count: int
    created_at: datetime
    completed_at: Optional[datetime] = None


# -----------------------------
# Rolls
# -----------------------------

class RollCreateIn(BaseModel):
    """
    Un lancer :
    - dieA / dieB : valeurs lues sur les dés (simulation physique côté front)
    - attemptId : identifiant de tentative généré par le client, pour rejouer
      une requête sans risquer un double lancer
    """
    model_config = CAMEL_CONFIG

    die_a: int = Field(examples=[3])
    die_b: int = Field(examples=[4])
    attempt_id: Optional[str] = Field(default=None, min_length=1, max_length=64)

    @field_validator("die_a", "die_b", mode="before")
    @classmethod
    def dice_in_range(cls, value: Any) -> int:
        return check_die(value)


class RollOut(BaseModel):
    model_config = CAMEL_CONFIG

    id: str
    game_id: str
    index: int
    die_a: int
    die_b: int
    sum: int
    created_at: datetime


class RollListOut(BaseModel):
    model_config = CAMEL_CONFIG

    game_id: str
    rolls: List[RollOut]


# -----------------------------
# Player names
# -----------------------------

class NamePreviewOut(BaseModel):
    model_config = CAMEL_CONFIG

    input: str
    name: Optional[str] = None
    valid: bool
