import random
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from sqlmodel import Session

from app.core.config import settings
from app.db.repositories.games import GameRepository
from app.db.repositories.rolls import RollRepository


# -----------------------------
# YAML loader
# -----------------------------
def load_seed_yaml(seed_path: str | Path) -> Dict[str, Any]:
    path = Path(seed_path)
    if not path.exists():
        raise FileNotFoundError(f"Seed YAML introuvable: {path}")

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Le YAML de seed doit contenir un objet racine (mapping).")
    return data


# -----------------------------
# Helpers
# -----------------------------
def generate_rolls(
    target_score: int,
    *,
    roll_count: int = 10,
    rng: Optional[random.Random] = None,
) -> List[Tuple[int, int]]:
    """
    Génère roll_count paires (dieA, dieB) dont la somme totale vaut exactement target_score.
    À chaque tirage, la somme choisie laisse un reste atteignable par les lancers restants.
    """
    if not (2 * roll_count <= target_score <= 12 * roll_count):
        raise ValueError(f"Score {target_score} impossible en {roll_count} lancers")

    rng = rng or random.Random()
    remaining = target_score
    pairs: List[Tuple[int, int]] = []
    for i in range(roll_count):
        left_after = roll_count - i - 1
        low = max(2, remaining - 12 * left_after)
        high = min(12, remaining - 2 * left_after)
        roll_sum = rng.randint(low, high)
        die_a = rng.randint(max(1, roll_sum - 6), min(6, roll_sum - 1))
        pairs.append((die_a, roll_sum - die_a))
        remaining -= roll_sum
    return pairs


def _parse_completed_at(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


# -----------------------------
# Seeders
# -----------------------------
def wipe_all(session: Session) -> Tuple[int, int]:
    """Supprime tous les lancers puis toutes les parties. Retourne (rolls, games)."""
    deleted_rolls = RollRepository(session).delete_all(commit=False)
    deleted_games = GameRepository(session).delete_all(commit=False)
    session.commit()
    return deleted_rolls, deleted_games


def seed_games(session: Session, data: Dict[str, Any], *, rng: Optional[random.Random] = None) -> int:
    """
    Crée des parties terminées (avec leurs lancers) à partir de la clé `games` du YAML :
      - player_name: Alice
        total_score: 85
        completed_at: 2024-01-15T10:00:00Z
    """
    games_yaml: List[Dict[str, Any]] = data.get("games", [])
    game_repo = GameRepository(session)
    roll_repo = RollRepository(session)
    max_rolls = settings.MAX_ROLLS

    for entry in games_yaml:
        pairs = generate_rolls(int(entry["total_score"]), roll_count=max_rolls, rng=rng)
        completed_at = _parse_completed_at(entry["completed_at"])
        game = game_repo.create(
            commit=False,
            player_name=entry.get("player_name"),
            total_score=sum(a + b for a, b in pairs),
            roll_count=len(pairs),
            created_at=completed_at,
            completed_at=completed_at,
        )
        for index, (die_a, die_b) in enumerate(pairs):
            roll_repo.create(
                commit=False,
                game_id=game.id,
                roll_index=index,
                die_a=die_a,
                die_b=die_b,
                sum=die_a + die_b,
            )
        print(f"✅ Partie créée pour {game.player_name} avec un score de {game.total_score}")

    session.commit()
    return len(games_yaml)


def seed_all(session: Session, seed_path: str | Path, *, rng: Optional[random.Random] = None) -> int:
    data = load_seed_yaml(seed_path)
    deleted_rolls, deleted_games = wipe_all(session)
    print(f"🗑️  {deleted_rolls} lancers et {deleted_games} parties supprimés")
    created = seed_games(session, data, rng=rng)
    print(f"🎉 Seed terminé : {created} parties")
    return created
