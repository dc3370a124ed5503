import json
from typing import Optional

from fastapi import APIRouter, Depends, Path, Request, status
from starlette.concurrency import run_in_threadpool

from app.api.v1.dependencies import get_game_service, rate_limited
from app.features.games.schemas import GameOut, RollCreateIn, RollListOut, RollOut
from app.features.games.services import GameService, to_game_out, to_roll_out


router = APIRouter(
    prefix="/games",
    tags=["games"],
    responses={404: {"description": "Game not found"}},
)

GAME_ID = Path(..., min_length=1, max_length=64, description="Identifiant de la partie")

# -------- Helpers --------

def _extract_player_name(raw_body: bytes) -> Optional[str]:
    """
    Lecture permissive du corps de /finish : corps vide, JSON invalide, pas un objet,
    ou playerName absent / pas une chaîne => "pas de nom". Seule une chaîne est validée.
    """
    if not raw_body:
        return None
    try:
        body = json.loads(raw_body)
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    name = body.get("playerName")
    return name if isinstance(name, str) else None

# -----------------------------
# Create game
# -----------------------------
@router.post(
    "",
    summary="Créer une partie",
    status_code=status.HTTP_201_CREATED,
    response_model=GameOut,
    dependencies=[Depends(rate_limited("create_game"))],
)
def create_game(
    svc: GameService = Depends(get_game_service),
):
    return to_game_out(svc.create_game())

# -----------------------------
# Read
# -----------------------------
@router.get(
    "/{game_id}",
    summary="Récupérer une partie",
    response_model=GameOut,
    dependencies=[Depends(rate_limited("read_only"))],
)
def get_game(
    game_id: str = GAME_ID,
    svc: GameService = Depends(get_game_service),
):
    return to_game_out(svc.get_game(game_id))

@router.get(
    "/{game_id}/rolls",
    summary="Lister les lancers d'une partie (ordre de jeu)",
    response_model=RollListOut,
    dependencies=[Depends(rate_limited("read_only"))],
)
def list_rolls(
    game_id: str = GAME_ID,
    svc: GameService = Depends(get_game_service),
):
    rolls = svc.list_rolls(game_id)
    return RollListOut(game_id=game_id, rolls=[to_roll_out(r) for r in rolls])

# -----------------------------
# Roll
# -----------------------------
@router.post(
    "/{game_id}/roll",
    summary="Enregistrer un lancer de deux dés",
    status_code=status.HTTP_201_CREATED,
    response_model=RollOut,
    responses={400: {"description": "Dés invalides, partie terminée ou 10 lancers atteints"}},
    dependencies=[Depends(rate_limited("roll_dice"))],
)
def roll(
    payload: RollCreateIn,
    game_id: str = GAME_ID,
    svc: GameService = Depends(get_game_service),
):
    created = svc.record_roll(game_id, payload.die_a, payload.die_b, attempt_id=payload.attempt_id)
    return to_roll_out(created)

# -----------------------------
# Finish
# -----------------------------
@router.post(
    "/{game_id}/finish",
    summary="Terminer la partie (10 lancers requis) avec un nom optionnel",
    response_model=GameOut,
    responses={400: {"description": "Partie incomplète, déjà terminée ou nom invalide"}},
    dependencies=[Depends(rate_limited("finish_game"))],
)
async def finish(
    request: Request,
    game_id: str = GAME_ID,
    svc: GameService = Depends(get_game_service),
):
    player_name = _extract_player_name(await request.body())
    game = await run_in_threadpool(svc.finish_game, game_id, player_name=player_name)
    return to_game_out(game)
