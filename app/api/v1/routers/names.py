from fastapi import APIRouter, Depends, Query

from app.api.v1.dependencies import rate_limited
from app.features.games.names import preview_player_name
from app.features.games.schemas import NamePreviewOut


router = APIRouter(
    prefix="/names",
    tags=["names"],
    dependencies=[Depends(rate_limited("general"))],
)


@router.get(
    "/preview",
    summary="Prévisualiser le nom tel qu'il sera enregistré",
    response_model=NamePreviewOut,
)
def preview(name: str = Query(..., max_length=200)):
    normalized = preview_player_name(name)
    return NamePreviewOut(input=name, name=normalized, valid=normalized is not None)
