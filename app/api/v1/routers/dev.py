from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.v1.dependencies import get_rate_limit_store
from app.core.config import settings
from app.core.rate_limit import RateLimitStore


router = APIRouter(
    prefix="/dev",
    tags=["dev"],
)


@router.post(
    "/rate-limits/clear",
    summary="Vider les compteurs de rate limit (hors prod)",
    responses={403: {"description": "Not available in production"}},
)
def clear_rate_limits(
    store: RateLimitStore = Depends(get_rate_limit_store),
):
    if settings.ENV == "prod":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not available in production")
    store.clear()
    return {"message": "Rate limits cleared", "timestamp": datetime.now(timezone.utc).isoformat()}
