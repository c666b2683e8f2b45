from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.config import get_settings
from app.db import get_db
from app.routers.utils.dependencies import verify_api_key

router = APIRouter(
    prefix="",
    tags=["system"],
    dependencies=[Depends(verify_api_key)],
    responses={401: {"description": "Missing or invalid API key"}},
)


@router.get("/health")
def health(db: Session = Depends(get_db)) -> dict:
    """Liveness check, including a round trip to the database."""
    db.execute(text("SELECT 1"))
    settings = get_settings()
    return {
        "status": "ok",
        "app": settings.app_name,
        "environment": settings.environment,
    }
