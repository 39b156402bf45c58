"""Health check endpoint: database connectivity and token signing configuration."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import check_db_connected, get_db
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(db: Session = Depends(get_db)) -> HealthResponse:
    """
    Return service health, database connectivity and whether a signing secret is set.
    Logins fail with 503 while token_signing is "missing".
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"
    signing_status = "configured" if settings.JWT_SECRET is not None else "missing"

    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database=db_status,
        token_signing=signing_status,
    )
