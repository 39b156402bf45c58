"""Core configuration, database session and infrastructure errors."""

from app.core.config import get_settings, settings
from app.core.database import get_db
from app.core.exceptions import (
    InfrastructureError,
    SigningKeyMissingError,
    StoreUnavailableError,
)

__all__ = [
    "InfrastructureError",
    "SigningKeyMissingError",
    "StoreUnavailableError",
    "get_db",
    "get_settings",
    "settings",
]
