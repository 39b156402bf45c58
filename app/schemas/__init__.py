"""Pydantic request/response schemas."""

from app.schemas.auth import (
    AuthOutcome,
    AuthResponse,
    AuthResult,
    CurrentUser,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UpdatePermissionRequest,
)
from app.schemas.health import HealthResponse

__all__ = [
    "AuthOutcome",
    "AuthResponse",
    "AuthResult",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "RegisterRequest",
    "TokenResponse",
    "UpdatePermissionRequest",
]
