"""Request/response schemas and result types for auth operations."""

import enum

from pydantic import BaseModel, ConfigDict, Field

from app.models.role import UserRole


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=1024, description="Password")


class RegisterRequest(BaseModel):
    """New account details. Password strength is checked by the user store."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=1024, description="Password")
    email: str = Field(..., min_length=3, max_length=320, description="Email address")
    first_name: str = Field(..., max_length=255, description="First name")
    last_name: str = Field(..., max_length=255, description="Last name")


class UpdatePermissionRequest(BaseModel):
    """Target of a role grant."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")


class AuthOutcome(str, enum.Enum):
    """Kind of result an auth operation produced."""

    SUCCEEDED = "succeeded"
    NOT_FOUND = "not_found"
    INVALID_CREDENTIAL = "invalid_credential"
    ALREADY_EXISTS = "already_exists"
    VALIDATION_FAILED = "validation_failed"


class AuthResult(BaseModel):
    """
    Result of login, register, grant_role or seed_roles.

    Expected failures are carried here instead of raised. errors holds the
    individual reasons for VALIDATION_FAILED; token is set only by a
    successful login.
    """

    model_config = ConfigDict(frozen=True)

    outcome: AuthOutcome
    message: str
    errors: list[str] = Field(default_factory=list)
    token: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is AuthOutcome.SUCCEEDED


class AuthResponse(BaseModel):
    """Uniform response body: success flag and human-readable message."""

    is_succeed: bool = Field(..., description="Whether the operation succeeded")
    message: str = Field(..., description="Outcome message (the token for a successful login)")
    errors: list[str] = Field(default_factory=list, description="Validation failure reasons")


class TokenResponse(AuthResponse):
    """Login response; access_token repeats the JWT for bearer-token clients."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")


class CurrentUser(BaseModel):
    """Authenticated user (id, username, roles) for dependency injection."""

    id: str
    username: str
    first_name: str = ""
    last_name: str = ""
    roles: list[UserRole] = Field(default_factory=list)
