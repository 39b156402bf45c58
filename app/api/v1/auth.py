"""Auth endpoints (login, register, role grants, role seeding) and bearer-token dependencies."""

from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.security import PasswordPolicy, TokenIssuer, get_token_issuer
from app.models.role import UserRole
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
from app.services.auth import CLAIM_NAME_ID, CLAIM_ROLE, AuthService
from app.stores.role_store import RoleStore
from app.stores.user_store import UserStore

router = APIRouter()
security = HTTPBearer(auto_error=False)

_OUTCOME_STATUS = {
    AuthOutcome.SUCCEEDED: status.HTTP_200_OK,
    AuthOutcome.INVALID_CREDENTIAL: status.HTTP_401_UNAUTHORIZED,
    AuthOutcome.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    AuthOutcome.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    AuthOutcome.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
}

_ROLE_NAMES = frozenset(r.value for r in UserRole)


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    token_issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> AuthService:
    """Dependency: AuthService bound to the request's DB session."""
    return AuthService(
        users=UserStore(db, PasswordPolicy.from_settings(settings)),
        roles=RoleStore(db),
        token_issuer=token_issuer,
        db=db,
    )


def _to_response(result: AuthResult) -> JSONResponse:
    body = AuthResponse(
        is_succeed=result.succeeded,
        message=result.message,
        errors=result.errors,
    )
    return JSONResponse(status_code=_OUTCOME_STATUS[result.outcome], content=body.model_dump())


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    token_issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> CurrentUser:
    """Dependency: require valid Bearer JWT and return the current user. Raises 401 if missing or invalid."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = token_issuer.decode(credentials.credentials)
    except jwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user_id = payload.get(CLAIM_NAME_ID)
    if not user_id or not isinstance(user_id, str):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = UserStore(db, PasswordPolicy.from_settings(settings)).find_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    token_roles = payload.get(CLAIM_ROLE) or []
    if isinstance(token_roles, str):
        token_roles = [token_roles]
    return CurrentUser(
        id=user.id,
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
        roles=[UserRole(r) for r in token_roles if r in _ROLE_NAMES],
    )


def require_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: require authenticated user with the ADMIN role. Raises 403 otherwise."""
    if UserRole.ADMIN not in current_user.roles:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


@router.post("/seed-roles", response_model=AuthResponse)
def seed_roles(
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> JSONResponse:
    """Create the fixed roles (USER, ADMIN, OWNER, STAFF) that do not exist yet."""
    return _to_response(service.seed_roles())


@router.post("/register", response_model=AuthResponse)
def register(
    body: RegisterRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> JSONResponse:
    """Create an account with the USER role."""
    return _to_response(
        service.register(
            username=body.username,
            password=body.password,
            email=body.email,
            first_name=body.first_name,
            last_name=body.last_name,
        )
    )


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> JSONResponse:
    """
    Authenticate with username and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    result = service.login(body.username, body.password)
    if not result.succeeded:
        return _to_response(result)
    body_out = TokenResponse(
        is_succeed=True,
        message=result.message,
        access_token=result.token,
    )
    return JSONResponse(status_code=status.HTTP_200_OK, content=body_out.model_dump())


def _grant(service: AuthService, body: UpdatePermissionRequest, role: UserRole) -> JSONResponse:
    return _to_response(service.grant_role(body.username, role))


@router.post("/make-admin", response_model=AuthResponse)
def make_admin(
    body: UpdatePermissionRequest,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> JSONResponse:
    """Grant the ADMIN role (admin only)."""
    return _grant(service, body, UserRole.ADMIN)


@router.post("/make-owner", response_model=AuthResponse)
def make_owner(
    body: UpdatePermissionRequest,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> JSONResponse:
    """Grant the OWNER role (admin only)."""
    return _grant(service, body, UserRole.OWNER)


@router.post("/make-staff", response_model=AuthResponse)
def make_staff(
    body: UpdatePermissionRequest,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> JSONResponse:
    """Grant the STAFF role (admin only)."""
    return _grant(service, body, UserRole.STAFF)


@router.get("/me", response_model=CurrentUser)
def read_me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Return the user identified by the bearer token."""
    return current_user
