"""Auth service: login, registration, role grants and role seeding."""

import logging
import uuid
from datetime import timedelta
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import StoreUnavailableError
from app.core.security import DUMMY_PASSWORD_HASH, TokenIssuer, verify_password
from app.models.role import UserRole
from app.models.user import User
from app.schemas.auth import AuthOutcome, AuthResult
from app.stores.base import StoreFailure
from app.stores.role_store import RoleStore
from app.stores.user_store import UserStore

logger = logging.getLogger(__name__)

TOKEN_LIFETIME = timedelta(hours=1)

# Claim names in issued tokens. External verifiers read these.
CLAIM_NAME = "unique_name"
CLAIM_NAME_ID = "nameid"
CLAIM_TOKEN_ID = "JWTID"
CLAIM_FIRST_NAME = "FirstName"
CLAIM_LAST_NAME = "LastName"
CLAIM_ROLE = "role"

INVALID_CREDENTIAL_MESSAGE = "Invalid Credential"
INVALID_USERNAME_MESSAGE = "Invalid Username"

# Roles that can be granted after registration; USER is assigned at registration.
GRANTABLE_ROLES = (UserRole.ADMIN, UserRole.OWNER, UserRole.STAFF)

_STORE_FAILURE_OUTCOMES = {
    StoreFailure.ALREADY_EXISTS: AuthOutcome.ALREADY_EXISTS,
    StoreFailure.NOT_FOUND: AuthOutcome.NOT_FOUND,
    StoreFailure.VALIDATION_FAILED: AuthOutcome.VALIDATION_FAILED,
}


def _failure_message(errors: list[str]) -> str:
    return "User Creation Failed Because: " + "".join(f" # {e}" for e in errors)


class AuthService:
    """
    Orchestrates the user store, role store and token issuer.

    Every operation returns an AuthResult. Store and signing failures raise
    InfrastructureError subclasses and are never turned into results.
    """

    def __init__(
        self,
        users: UserStore,
        roles: RoleStore,
        token_issuer: TokenIssuer,
        db: Session,
    ) -> None:
        self.users = users
        self.roles = roles
        self.token_issuer = token_issuer
        self.db = db

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Auth transaction commit failed: %s", type(e).__name__)
            raise StoreUnavailableError("Store unavailable during commit", cause=e) from e

    def login(self, username: str, password: str) -> AuthResult:
        """
        Verify credentials and issue a bearer token with one claim per role.

        Unknown user and wrong password produce the same result.
        """
        user = self.users.find_by_username(username)
        if user is None:
            verify_password(password, DUMMY_PASSWORD_HASH)
            logger.info("Login failed username=%s", username)
            return AuthResult(
                outcome=AuthOutcome.INVALID_CREDENTIAL, message=INVALID_CREDENTIAL_MESSAGE
            )
        if not verify_password(password, user.password_hash):
            logger.info("Login failed username=%s", username)
            return AuthResult(
                outcome=AuthOutcome.INVALID_CREDENTIAL, message=INVALID_CREDENTIAL_MESSAGE
            )

        claims: dict[str, Any] = {
            CLAIM_NAME: user.username,
            CLAIM_NAME_ID: user.id,
            CLAIM_TOKEN_ID: str(uuid.uuid4()),
            CLAIM_FIRST_NAME: user.first_name,
            CLAIM_LAST_NAME: user.last_name,
            CLAIM_ROLE: self.users.get_roles(user),
        }
        token = self.token_issuer.issue(claims, TOKEN_LIFETIME)
        logger.info("Login succeeded username=%s roles=%s", user.username, claims[CLAIM_ROLE])
        return AuthResult(outcome=AuthOutcome.SUCCEEDED, message=token, token=token)

    def register(
        self,
        username: str,
        password: str,
        email: str,
        first_name: str,
        last_name: str,
    ) -> AuthResult:
        """Create a user with the USER role; the store enforces the password policy."""
        if self.users.username_exists(username):
            logger.info("Registration rejected: username exists username=%s", username)
            return AuthResult(
                outcome=AuthOutcome.ALREADY_EXISTS, message="UserName already exist"
            )

        # Registration must not depend on seeding having run first. The role is
        # committed on its own so a lost creation race cannot discard the user.
        if not self.roles.role_exists(UserRole.USER.value):
            if self.roles.create_role(UserRole.USER.value).succeeded:
                self._commit()

        new_user = User(
            username=username,
            email=email,
            first_name=first_name,
            last_name=last_name,
            security_stamp=str(uuid.uuid4()),
        )
        created = self.users.create(new_user, password)
        if not created.succeeded:
            outcome = _STORE_FAILURE_OUTCOMES[created.failure]
            if outcome is AuthOutcome.ALREADY_EXISTS:
                return AuthResult(outcome=outcome, message="UserName already exist")
            logger.info(
                "Registration rejected username=%s reasons=%d", username, len(created.errors)
            )
            return AuthResult(
                outcome=outcome,
                message=_failure_message(created.errors),
                errors=created.errors,
            )

        assigned = self.roles.add_role_to_user(new_user, UserRole.USER.value)
        if not assigned.succeeded:
            self.db.rollback()
            raise StoreUnavailableError("Default role could not be assigned")
        self._commit()
        logger.info("User registered username=%s", username)
        return AuthResult(outcome=AuthOutcome.SUCCEEDED, message="User created successfully")

    def grant_role(self, username: str, role: UserRole) -> AuthResult:
        """Add ADMIN, OWNER or STAFF to an existing user."""
        if role not in GRANTABLE_ROLES:
            raise ValueError(f"Role {role.value} cannot be granted")
        user = self.users.find_by_username(username)
        if user is None:
            logger.info("Role grant failed: unknown user username=%s role=%s", username, role.value)
            return AuthResult(outcome=AuthOutcome.NOT_FOUND, message=INVALID_USERNAME_MESSAGE)

        added = self.roles.add_role_to_user(user, role.value)
        if not added.succeeded:
            logger.warning("Role grant failed: role not seeded role=%s", role.value)
            return AuthResult(
                outcome=_STORE_FAILURE_OUTCOMES[added.failure],
                message=added.errors[0],
                errors=added.errors,
            )
        self._commit()
        logger.info("Role granted username=%s role=%s", user.username, role.value)
        return AuthResult(
            outcome=AuthOutcome.SUCCEEDED,
            message=f"User is {role.value.capitalize()}",
        )

    def seed_roles(self) -> AuthResult:
        """Create each fixed role that does not exist yet. Safe to call repeatedly."""
        missing = [r for r in UserRole if not self.roles.role_exists(r.value)]
        if not missing:
            return AuthResult(
                outcome=AuthOutcome.SUCCEEDED, message="Roles Seeding is already done"
            )

        for role in missing:
            created = self.roles.create_role(role.value)
            if created.succeeded:
                self._commit()
                logger.info("Role seeded role=%s", role.value)
            else:
                # Another caller created it between the check and the insert.
                logger.info("Role already present while seeding role=%s", role.value)
        return AuthResult(
            outcome=AuthOutcome.SUCCEEDED, message="Roles Seeding done successfully"
        )
