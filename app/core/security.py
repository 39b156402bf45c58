"""Password hashing, password policy, and JWT issuance/verification for authentication."""

import base64
import hashlib
import hmac
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from app.core.config import settings
from app.core.exceptions import SigningKeyMissingError

if TYPE_CHECKING:
    from app.core.config import Settings

# Min/max lengths for username validation (input validation).
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
USERNAME_ALLOWED_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-._@+"
)

# bcrypt only reads the first 72 bytes of its input, so passwords are first
# reduced to a fixed 44-byte HMAC-SHA256 digest in which every input byte counts.
PASSWORD_PREHASH_KEY = b"timeshare-password-prehash-v1"


def _prehash(plain_password: str) -> bytes:
    digest = hmac.new(
        PASSWORD_PREHASH_KEY, plain_password.encode("utf-8"), hashlib.sha256
    ).digest()
    return base64.b64encode(digest)


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_prehash(plain_password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    try:
        return bcrypt.checkpw(_prehash(plain_password), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# Verified against when the username does not exist, so an unknown user costs
# the same bcrypt work as a wrong password.
DUMMY_PASSWORD_HASH: str = hash_password("timeshare-timing-dummy")


def validate_username(username: str) -> list[str]:
    """Return the reasons a username is unacceptable (empty when valid)."""
    errors: list[str] = []
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        errors.append(
            f"Username must be between {USERNAME_MIN_LEN} and {USERNAME_MAX_LEN} characters."
        )
    if any(ch not in USERNAME_ALLOWED_CHARS for ch in username):
        errors.append(
            f"Username '{username}' is invalid, can only contain letters, digits and -._@+."
        )
    return errors


class PasswordPolicy:
    """Configurable password strength rules applied when a user is created."""

    def __init__(
        self,
        min_length: int = 8,
        max_length: int = 128,
        require_digit: bool = True,
        require_lowercase: bool = True,
        require_uppercase: bool = True,
        require_non_alphanumeric: bool = True,
        required_unique_chars: int = 1,
    ) -> None:
        self.min_length = min_length
        self.max_length = max_length
        self.require_digit = require_digit
        self.require_lowercase = require_lowercase
        self.require_uppercase = require_uppercase
        self.require_non_alphanumeric = require_non_alphanumeric
        self.required_unique_chars = required_unique_chars

    @classmethod
    def from_settings(cls, settings: "Settings") -> "PasswordPolicy":
        return cls(
            min_length=settings.PASSWORD_MIN_LENGTH,
            max_length=settings.PASSWORD_MAX_LENGTH,
            require_digit=settings.PASSWORD_REQUIRE_DIGIT,
            require_lowercase=settings.PASSWORD_REQUIRE_LOWERCASE,
            require_uppercase=settings.PASSWORD_REQUIRE_UPPERCASE,
            require_non_alphanumeric=settings.PASSWORD_REQUIRE_NON_ALPHANUMERIC,
            required_unique_chars=settings.PASSWORD_REQUIRED_UNIQUE_CHARS,
        )

    def validate(self, password: str) -> list[str]:
        """Return every rule the password breaks, in a stable order."""
        errors: list[str] = []
        if len(password) < self.min_length:
            errors.append(f"Passwords must be at least {self.min_length} characters.")
        if len(password) > self.max_length:
            errors.append(f"Passwords must be at most {self.max_length} characters.")
        if self.require_non_alphanumeric and all(ch.isalnum() for ch in password):
            errors.append("Passwords must have at least one non alphanumeric character.")
        if self.require_digit and not any(ch.isdigit() for ch in password):
            errors.append("Passwords must have at least one digit ('0'-'9').")
        if self.require_lowercase and not any(ch.islower() for ch in password):
            errors.append("Passwords must have at least one lowercase ('a'-'z').")
        if self.require_uppercase and not any(ch.isupper() for ch in password):
            errors.append("Passwords must have at least one uppercase ('A'-'Z').")
        if len(set(password)) < self.required_unique_chars:
            errors.append(
                f"Passwords must use at least {self.required_unique_chars} different characters."
            )
        return errors


class TokenIssuer:
    """
    Issues and verifies HMAC-signed JWTs carrying issuer, audience, iat and exp.

    Raises SigningKeyMissingError at construction when the secret is absent or
    blank, so a misconfigured application fails on startup rather than at the
    first login.
    """

    def __init__(
        self,
        secret: str | None,
        issuer: str,
        audience: str,
        algorithm: str = "HS256",
    ) -> None:
        if secret is None or not secret.strip():
            raise SigningKeyMissingError("JWT signing secret is not configured")
        self._secret = secret
        self.issuer = issuer
        self.audience = audience
        self.algorithm = algorithm

    def __repr__(self) -> str:
        return f"TokenIssuer(issuer={self.issuer!r}, audience={self.audience!r}, algorithm={self.algorithm!r})"

    def issue(
        self,
        claims: dict[str, Any],
        expires_delta: timedelta,
        now: datetime | None = None,
    ) -> str:
        """Sign claims into a token that expires expires_delta after now."""
        issued_at = now or datetime.now(UTC)
        payload: dict[str, Any] = dict(claims)
        payload.update(
            {
                "iss": self.issuer,
                "aud": self.audience,
                "iat": issued_at,
                "exp": issued_at + expires_delta,
            }
        )
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def decode(self, token: str, now: datetime | None = None) -> dict[str, Any]:
        """
        Validate signature, issuer, audience and expiry; return the payload.
        Raises jwt.PyJWTError on invalid or expired token.

        When now is given, expiry is checked against that instant instead of
        the wall clock.
        """
        options: dict[str, Any] = {"require": ["exp", "iat", "iss", "aud"]}
        if now is None:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                audience=self.audience,
                options=options,
            )
        options["verify_exp"] = False
        payload = jwt.decode(
            token,
            self._secret,
            algorithms=[self.algorithm],
            issuer=self.issuer,
            audience=self.audience,
            options=options,
        )
        if now.timestamp() >= float(payload["exp"]):
            raise jwt.ExpiredSignatureError("Signature has expired")
        return payload


def get_token_issuer() -> TokenIssuer:
    """Build the TokenIssuer from application settings."""
    secret = settings.JWT_SECRET.get_secret_value() if settings.JWT_SECRET else None
    return TokenIssuer(
        secret=secret,
        issuer=settings.JWT_VALID_ISSUER,
        audience=settings.JWT_VALID_AUDIENCE,
        algorithm=settings.JWT_ALGORITHM,
    )
