"""Infrastructure errors raised by the auth core.

Expected outcomes (bad password, unknown user, duplicate username) are returned
as AuthResult values and never raised. Only failures the core cannot recover
from locally are exceptions.
"""


class InfrastructureError(Exception):
    """Base class for failures of the store or signing infrastructure."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class StoreUnavailableError(InfrastructureError):
    """Raised when the user/role store cannot complete a read or write."""


class SigningKeyMissingError(InfrastructureError):
    """Raised when the token signing secret is absent or blank."""
