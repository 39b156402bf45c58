"""Shared result type and error translation for the user and role stores."""

import enum
import logging
from collections.abc import Iterator
from contextlib import contextmanager

from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class StoreFailure(str, enum.Enum):
    """Why a store write was refused."""

    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    VALIDATION_FAILED = "validation_failed"


class StoreResult(BaseModel):
    """Outcome of a store write: success, or a failure kind with its reasons."""

    succeeded: bool
    failure: StoreFailure | None = None
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def ok(cls) -> "StoreResult":
        return cls(succeeded=True)

    @classmethod
    def failed(cls, failure: StoreFailure, errors: list[str]) -> "StoreResult":
        return cls(succeeded=False, failure=failure, errors=errors)


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Translate driver errors (other than integrity violations) into StoreUnavailableError."""
    try:
        yield
    except IntegrityError:
        raise
    except SQLAlchemyError as e:
        logger.error("Store operation failed: operation=%s error=%s", operation, type(e).__name__)
        raise StoreUnavailableError(f"Store unavailable during {operation}", cause=e) from e


def normalize(value: str) -> str:
    """Key used for case-insensitive uniqueness of usernames, emails and role names."""
    return value.strip().upper()
