"""User and role stores backed by SQLAlchemy."""

from app.stores.base import StoreFailure, StoreResult
from app.stores.role_store import RoleStore
from app.stores.user_store import UserStore

__all__ = ["RoleStore", "StoreFailure", "StoreResult", "UserStore"]
