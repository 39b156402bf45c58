"""SQLAlchemy declarative Base with the constraint naming used by the migrations."""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
}


class Base(DeclarativeBase):
    """Declarative base for the identity tables."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
