"""SQLAlchemy declarative base shared by the registry and suggestion tables."""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Declarative base; every model names its own ``__tablename__``."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
