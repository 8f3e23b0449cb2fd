"""Import all models here so ``Base.metadata`` knows every table."""

from cinevault.db.base_class import Base
from cinevault.models import registry, suggestion  # noqa: F401

__all__ = ["Base"]
