"""Shared schema base classes for API responses."""

from pydantic import BaseModel


class ORMModel(BaseModel):
    """Base model that reads attributes off SQLAlchemy rows."""

    model_config = {"from_attributes": True}
