"""
Declarative base and shared columns for all models.
"""
import uuid
from sqlalchemy import Column, String, DateTime, func
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def generate_uuid() -> str:
    """Generate a string UUID primary key."""
    return str(uuid.uuid4())


class BaseModel(Base):
    """Abstract model with id and timestamps."""
    __abstract__ = True

    id = Column(String(36), primary_key=True, default=generate_uuid)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
