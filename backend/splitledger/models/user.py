"""
User model for group members.
"""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from splitledger.db.base import BaseModel


class User(BaseModel):
    """User model."""
    __tablename__ = "users"

    display_name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, nullable=True, index=True)
    deleted_at = Column(DateTime, nullable=True, index=True)  # Soft delete

    # Relationships
    memberships = relationship("GroupMember", back_populates="user", cascade="all, delete-orphan")
