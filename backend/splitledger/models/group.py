"""
Group model for shared expense groups.
"""
from sqlalchemy import Column, String, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from splitledger.db.base import BaseModel


class Group(BaseModel):
    """Group model; balances are computed in its primary currency."""
    __tablename__ = "groups"

    name = Column(String(200), nullable=False)
    primary_currency = Column(String(3), nullable=False, default="USD")
    deleted_at = Column(DateTime, nullable=True, index=True)  # Soft delete

    # Relationships
    members = relationship("GroupMember", back_populates="group", cascade="all, delete-orphan")
    expenses = relationship("Expense", back_populates="group", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="group", cascade="all, delete-orphan")


class GroupMember(BaseModel):
    """Junction table for Group and User many-to-many relationship."""
    __tablename__ = "group_members"

    group_id = Column(String(36), ForeignKey("groups.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    group = relationship("Group", back_populates="members")
    user = relationship("User", back_populates="memberships")
