"""
Expense model for tracking shared spending.
"""
from sqlalchemy import Column, String, Numeric, ForeignKey, Integer, Text, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from splitledger.db.base import BaseModel
import enum


class SplitMethod(str, enum.Enum):
    """Split method enumeration."""
    EQUAL = "equal"
    PERCENTAGE = "percentage"
    EXACT = "exact"
    SHARES = "shares"


class Expense(BaseModel):
    """Expense model representing a single shared spending event."""
    __tablename__ = "expenses"

    group_id = Column(String(36), ForeignKey("groups.id"), nullable=False, index=True)
    payer_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(15, 3), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    split_method = Column(SQLEnum(SplitMethod), nullable=False, default=SplitMethod.EQUAL)
    description = Column(Text, nullable=True)
    deleted_at = Column(DateTime, nullable=True, index=True)  # Soft delete

    # Relationships
    group = relationship("Group", back_populates="expenses")
    payer = relationship("User", foreign_keys=[payer_id])
    participants = relationship(
        "ExpenseParticipant",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseParticipant.position",
    )


class ExpenseParticipant(BaseModel):
    """Junction table for Expense and User with the user's share."""
    __tablename__ = "expense_participants"

    expense_id = Column(String(36), ForeignKey("expenses.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    share_amount = Column(Numeric(15, 3), nullable=False)
    share_percentage = Column(Numeric(5, 2), nullable=True)  # Display only unless method is percentage
    share_count = Column(Integer, nullable=True)  # Only for the shares method
    position = Column(Integer, nullable=False, default=0)  # Input order; the last one absorbs rounding

    # Relationships
    expense = relationship("Expense", back_populates="participants")
    user = relationship("User")
