"""
Pydantic schemas for Expense entity.
"""
from pydantic import BaseModel, field_validator
from typing import List, Optional
from decimal import Decimal
from splitledger.core.currency import normalize_currency_code
from splitledger.models.expense import SplitMethod


class ExpenseParticipant(BaseModel):
    """Schema for a participant's share of an expense."""
    user_id: str
    display_name: Optional[str] = None
    share_amount: Decimal
    share_percentage: Optional[Decimal] = None  # 0-100, display only unless method is percentage
    share_count: Optional[int] = None  # Only meaningful for the shares method

    class Config:
        from_attributes = True


class Expense(BaseModel):
    """Schema for an expense snapshot consumed by the balance engine."""
    id: str
    group_id: str
    payer_id: str
    amount: Decimal
    currency: str
    split_method: SplitMethod = SplitMethod.EQUAL
    description: Optional[str] = None
    participants: List[ExpenseParticipant] = []

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        """Currency must be a supported ISO 4217 code."""
        return normalize_currency_code(v)

    class Config:
        from_attributes = True
