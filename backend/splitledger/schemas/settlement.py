"""
Pydantic schemas for settlement plans.
"""
from pydantic import BaseModel
from typing import List
from decimal import Decimal


class SettlementTransaction(BaseModel):
    """Schema for a single suggested transfer in a settlement plan."""
    payer_id: str
    payer_name: str
    recipient_id: str
    recipient_name: str
    amount: Decimal
    currency: str


class SettlementPlanResponse(BaseModel):
    """Schema for settlement plan response."""
    group_id: str
    currency: str
    transactions: List[SettlementTransaction]
    summary: str
