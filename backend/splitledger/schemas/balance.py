"""
Pydantic schemas for group balances.
"""
from pydantic import BaseModel
from typing import List
from decimal import Decimal
import enum
from splitledger.core.config import settings


class BalanceStatus(str, enum.Enum):
    """Balance status enumeration."""
    OWES = "owes"
    OWED = "owed"
    SETTLED = "settled"


class Member(BaseModel):
    """Schema for an active group member."""
    user_id: str
    display_name: str

    class Config:
        from_attributes = True


class Balance(BaseModel):
    """Net position of a member: positive is owed money, negative owes money."""
    user_id: str
    user_name: str
    balance: Decimal
    currency: str

    @property
    def is_settled(self) -> bool:
        return abs(self.balance) < settings.BALANCE_TOLERANCE

    @property
    def owes_money(self) -> bool:
        return not self.is_settled and self.balance < 0

    @property
    def is_owed_money(self) -> bool:
        return not self.is_settled and self.balance > 0

    @property
    def absolute_balance(self) -> Decimal:
        return abs(self.balance)

    @property
    def status(self) -> BalanceStatus:
        if self.is_settled:
            return BalanceStatus.SETTLED
        if self.balance < 0:
            return BalanceStatus.OWES
        return BalanceStatus.OWED


class BalanceSummary(BaseModel):
    """Aggregate figures for a balances view."""
    currency: str
    total_owed: Decimal  # Sum of positive balances
    total_owing: Decimal  # Sum of magnitudes of negative balances
    creditor_count: int
    debtor_count: int
    settled_count: int


class GroupBalancesResponse(BaseModel):
    """Schema for group balances response."""
    group_id: str
    currency: str
    balances: List[Balance]
    summary: BalanceSummary
