"""Models package - Import all models for SQLAlchemy registration."""
from splitledger.models.user import User
from splitledger.models.group import Group, GroupMember
from splitledger.models.expense import Expense, ExpenseParticipant, SplitMethod
from splitledger.models.payment import Payment

__all__ = [
    "User",
    "Group",
    "GroupMember",
    "Expense",
    "ExpenseParticipant",
    "SplitMethod",
    "Payment",
]
