"""
Read-only access to a group's ledger records.

The repository is the collaborator that feeds the balance and settlement
services: it reads members, active expenses and active payments of a group
and hands them over as engine schemas.
"""
from sqlalchemy.orm import Session, selectinload, joinedload
from typing import List
from splitledger.core.errors import GroupNotFound
from splitledger.models.group import Group, GroupMember
from splitledger.models.user import User
from splitledger.models.expense import Expense, ExpenseParticipant
from splitledger.models.payment import Payment
from splitledger.schemas.balance import Member
from splitledger.schemas.expense import Expense as ExpenseSchema, ExpenseParticipant as ExpenseParticipantSchema
from splitledger.schemas.payment import Payment as PaymentSchema


class LedgerRepository:
    """Reads ledger records of one group through a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def get_group(self, group_id: str) -> Group:
        """Get an active group, raising GroupNotFound when missing or soft-deleted."""
        group = self.db.query(Group).filter(
            Group.id == group_id,
            Group.deleted_at.is_(None)
        ).first()
        if not group:
            raise GroupNotFound(group_id)
        return group

    def list_active_members(self, group_id: str) -> List[Member]:
        """List members of a group whose user is not soft-deleted, ordered by display name."""
        rows = self.db.query(GroupMember).join(User, GroupMember.user_id == User.id).options(
            joinedload(GroupMember.user)
        ).filter(
            GroupMember.group_id == group_id,
            User.deleted_at.is_(None)
        ).order_by(User.display_name, User.id).all()

        return [Member(user_id=row.user_id, display_name=row.user.display_name) for row in rows]

    def list_active_expenses(self, group_id: str) -> List[ExpenseSchema]:
        """List non-deleted expenses of a group with their participants attached."""
        rows = self.db.query(Expense).options(
            selectinload(Expense.participants).joinedload(ExpenseParticipant.user)
        ).filter(
            Expense.group_id == group_id,
            Expense.deleted_at.is_(None)
        ).order_by(Expense.created_at, Expense.id).all()

        expenses = []
        for expense in rows:
            participants = [
                ExpenseParticipantSchema(
                    user_id=ep.user_id,
                    display_name=ep.user.display_name if ep.user else None,
                    share_amount=ep.share_amount,
                    share_percentage=ep.share_percentage,
                    share_count=ep.share_count,
                )
                for ep in expense.participants
            ]
            expenses.append(ExpenseSchema(
                id=expense.id,
                group_id=expense.group_id,
                payer_id=expense.payer_id,
                amount=expense.amount,
                currency=expense.currency,
                split_method=expense.split_method,
                description=expense.description,
                participants=participants,
            ))
        return expenses

    def list_active_payments(self, group_id: str) -> List[PaymentSchema]:
        """List non-deleted payments of a group."""
        rows = self.db.query(Payment).filter(
            Payment.group_id == group_id,
            Payment.deleted_at.is_(None)
        ).order_by(Payment.created_at, Payment.id).all()

        return [PaymentSchema.model_validate(payment) for payment in rows]
