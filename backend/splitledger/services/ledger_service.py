"""
Ledger service: computes balances and settlement plans for a stored group.
"""
from sqlalchemy.orm import Session
from typing import List, Tuple
import logging
from splitledger.schemas.balance import Balance, GroupBalancesResponse
from splitledger.schemas.settlement import SettlementPlanResponse
from splitledger.services.balance_service import calculate_group_balances, summarize_balances
from splitledger.services.ledger_repository import LedgerRepository
from splitledger.services.settlement_service import format_settlement_summary, generate_settlement_plan

logger = logging.getLogger(__name__)


def _load_balances(group_id: str, db: Session) -> Tuple[str, List[Balance]]:
    """
    Read one snapshot of the group and compute its balances.

    All reads happen in the session's current transaction, so the members,
    expenses and payments are consistent with each other.
    """
    repository = LedgerRepository(db)
    group = repository.get_group(group_id)
    currency = group.primary_currency.upper()

    members = repository.list_active_members(group_id)
    expenses = repository.list_active_expenses(group_id)
    payments = repository.list_active_payments(group_id)

    return currency, calculate_group_balances(members, expenses, payments, currency)


def get_group_balances(group_id: str, db: Session) -> GroupBalancesResponse:
    """Get net balances of every member of a group."""
    currency, balances = _load_balances(group_id, db)
    return GroupBalancesResponse(
        group_id=group_id,
        currency=currency,
        balances=balances,
        summary=summarize_balances(balances, currency),
    )


def get_settlement_plan(group_id: str, db: Session) -> SettlementPlanResponse:
    """Suggest the payments that settle a group."""
    currency, balances = _load_balances(group_id, db)
    transactions = generate_settlement_plan(balances)
    logger.info(f"Settlement plan for group {group_id}: {len(transactions)} transactions")
    return SettlementPlanResponse(
        group_id=group_id,
        currency=currency,
        transactions=transactions,
        summary=format_settlement_summary(balances, transactions),
    )
