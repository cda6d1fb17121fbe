"""
Balance service: aggregates a group's expenses and payments into net balances.
"""
import logging
from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Optional, Sequence
from splitledger.core.config import settings
from splitledger.core.currency import from_minor_units, normalize_currency_code, to_decimal, to_minor_units
from splitledger.core.errors import CurrencyMismatch, InvalidAmount
from splitledger.schemas.balance import Balance, BalanceSummary, Member
from splitledger.schemas.expense import Expense
from splitledger.schemas.payment import Payment

logger = logging.getLogger(__name__)


def _positive_units(amount, currency: str, what: str) -> int:
    units = to_minor_units(amount, currency)
    if units < 0:
        raise InvalidAmount(f"{what} must not be negative, got {amount}")
    return units


def _in_group_currency(record, group_currency: str, strict: bool, kind: str) -> bool:
    """Whether a record takes part in the balance pass."""
    if record.currency == group_currency:
        return True
    if strict:
        raise CurrencyMismatch(group_currency, record.currency, record.id)
    logger.warning(
        f"Excluding {kind} {record.id} from balances: currency {record.currency} "
        f"differs from group currency {group_currency}"
    )
    return False


def calculate_group_balances(
    members: Sequence[Member],
    expenses: Sequence[Expense],
    payments: Sequence[Payment],
    group_currency: str,
    strict_currency: Optional[bool] = None,
) -> List[Balance]:
    """
    Calculate the net balance of every group member.

    balance = paid as expense payer + received as payment recipient
              - owed as expense participant - sent as payment sender

    Only records in group_currency are counted. Records in another currency
    are skipped with a warning, or raise CurrencyMismatch when strict
    currency checking is on (strict_currency, falling back to the
    STRICT_CURRENCY_CHECK setting). Members without records get a zero
    balance. The result is sorted by display name, then user id.
    """
    group_currency = normalize_currency_code(group_currency)
    strict = settings.STRICT_CURRENCY_CHECK if strict_currency is None else strict_currency

    # user_id -> minor units
    net: Dict[str, int] = defaultdict(int)

    for expense in expenses:
        if not _in_group_currency(expense, group_currency, strict, "expense"):
            continue
        net[expense.payer_id] += _positive_units(expense.amount, group_currency, "Expense amount")
        for participant in expense.participants:
            net[participant.user_id] -= _positive_units(participant.share_amount, group_currency, "Share amount")

    for payment in payments:
        if not _in_group_currency(payment, group_currency, strict, "payment"):
            continue
        units = _positive_units(payment.amount, group_currency, "Payment amount")
        net[payment.recipient_id] += units
        net[payment.payer_id] -= units

    member_ids = {m.user_id for m in members}
    strangers = sorted(uid for uid, units in net.items() if uid not in member_ids and units != 0)
    if strangers:
        logger.warning(f"Records reference users outside the member list: {strangers}")

    balances = [
        Balance(
            user_id=member.user_id,
            user_name=member.display_name,
            balance=from_minor_units(net.get(member.user_id, 0), group_currency),
            currency=group_currency,
        )
        for member in members
    ]
    balances.sort(key=lambda b: (b.user_name, b.user_id))

    logger.info(
        f"Calculated balances for {len(balances)} members from {len(expenses)} expenses "
        f"and {len(payments)} payments in {group_currency}"
    )
    return balances


def validate_expense_split(expense: Expense) -> bool:
    """Check that an expense's participant shares add up to its amount (within tolerance)."""
    split_total = sum((to_decimal(p.share_amount) for p in expense.participants), Decimal(0))
    return abs(to_decimal(expense.amount) - split_total) < settings.BALANCE_TOLERANCE


def summarize_balances(balances: Sequence[Balance], currency: Optional[str] = None) -> BalanceSummary:
    """Aggregate totals and counts for a balances view."""
    if currency is None:
        currency = balances[0].currency if balances else settings.DEFAULT_CURRENCY

    total_owed = Decimal(0)
    total_owing = Decimal(0)
    creditors = debtors = settled = 0
    for balance in balances:
        if balance.is_settled:
            settled += 1
        elif balance.balance > 0:
            creditors += 1
            total_owed += balance.balance
        else:
            debtors += 1
            total_owing += -balance.balance

    return BalanceSummary(
        currency=currency,
        total_owed=total_owed,
        total_owing=total_owing,
        creditor_count=creditors,
        debtor_count=debtors,
        settled_count=settled,
    )
