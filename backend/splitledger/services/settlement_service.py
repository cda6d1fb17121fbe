"""
Settlement service: reduces net balances to a short list of suggested payments.
"""
import logging
from typing import Dict, List, Sequence
from splitledger.core.config import settings
from splitledger.core.currency import format_amount, from_minor_units, to_minor_units, tolerance_units
from splitledger.core.errors import CurrencyMismatch
from splitledger.schemas.balance import Balance
from splitledger.schemas.settlement import SettlementTransaction

logger = logging.getLogger(__name__)


def _common_currency(balances: Sequence[Balance]) -> str:
    currency = balances[0].currency.upper()
    for balance in balances:
        if balance.currency.upper() != currency:
            raise CurrencyMismatch(currency, balance.currency, balance.user_id)
    return currency


def _balance_units(balances: Sequence[Balance], currency: str) -> Dict[str, int]:
    units = {}
    for balance in balances:
        if balance.user_id in units:
            raise ValueError(f"Duplicate balance for user {balance.user_id}")
        units[balance.user_id] = to_minor_units(balance.balance, currency)
    return units


def _largest(positions: Dict[str, int]) -> str:
    """User with the largest position; ties go to the smallest user id."""
    return min(positions, key=lambda uid: (-positions[uid], uid))


def generate_settlement_plan(balances: Sequence[Balance]) -> List[SettlementTransaction]:
    """
    Generate settlement transactions using a greedy algorithm.

    Repeatedly matches the largest creditor with the largest debtor and moves
    the smaller of the two amounts. Members within the balance tolerance of
    zero are left out. Produces at most n-1 transactions for n non-zero
    balances; it is not guaranteed to be the global minimum for every
    distribution. Returned sorted by amount, largest first.
    """
    if not balances:
        return []

    currency = _common_currency(balances)
    threshold = tolerance_units(currency, settings.BALANCE_TOLERANCE)
    names = {b.user_id: b.user_name for b in balances}
    positions = _balance_units(balances, currency)

    # Both sides hold positive magnitudes in minor units
    creditors = {uid: units for uid, units in positions.items() if units > threshold}
    debtors = {uid: -units for uid, units in positions.items() if units < -threshold}

    transactions = []
    while creditors and debtors:
        creditor_id = _largest(creditors)
        debtor_id = _largest(debtors)
        amount = min(creditors[creditor_id], debtors[debtor_id])

        transactions.append(SettlementTransaction(
            payer_id=debtor_id,
            payer_name=names[debtor_id],
            recipient_id=creditor_id,
            recipient_name=names[creditor_id],
            amount=from_minor_units(amount, currency),
            currency=currency,
        ))
        logger.debug(f"{names[debtor_id]} -> {names[creditor_id]}: {amount} minor units of {currency}")

        creditors[creditor_id] -= amount
        debtors[debtor_id] -= amount
        if creditors[creditor_id] <= threshold:
            del creditors[creditor_id]
        if debtors[debtor_id] <= threshold:
            del debtors[debtor_id]

    # Stable sort keeps emission order between equal amounts
    transactions.sort(key=lambda t: t.amount, reverse=True)

    logger.info(f"Generated settlement plan with {len(transactions)} transactions for {len(balances)} members")
    return transactions


def apply_settlement_plan(
    balances: Sequence[Balance],
    transactions: Sequence[SettlementTransaction],
) -> List[Balance]:
    """Balances after every transaction of a plan has been paid."""
    if not balances:
        return []

    currency = _common_currency(balances)
    positions = _balance_units(balances, currency)
    for transaction in transactions:
        if transaction.currency.upper() != currency:
            raise CurrencyMismatch(currency, transaction.currency)
        units = to_minor_units(transaction.amount, currency)
        positions[transaction.payer_id] = positions.get(transaction.payer_id, 0) + units
        positions[transaction.recipient_id] = positions.get(transaction.recipient_id, 0) - units

    return [
        Balance(
            user_id=b.user_id,
            user_name=b.user_name,
            balance=from_minor_units(positions[b.user_id], currency),
            currency=currency,
        )
        for b in balances
    ]


def format_settlement_summary(
    balances: Sequence[Balance],
    transactions: Sequence[SettlementTransaction],
) -> str:
    """Create a plain-text summary of balances and the suggested transfers."""
    currency = balances[0].currency if balances else settings.DEFAULT_CURRENCY

    summary_lines = []
    summary_lines.append(f"Participants: {len(balances)}")
    summary_lines.append("\nNet balances:")
    for balance in balances:
        sign = "+" if balance.balance > 0 else ""
        summary_lines.append(f"  {balance.user_name}: {sign}{format_amount(balance.balance, currency)}")
    summary_lines.append("\nTransfers:")
    if not transactions:
        summary_lines.append("  Everyone is settled up")
    for transaction in transactions:
        summary_lines.append(
            f"  {transaction.payer_name} -> {transaction.recipient_name}: "
            f"{format_amount(transaction.amount, currency)}"
        )
    return "\n".join(summary_lines)
