"""
Split service: turns an expense amount and a split method into per-participant shares.

All functions are pure. Shares are computed in integer minor units of the
expense currency and always add up to the amount exactly. Equal and exact
splits leave the rounding residue to the last participant in input order;
proportional splits hand it out by largest remainder so no share strays
more than one minor unit from its exact value.
"""
import logging
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import Dict, List, Mapping, Optional, Sequence
from splitledger.core.config import settings
from splitledger.core.currency import (
    divide_minor_units,
    from_minor_units,
    to_minor_units,
    to_decimal,
)
from splitledger.core.errors import (
    AmountsMustSumToTotal,
    EmptyParticipantSet,
    InvalidAmount,
    InvalidShareConfiguration,
    InvalidShareCount,
    PercentageOutOfRange,
    PercentagesMustSumTo100,
    SplitConfigurationError,
)
from splitledger.models.expense import SplitMethod
from splitledger.schemas.expense import ExpenseParticipant
from splitledger.schemas.split import (
    EqualSplitParticipant,
    ExactSplitParticipant,
    PercentageSplitParticipant,
    SharesSplitParticipant,
    SplitErrorCode,
    SplitParticipantInput,
    SplitValidationError,
)

logger = logging.getLogger(__name__)

HUNDRED = Decimal(100)
PERCENT_QUANTUM = Decimal("0.01")


def _total_units(amount, currency: str) -> int:
    """Convert the amount being split to minor units, rejecting negative input."""
    units = to_minor_units(amount, currency)
    if units < 0:
        raise InvalidAmount(f"Amount to split must not be negative, got {amount}")
    return units


def _check_unique(participant_ids: Sequence[str]) -> None:
    if len(set(participant_ids)) != len(participant_ids):
        raise InvalidShareConfiguration("Duplicate participants are not allowed")


def _allocate(total_units: int, weights: Sequence[Decimal], denominator: Decimal) -> List[int]:
    """
    Allocate total_units proportionally to weights/denominator.

    Largest remainder: every share is floored, then the units left over go
    one at a time to the largest remainders, ties to later participants so
    the last one absorbs an even residue. Each share stays within one minor
    unit of its exact value and none drops below zero. When the weights miss
    the denominator by a tolerated sliver the gap is spread the same way,
    the weights themselves are never rescaled.
    """
    exact = [Decimal(total_units) * weight / denominator for weight in weights]
    allocated = [int(value.to_integral_value(rounding=ROUND_FLOOR)) for value in exact]
    residue = total_units - sum(allocated)
    order = sorted(range(len(weights)), key=lambda i: (exact[i] - allocated[i], i), reverse=residue > 0)
    while residue:
        for i in order:
            if residue > 0:
                allocated[i] += 1
                residue -= 1
            elif residue < 0 and allocated[i] > 0:
                allocated[i] -= 1
                residue += 1
    return allocated


def _to_amounts(participant_ids: Sequence[str], units: Sequence[int], currency: str) -> Dict[str, Decimal]:
    return {uid: from_minor_units(u, currency) for uid, u in zip(participant_ids, units)}


def split_equally(amount, participant_ids: Sequence[str], currency: Optional[str] = None) -> Dict[str, Decimal]:
    """
    Split amount equally among participants.

    Everyone but the last participant receives ``round(amount / n)``; the last
    one receives the remainder. For tiny amounts over many participants where
    rounding up would leave the last participant a negative share, the
    per-head share is floored instead.
    """
    currency = currency or settings.DEFAULT_CURRENCY
    if not participant_ids:
        raise EmptyParticipantSet()
    _check_unique(participant_ids)

    total = _total_units(amount, currency)
    count = len(participant_ids)
    per_head = divide_minor_units(total, count)
    if per_head * (count - 1) > total:
        per_head = divide_minor_units(total, count, floor=True)

    units = [per_head] * (count - 1) + [total - per_head * (count - 1)]
    return _to_amounts(participant_ids, units, currency)


def split_by_percentage(amount, percentages: Mapping[str, Decimal], currency: Optional[str] = None) -> Dict[str, Decimal]:
    """
    Split amount by percentage.

    Percentages must already sum to 100 (within 0.01); they are never
    renormalized. Each share is within one minor unit of amount * pct / 100.
    """
    currency = currency or settings.DEFAULT_CURRENCY
    if not percentages:
        raise EmptyParticipantSet()

    participant_ids = list(percentages.keys())
    weights = [to_decimal(percentages[uid]) for uid in participant_ids]
    for weight in weights:
        if weight < 0 or weight > HUNDRED:
            raise PercentageOutOfRange(f"All percentages must be between 0 and 100, got {weight}")
    total_percentage = sum(weights, Decimal(0))
    if abs(total_percentage - HUNDRED) > settings.BALANCE_TOLERANCE:
        raise PercentagesMustSumTo100(f"Percentages must sum to 100%, got {total_percentage}%")

    units = _allocate(_total_units(amount, currency), weights, HUNDRED)
    return _to_amounts(participant_ids, units, currency)


def split_by_exact_amounts(amount, exact_amounts: Mapping[str, Decimal], currency: Optional[str] = None) -> Dict[str, Decimal]:
    """
    Split amount by declared exact amounts.

    Declared amounts are rounded to the currency precision. Their sum may be
    off by at most the balance tolerance; that residue goes to the last
    participant.
    """
    currency = currency or settings.DEFAULT_CURRENCY
    if not exact_amounts:
        raise EmptyParticipantSet()

    total = _total_units(amount, currency)
    participant_ids = list(exact_amounts.keys())
    declared = [to_decimal(exact_amounts[uid]) for uid in participant_ids]
    for uid, value in zip(participant_ids, declared):
        if value < 0:
            raise InvalidAmount(f"Exact amount for {uid} must not be negative")

    declared_total = sum(declared, Decimal(0))
    if abs(declared_total - to_decimal(amount)) > settings.BALANCE_TOLERANCE:
        raise AmountsMustSumToTotal(
            f"Exact amounts must sum to total amount. "
            f"Expected: {from_minor_units(total, currency)}, Got: {declared_total}"
        )

    units = [to_minor_units(value, currency) for value in declared]
    units[-1] += total - sum(units)
    return _to_amounts(participant_ids, units, currency)


def split_by_shares(amount, shares: Mapping[str, int], currency: Optional[str] = None) -> Dict[str, Decimal]:
    """Split amount proportionally to positive integer share counts."""
    currency = currency or settings.DEFAULT_CURRENCY
    if not shares:
        raise EmptyParticipantSet()

    participant_ids = list(shares.keys())
    for uid in participant_ids:
        count = shares[uid]
        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            raise InvalidShareCount(f"Share count for {uid} must be a positive integer, got {count!r}")

    total_shares = sum(shares.values())
    if total_shares == 0:
        raise InvalidShareConfiguration("Total shares cannot be zero")

    weights = [Decimal(shares[uid]) for uid in participant_ids]
    units = _allocate(_total_units(amount, currency), weights, Decimal(total_shares))
    return _to_amounts(participant_ids, units, currency)


def calculate_percentages(total_amount, split_amounts: Mapping[str, Decimal]) -> Dict[str, Decimal]:
    """
    Percentage of the total each share represents, for display.

    Rounded to 2 places with the last participant absorbing the residue so
    the figures add up to 100. A zero total yields zero for everyone.
    """
    total = to_decimal(total_amount)
    participant_ids = list(split_amounts.keys())
    if total == 0 or not participant_ids:
        return {uid: Decimal("0.00") for uid in participant_ids}

    hundredths = []
    for uid in participant_ids[:-1]:
        pct = (to_decimal(split_amounts[uid]) / total * HUNDRED).quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP)
        hundredths.append(pct)
    hundredths.append(HUNDRED - sum(hundredths, Decimal(0)))
    return {uid: pct.quantize(PERCENT_QUANTUM) for uid, pct in zip(participant_ids, hundredths)}


def _error(code: SplitErrorCode, message: str) -> SplitValidationError:
    return SplitValidationError(code=code, message=message)


def validate_split_configuration(
    total_amount,
    method: SplitMethod,
    participant_data: Sequence[SplitParticipantInput],
) -> Optional[SplitValidationError]:
    """
    Validate a split configuration before calculation.

    Returns None when the configuration is valid, otherwise the first
    problem found. A non-null result blocks submission of the expense.
    """
    method = SplitMethod(method)
    total = to_decimal(total_amount)
    tolerance = settings.BALANCE_TOLERANCE

    if total <= 0:
        return _error(SplitErrorCode.NON_POSITIVE_AMOUNT, "Total amount must be positive")

    if not participant_data:
        return _error(SplitErrorCode.EMPTY_PARTICIPANT_SET, "At least one participant is required")

    user_ids = {p.user_id for p in participant_data}
    if len(user_ids) != len(participant_data):
        return _error(SplitErrorCode.DUPLICATE_PARTICIPANT, "Duplicate participants are not allowed")

    for participant in participant_data:
        if participant.method != method.value:
            return _error(
                SplitErrorCode.METHOD_MISMATCH,
                f"Participant {participant.user_id} is configured for '{participant.method}', not '{method.value}'",
            )

    if method == SplitMethod.PERCENTAGE:
        total_percentage = Decimal(0)
        for participant in participant_data:
            percentage = to_decimal(participant.percentage)
            if percentage < 0 or percentage > HUNDRED:
                return _error(SplitErrorCode.PERCENTAGE_OUT_OF_RANGE, "All percentages must be between 0 and 100")
            total_percentage += percentage
        if abs(total_percentage - HUNDRED) > tolerance:
            return _error(
                SplitErrorCode.PERCENTAGES_MUST_SUM_TO_100,
                f"Percentages must sum to 100% (currently {total_percentage:.1f}%)",
            )

    elif method == SplitMethod.EXACT:
        total_exact = Decimal(0)
        for participant in participant_data:
            amount = to_decimal(participant.amount)
            if amount < 0:
                return _error(SplitErrorCode.NEGATIVE_AMOUNT, "All amounts must be non-negative")
            total_exact += amount
        if abs(total_exact - total) > tolerance:
            return _error(
                SplitErrorCode.AMOUNTS_MUST_SUM_TO_TOTAL,
                f"Exact amounts must sum to total amount ({total_exact:.2f} != {total:.2f})",
            )

    elif method == SplitMethod.SHARES:
        for participant in participant_data:
            if participant.shares <= 0:
                return _error(SplitErrorCode.INVALID_SHARE_COUNT, "All share counts must be positive integers")

    return None


def calculate_split(
    total_amount,
    method: SplitMethod,
    participant_data: Sequence[SplitParticipantInput],
    currency: Optional[str] = None,
) -> List[ExpenseParticipant]:
    """
    Calculate final participant records for an expense.

    Raises SplitConfigurationError carrying the validation error when the
    configuration is rejected. Every record gets a share_percentage for
    display; shares-method records also keep their share_count.
    """
    currency = currency or settings.DEFAULT_CURRENCY
    method = SplitMethod(method)
    error = validate_split_configuration(total_amount, method, participant_data)
    if error is not None:
        raise SplitConfigurationError(error)

    participant_ids = [p.user_id for p in participant_data]
    if method == SplitMethod.EQUAL:
        split_amounts = split_equally(total_amount, participant_ids, currency)
    elif method == SplitMethod.PERCENTAGE:
        split_amounts = split_by_percentage(
            total_amount, {p.user_id: p.percentage for p in participant_data}, currency
        )
    elif method == SplitMethod.EXACT:
        split_amounts = split_by_exact_amounts(
            total_amount, {p.user_id: p.amount for p in participant_data}, currency
        )
    elif method == SplitMethod.SHARES:
        split_amounts = split_by_shares(
            total_amount, {p.user_id: p.shares for p in participant_data}, currency
        )
    else:
        raise ValueError(f"Unsupported split method: {method}")

    if method == SplitMethod.PERCENTAGE:
        percentages = {p.user_id: to_decimal(p.percentage) for p in participant_data}
    else:
        percentages = calculate_percentages(total_amount, split_amounts)

    logger.debug(f"Calculated {method.value} split of {total_amount} {currency} across {len(participant_ids)} participants")

    return [
        ExpenseParticipant(
            user_id=p.user_id,
            display_name=p.display_name,
            share_amount=split_amounts[p.user_id],
            share_percentage=percentages[p.user_id],
            share_count=p.shares if method == SplitMethod.SHARES else None,
        )
        for p in participant_data
    ]


def recalculate_split(
    new_total_amount,
    current_participants: Sequence[ExpenseParticipant],
    method: SplitMethod,
    currency: Optional[str] = None,
) -> List[ExpenseParticipant]:
    """
    Recalculate a split after the expense amount changed.

    Percentages and share counts are kept; exact amounts are scaled in
    proportion to the new total.
    """
    currency = currency or settings.DEFAULT_CURRENCY
    method = SplitMethod(method)
    if not current_participants:
        raise EmptyParticipantSet()

    if method == SplitMethod.EQUAL:
        participant_data = [
            EqualSplitParticipant(user_id=p.user_id, display_name=p.display_name)
            for p in current_participants
        ]
    elif method == SplitMethod.PERCENTAGE:
        participant_data = [
            PercentageSplitParticipant(
                user_id=p.user_id, display_name=p.display_name, percentage=p.share_percentage or Decimal(0)
            )
            for p in current_participants
        ]
    elif method == SplitMethod.EXACT:
        old_units = [to_minor_units(p.share_amount, currency) for p in current_participants]
        new_total = _total_units(new_total_amount, currency)
        old_total = sum(old_units)
        if old_total > 0:
            new_units = _allocate(new_total, [Decimal(u) for u in old_units], Decimal(old_total))
        else:
            # Nothing to scale from, fall back to an even spread
            new_units = _allocate(new_total, [Decimal(1)] * len(old_units), Decimal(len(old_units)))
        participant_data = [
            ExactSplitParticipant(
                user_id=p.user_id, display_name=p.display_name, amount=from_minor_units(u, currency)
            )
            for p, u in zip(current_participants, new_units)
        ]
    elif method == SplitMethod.SHARES:
        participant_data = [
            SharesSplitParticipant(user_id=p.user_id, display_name=p.display_name, shares=p.share_count or 1)
            for p in current_participants
        ]
    else:
        raise ValueError(f"Unsupported split method: {method}")

    return calculate_split(new_total_amount, method, participant_data, currency)


def can_modify_participants(method: SplitMethod) -> bool:
    """Whether participants can be added/removed without reconfiguring everyone's share."""
    return SplitMethod(method) in (SplitMethod.EQUAL, SplitMethod.SHARES)


def default_participant_input(
    method: SplitMethod,
    user_id: str,
    display_name: str,
    participant_count: int = 1,
) -> SplitParticipantInput:
    """Get default participant input for a split method."""
    method = SplitMethod(method)
    if method == SplitMethod.EQUAL:
        return EqualSplitParticipant(user_id=user_id, display_name=display_name)
    if method == SplitMethod.PERCENTAGE:
        count = max(1, participant_count)
        percentage = (HUNDRED / count).quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP)
        return PercentageSplitParticipant(user_id=user_id, display_name=display_name, percentage=percentage)
    if method == SplitMethod.EXACT:
        return ExactSplitParticipant(user_id=user_id, display_name=display_name, amount=Decimal(0))
    if method == SplitMethod.SHARES:
        return SharesSplitParticipant(user_id=user_id, display_name=display_name, shares=1)
    raise ValueError(f"Unsupported split method: {method}")
