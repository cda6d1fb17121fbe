"""
Tests for settlement plan generation.
"""
import random
import pytest
from decimal import Decimal
from splitledger.core.errors import CurrencyMismatch
from splitledger.schemas.balance import Balance
from splitledger.services.settlement_service import (
    apply_settlement_plan,
    format_settlement_summary,
    generate_settlement_plan,
)


def make_balances(values, currency="USD"):
    return [
        Balance(user_id=uid.lower(), user_name=uid, balance=Decimal(amount), currency=currency)
        for uid, amount in values.items()
    ]


def test_one_creditor_two_debtors():
    """Alice +40, Bob -25, Carol -15: two payments to Alice, largest first."""
    plan = generate_settlement_plan(make_balances({"Alice": "40.00", "Bob": "-25.00", "Carol": "-15.00"}))

    assert [(t.payer_name, t.recipient_name, t.amount) for t in plan] == [
        ("Bob", "Alice", Decimal("25.00")),
        ("Carol", "Alice", Decimal("15.00")),
    ]
    assert plan[0].payer_id == "bob"
    assert plan[0].recipient_id == "alice"
    assert plan[0].currency == "USD"


def test_empty_and_settled_balances():
    assert generate_settlement_plan([]) == []
    assert generate_settlement_plan(make_balances({"Alice": "0.00", "Bob": "0.01", "Carol": "-0.01"})) == []


def test_ties_are_broken_by_user_id():
    """Equal creditors and debtors are matched in user id order."""
    plan = generate_settlement_plan(make_balances({
        "Dan": "10.00", "Bea": "10.00", "Cid": "-10.00", "Abe": "-10.00",
    }))
    assert [(t.payer_id, t.recipient_id) for t in plan] == [("abe", "bea"), ("cid", "dan")]


def test_largest_positions_are_matched_first():
    plan = generate_settlement_plan(make_balances({
        "A": "70.00", "B": "30.00", "C": "-50.00", "D": "-50.00",
    }))
    assert [(t.payer_id, t.recipient_id, t.amount) for t in plan] == [
        ("c", "a", Decimal("50.00")),
        ("d", "b", Decimal("30.00")),
        ("d", "a", Decimal("20.00")),
    ]


def test_mixed_currencies_are_rejected():
    balances = make_balances({"Alice": "10.00", "Bob": "-10.00"})
    balances[1] = Balance(user_id="bob", user_name="Bob", balance=Decimal("-10"), currency="EUR")
    with pytest.raises(CurrencyMismatch):
        generate_settlement_plan(balances)


def test_zero_decimal_currency():
    plan = generate_settlement_plan(make_balances({"A": "1000", "B": "-600", "C": "-400"}, currency="JPY"))
    assert [t.amount for t in plan] == [Decimal("600"), Decimal("400")]


def test_plan_settles_everyone_within_bound():
    """Applying the plan zeroes every balance with at most n-1 transactions."""
    rng = random.Random(7)
    for _ in range(200):
        count = rng.randint(2, 9)
        units = [rng.randint(-50_000, 50_000) for _ in range(count - 1)]
        units.append(-sum(units))
        balances = [
            Balance(user_id=f"u{i}", user_name=f"User {i}", balance=Decimal(u) / 100, currency="USD")
            for i, u in enumerate(units)
        ]

        plan = generate_settlement_plan(balances)

        nonzero = sum(1 for u in units if u != 0)
        assert len(plan) <= max(nonzero - 1, 0)
        assert all(t.amount > 0 for t in plan)
        assert [t.amount for t in plan] == sorted((t.amount for t in plan), reverse=True)
        for balance in apply_settlement_plan(balances, plan):
            assert abs(balance.balance) <= Decimal("0.01")


def test_apply_settlement_plan():
    balances = make_balances({"Alice": "40.00", "Bob": "-25.00", "Carol": "-15.00"})
    settled = apply_settlement_plan(balances, generate_settlement_plan(balances))
    assert [b.balance for b in settled] == [Decimal("0.00")] * 3
    assert all(b.is_settled for b in settled)


def test_format_settlement_summary():
    balances = make_balances({"Alice": "40.00", "Bob": "-25.00", "Carol": "-15.00"})
    summary = format_settlement_summary(balances, generate_settlement_plan(balances))
    assert "Participants: 3" in summary
    assert "Alice: +$40.00" in summary
    assert "Bob: -$25.00" in summary
    assert "Bob -> Alice: $25.00" in summary
    assert "Carol -> Alice: $15.00" in summary

    assert "Everyone is settled up" in format_settlement_summary(make_balances({"Alice": "0"}), [])
