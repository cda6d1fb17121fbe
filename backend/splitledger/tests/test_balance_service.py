"""
Tests for group balance calculation.
"""
import random
import pytest
from decimal import Decimal
from splitledger.core.errors import CurrencyMismatch, InvalidAmount
from splitledger.models.expense import SplitMethod
from splitledger.schemas.balance import BalanceStatus, Member
from splitledger.schemas.expense import Expense, ExpenseParticipant
from splitledger.schemas.payment import Payment
from splitledger.services.balance_service import (
    calculate_group_balances,
    summarize_balances,
    validate_expense_split,
)
from splitledger.schemas.split import PercentageSplitParticipant
from splitledger.services.split_service import calculate_split, split_equally

MEMBERS = [
    Member(user_id="carol", display_name="Carol"),
    Member(user_id="alice", display_name="Alice"),
    Member(user_id="bob", display_name="Bob"),
]


def make_expense(expense_id, payer_id, amount, shares, currency="USD"):
    return Expense(
        id=expense_id,
        group_id="g1",
        payer_id=payer_id,
        amount=Decimal(amount),
        currency=currency,
        split_method=SplitMethod.EXACT,
        participants=[
            ExpenseParticipant(user_id=uid, share_amount=Decimal(share))
            for uid, share in shares.items()
        ],
    )


def make_payment(payment_id, payer_id, recipient_id, amount, currency="USD"):
    return Payment(
        id=payment_id,
        group_id="g1",
        payer_id=payer_id,
        recipient_id=recipient_id,
        amount=Decimal(amount),
        currency=currency,
    )


def as_dict(balances):
    return {b.user_id: b.balance for b in balances}


def test_balances_from_expenses_and_payments():
    expenses = [
        make_expense("e1", "alice", "90.00", {"alice": "30.00", "bob": "30.00", "carol": "30.00"}),
        make_expense("e2", "bob", "30.00", {"bob": "15.00", "carol": "15.00"}),
    ]
    payments = [make_payment("p1", "carol", "alice", "10.00")]

    balances = calculate_group_balances(MEMBERS, expenses, payments, "USD")

    assert as_dict(balances) == {
        "alice": Decimal("70.00"),
        "bob": Decimal("-15.00"),
        "carol": Decimal("-55.00"),
    }
    assert [b.user_name for b in balances] == ["Alice", "Bob", "Carol"]
    assert all(b.currency == "USD" for b in balances)


def test_members_without_records_get_zero():
    balances = calculate_group_balances(MEMBERS, [], [], "usd")
    assert as_dict(balances) == {"alice": Decimal("0.00"), "bob": Decimal("0.00"), "carol": Decimal("0.00")}
    assert all(b.status == BalanceStatus.SETTLED for b in balances)


def test_other_currency_records_are_excluded():
    expenses = [
        make_expense("e1", "alice", "20.00", {"alice": "10.00", "bob": "10.00"}),
        make_expense("e2", "bob", "5000", {"alice": "2500", "bob": "2500"}, currency="JPY"),
    ]
    payments = [make_payment("p1", "bob", "alice", "3.00", currency="EUR")]

    balances = calculate_group_balances(MEMBERS, expenses, payments, "USD", strict_currency=False)

    assert as_dict(balances)["alice"] == Decimal("10.00")
    assert as_dict(balances)["bob"] == Decimal("-10.00")


def test_strict_currency_check_raises():
    expenses = [make_expense("e2", "bob", "5000", {"alice": "2500", "bob": "2500"}, currency="JPY")]
    with pytest.raises(CurrencyMismatch) as excinfo:
        calculate_group_balances(MEMBERS, expenses, [], "USD", strict_currency=True)
    assert excinfo.value.record_id == "e2"


def test_negative_share_is_a_contract_violation():
    expenses = [make_expense("e1", "alice", "10.00", {"alice": "20.00", "bob": "-10.00"})]
    with pytest.raises(InvalidAmount):
        calculate_group_balances(MEMBERS, expenses, [], "USD")


def test_tiny_percentage_split_feeds_balances():
    ids = [f"u{i}" for i in range(10)]
    members = [Member(user_id=uid, display_name=uid.upper()) for uid in ids]
    participants = calculate_split(
        Decimal("0.05"), SplitMethod.PERCENTAGE,
        [PercentageSplitParticipant(user_id=uid, percentage=Decimal("10")) for uid in ids], "USD"
    )
    expense = Expense(
        id="e1", group_id="g1", payer_id="u0", amount=Decimal("0.05"), currency="USD",
        split_method=SplitMethod.PERCENTAGE, participants=participants,
    )
    assert validate_expense_split(expense)

    balances = calculate_group_balances(members, [expense], [], "USD")
    assert sum(b.balance for b in balances) == 0
    assert {b.user_id: b.balance for b in balances}["u0"] == Decimal("0.05")


def test_balances_are_idempotent():
    expenses = [make_expense("e1", "alice", "100.00", {"alice": "33.33", "bob": "33.33", "carol": "33.34"})]
    payments = [make_payment("p1", "bob", "alice", "12.34")]
    first = calculate_group_balances(MEMBERS, expenses, payments, "USD")
    second = calculate_group_balances(MEMBERS, expenses, payments, "USD")
    assert first == second


def test_conservation_for_random_ledgers():
    """Balances of a closed member set always add up to zero."""
    rng = random.Random(42)
    ids = [m.user_id for m in MEMBERS]
    for _ in range(100):
        expenses = []
        for n in range(rng.randint(0, 10)):
            participants = rng.sample(ids, rng.randint(1, len(ids)))
            amount = Decimal(rng.randint(1, 50_000)) / 100
            shares = split_equally(amount, participants, "USD")
            expenses.append(make_expense(f"e{n}", rng.choice(ids), amount, shares))
        payments = []
        for n in range(rng.randint(0, 5)):
            payer, recipient = rng.sample(ids, 2)
            payments.append(make_payment(f"p{n}", payer, recipient, Decimal(rng.randint(1, 10_000)) / 100))

        balances = calculate_group_balances(MEMBERS, expenses, payments, "USD")
        assert sum(b.balance for b in balances) == 0


def test_validate_expense_split():
    assert validate_expense_split(make_expense("e1", "alice", "100.00", {"alice": "50.00", "bob": "50.00"}))
    assert validate_expense_split(make_expense("e1", "alice", "100.00", {"alice": "50.00", "bob": "49.995"}))
    assert not validate_expense_split(make_expense("e1", "alice", "100.00", {"alice": "50.00", "bob": "49.99"}))
    assert not validate_expense_split(make_expense("e1", "alice", "100.00", {"alice": "60.00", "bob": "30.00"}))


def test_payment_schema_rejects_self_payment():
    with pytest.raises(ValueError):
        make_payment("p1", "alice", "alice", "10.00")
    with pytest.raises(ValueError):
        make_payment("p1", "alice", "bob", "0")


def test_summarize_balances():
    expenses = [make_expense("e1", "alice", "90.00", {"alice": "30.00", "bob": "30.00", "carol": "30.00"})]
    members = MEMBERS + [Member(user_id="dave", display_name="Dave")]
    summary = summarize_balances(calculate_group_balances(members, expenses, [], "USD"))
    assert summary.total_owed == Decimal("60.00")
    assert summary.total_owing == Decimal("60.00")
    assert summary.creditor_count == 1
    assert summary.debtor_count == 2
    assert summary.settled_count == 1
