"""
Shared fixtures: an in-memory database and an API client bound to it.
"""
import pytest
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from splitledger.db.base import Base
from splitledger.db.session import get_db
from splitledger.main import app
from splitledger.models import User, Group, GroupMember, Expense, ExpenseParticipant, Payment, SplitMethod


@pytest.fixture
def db():
    """Database session over a fresh in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db):
    """API client whose routes use the test database."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def seeded_group(db):
    """
    A USD group where Alice paid 90.00 for dinner split three ways,
    Bob paid 30.00 for taxi shared with Carol, and Carol paid Alice 10.00.

    Balances: Alice +70.00, Bob -15.00, Carol -55.00.
    """
    alice = User(id="u-alice", display_name="Alice")
    bob = User(id="u-bob", display_name="Bob")
    carol = User(id="u-carol", display_name="Carol")
    group = Group(id="g-trip", name="Ski trip", primary_currency="USD")
    db.add_all([alice, bob, carol, group])
    db.flush()
    for user in (alice, bob, carol):
        db.add(GroupMember(group_id=group.id, user_id=user.id))

    dinner = Expense(
        id="e-dinner", group_id=group.id, payer_id=alice.id,
        amount=Decimal("90.00"), currency="USD", split_method=SplitMethod.EQUAL,
        description="Dinner"
    )
    dinner.participants = [
        ExpenseParticipant(user_id=alice.id, share_amount=Decimal("30.00"), position=0),
        ExpenseParticipant(user_id=bob.id, share_amount=Decimal("30.00"), position=1),
        ExpenseParticipant(user_id=carol.id, share_amount=Decimal("30.00"), position=2),
    ]
    taxi = Expense(
        id="e-taxi", group_id=group.id, payer_id=bob.id,
        amount=Decimal("30.00"), currency="USD", split_method=SplitMethod.EQUAL,
        description="Taxi"
    )
    taxi.participants = [
        ExpenseParticipant(user_id=bob.id, share_amount=Decimal("15.00"), position=0),
        ExpenseParticipant(user_id=carol.id, share_amount=Decimal("15.00"), position=1),
    ]
    payment = Payment(
        id="p-1", group_id=group.id, payer_id=carol.id, recipient_id=alice.id,
        amount=Decimal("10.00"), currency="USD"
    )
    db.add_all([dinner, taxi, payment])
    db.commit()
    return group
