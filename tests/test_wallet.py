import pytest
from sqlmodel import Session, SQLModel, create_engine, select

from fantasy12.exceptions import InsufficientFunds, InsufficientInventory
from fantasy12.models import Purchase, Transaction, User
from fantasy12.routers.payments import ProcessPaymentRequest, process_payment
from fantasy12.rules import TicketCost
from fantasy12.wallet import credit, debit


@pytest.fixture
def file_engine(tmp_path):
    """A file-backed database, so each session gets its own connection."""
    engine = create_engine(f"sqlite:///{tmp_path / 'wallet.db'}")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def user_id(file_engine):
    with Session(file_engine) as session:
        user = User(name="Ana", email="ana@fantasy12.com", balance=5, doubles=1)
        session.add(user)
        session.commit()
        return user.id


def stored_user(engine, user_id) -> User:
    with Session(engine) as session:
        return session.get(User, user_id)


def test_credit_and_debit(file_engine, user_id):
    with Session(file_engine) as session:
        credit(session, user_id, chips=10, super_doubles=2)
        debit(session, user_id, TicketCost(chips=3, doubles=1, super_doubles=1))
        session.commit()

    user = stored_user(file_engine, user_id)
    assert (user.balance, user.doubles, user.super_doubles) == (12, 0, 1)


def test_concurrent_purchases_are_both_credited(file_engine, user_id):
    payload = ProcessPaymentRequest(user_id=user_id, package_type="100 Fichas", price_cents=1990, chips_added=100)

    with Session(file_engine) as first, Session(file_engine) as second:
        first.get(User, user_id)

        process_payment(second, payload)
        user = process_payment(first, payload)

    assert user.balance == 205
    assert stored_user(file_engine, user_id).balance == 205
    with Session(file_engine) as session:
        assert len(session.exec(select(Purchase)).all()) == 2
        entries = session.exec(select(Transaction).where(Transaction.type == "PURCHASE")).all()
        assert len(entries) == 2


def test_debit_checks_the_stored_balance(file_engine, user_id):
    with Session(file_engine) as first, Session(file_engine) as second:
        stale = first.get(User, user_id)
        assert stale.balance == 5

        debit(second, user_id, TicketCost(chips=4, doubles=0, super_doubles=0))
        second.commit()

        with pytest.raises(InsufficientFunds) as exc_info:
            debit(first, user_id, TicketCost(chips=4, doubles=0, super_doubles=0))
        first.rollback()

    assert exc_info.value.message == "Insufficient chips. Required: 4, available: 1"
    assert stored_user(file_engine, user_id).balance == 1


def test_debit_without_powerups_leaves_balance(file_engine, user_id):
    with Session(file_engine) as session:
        with pytest.raises(InsufficientInventory) as exc_info:
            debit(session, user_id, TicketCost(chips=1, doubles=0, super_doubles=1))
        session.rollback()

    assert exc_info.value.message.startswith("Insufficient super-doubles")
    assert stored_user(file_engine, user_id).balance == 5
