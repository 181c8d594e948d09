from sqlmodel import select

from fantasy12.models import LogEntry, Purchase, Transaction, User
from fantasy12.routers import payments


def purchase(user_id, chips=100):
    return {"user_id": user_id, "package_type": f"{chips} Fichas", "price_cents": 1990, "chips_added": chips}


def test_process_payment(client, session, make_user):
    user = make_user(name="Ana", balance=5)

    response = client.post("/payments/process", json=purchase(user.id))
    assert response.status_code == 200
    assert response.json()["balance"] == 105

    stored_purchase = session.exec(select(Purchase).where(Purchase.user_id == user.id)).one()
    assert stored_purchase.status == "CONFIRMED"
    assert stored_purchase.chips_added == 100

    entry = session.exec(select(Transaction).where(Transaction.user_id == user.id)).one()
    assert entry.type == "PURCHASE"
    assert entry.chips_amount == 100
    assert entry.reference_id == f"purchase:{stored_purchase.id}"

    log = session.exec(select(LogEntry).where(LogEntry.action == "Purchase")).one()
    assert log.user_id == user.id


def test_payment_is_all_or_nothing(client, session, make_user, monkeypatch):
    user = make_user(name="Ana", balance=5)

    def failing_ledger_entry(session, purchase):
        raise RuntimeError("ledger unavailable")

    monkeypatch.setattr(payments, "record_ledger_entry", failing_ledger_entry)

    response = client.post("/payments/process", json=purchase(user.id))
    assert response.status_code == 500
    assert response.json() == {"error": "Payment processing failed"}

    session.expire_all()
    assert session.get(User, user.id).balance == 5
    assert session.exec(select(Purchase)).all() == []
    assert session.exec(select(Transaction)).all() == []
    assert session.exec(select(LogEntry)).all() == []


def test_payment_validation(client, make_user):
    user = make_user(name="Ana")

    assert client.post("/payments/process", json=purchase(999)).status_code == 404
    assert client.post("/payments/process", json=purchase(user.id, chips=0)).status_code == 400
    assert client.post("/payments/process", json={"user_id": user.id}).status_code == 400


def test_stripe_webhook_is_acknowledged(client):
    response = client.post("/payments/stripe", content=b'{"type": "checkout.session.completed"}')
    assert response.status_code == 200
    assert response.json() == {"received": True}
