from datetime import datetime, timedelta, timezone

from fantasy12.models import LogEntry


def test_create_log(client, make_user):
    user = make_user(name="Ana")

    response = client.post("/logs", json={
        "user_id": user.id, "user_name": "Ana", "action": "Open Store", "details": "Viewed packages",
    })
    assert response.status_code == 201
    body = response.json()
    assert body["action"] == "Open Store"
    assert body["type"] == "info"
    assert body["user_id"] == user.id


def test_create_log_validation(client):
    response = client.post("/logs", json={"user_name": "Ana", "action": "X", "type": "fatal"})
    assert response.status_code == 400

    response = client.post("/logs", json={"user_id": 999, "user_name": "Ghost", "action": "X"})
    assert response.status_code == 400
    assert response.json() == {"error": "Unknown user 999"}


def test_list_logs_newest_first_and_capped(client, session):
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    for i in range(105):
        session.add(LogEntry(
            user_name="System", action=f"Action {i}", timestamp=start + timedelta(minutes=i),
        ))
    session.commit()

    logs = client.get("/logs").json()
    assert len(logs) == 100
    assert logs[0]["action"] == "Action 104"
    assert logs[-1]["action"] == "Action 5"


def test_logs_show_current_user_name(client, session, make_user):
    user = make_user(name="Ana")
    client.post("/logs", json={"user_id": user.id, "user_name": "Ana", "action": "Login"})

    user.name = "Ana Maria"
    session.add(user)
    session.commit()

    logs = client.get("/logs").json()
    assert logs[0]["user_name"] == "Ana Maria"
