import pytest
from sqlalchemy.exc import IntegrityError

from portal.models.user_model import User


def _login(client, email="ravi@example.com", full_name="Ravi Kumar", phone="9876543210"):
    return client.post(
        "/api/login",
        json={"fullName": full_name, "phoneNumber": phone, "email": email},
    )


def test_login_creates_user(client):
    resp = _login(client)
    assert resp.status_code == 200
    body = resp.json()
    assert body["email"] == "ravi@example.com"
    assert body["fullName"] == "Ravi Kumar"
    assert body["phoneNumber"] == "9876543210"
    assert isinstance(body["id"], int)


def test_login_twice_returns_same_id(client, db_session):
    first = _login(client).json()
    second = _login(client).json()
    assert first["id"] == second["id"]
    assert db_session.query(User).filter(User.email == "ravi@example.com").count() == 1


def test_repeat_login_refreshes_full_name_only(client):
    first = _login(client).json()
    second = _login(client, full_name="Ravi K.", phone="0000000000").json()
    assert second["id"] == first["id"]
    assert second["fullName"] == "Ravi K."
    assert second["phoneNumber"] == "9876543210"


def test_login_requires_email(client):
    resp = client.post("/api/login", json={"fullName": "No Email"})
    assert resp.status_code == 400

    resp = client.post("/api/login", json={"fullName": "Blank", "email": "  "})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "email is required"


def test_duplicate_email_rejected_by_store(db_session):
    db_session.add(User(full_name="A", phone_number="1", email="dup@example.com"))
    db_session.commit()
    db_session.add(User(full_name="B", phone_number="2", email="dup@example.com"))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_repeat_login_without_name_keeps_stored_name(client):
    first = _login(client, email="asha@example.com", full_name="Asha Rao").json()
    resp = client.post("/api/login", json={"email": "asha@example.com"})
    assert resp.status_code == 200
    second = resp.json()
    assert second["id"] == first["id"]
    assert second["fullName"] == "Asha Rao"
