from __future__ import annotations

import json

import pytest
from sqlalchemy import select

from authgate.app import create_app
from authgate.infrastructure.db import SessionLocal
from authgate.infrastructure.db.models import AuditLog, SessionToken, User

CREDENTIALS = {"email": "ada@example.com", "password": "secret123"}


@pytest.fixture()
def app(database):
    return create_app()


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


def _register(client, **overrides):
    form = {"name": "Ada", **CREDENTIALS}
    form.update(overrides)
    return client.post("/register", data=form)


def test_register_login_secret_logout_flow(client) -> None:
    register = _register(client)
    assert register.status_code == 303
    assert register.headers["Location"] == "/login"

    login = client.post("/login", data={"email": "ADA@EXAMPLE.COM", "password": "secret123"})
    assert login.status_code == 303
    assert login.headers["Location"] == "/secret"
    assert client.get_cookie("session_token")

    secret = client.get("/secret")
    assert secret.status_code == 200
    payload = secret.get_json()
    assert payload["user"]["name"] == "Ada"
    assert payload["user"]["email"] == "ada@example.com"
    assert "password" not in str(payload)

    logout = client.post("/logout")
    assert logout.status_code == 303
    assert client.get_cookie("session_token") is None

    after = client.get("/secret")
    assert after.status_code == 303
    assert after.headers["Location"].startswith("/login")


def test_secret_without_session_redirects_to_login(client) -> None:
    response = client.get("/secret")

    assert response.status_code == 303
    assert response.headers["Location"] == "/login?next=%2Fsecret"


def test_secret_with_forged_cookie_redirects_and_clears_it(client) -> None:
    client.set_cookie("session_token", "forged-token")

    response = client.get("/secret")

    assert response.status_code == 303
    assert response.headers["Location"].startswith("/login")
    assert client.get_cookie("session_token") is None


def test_bearer_header_is_accepted(app, client) -> None:
    _register(client)
    client.post("/login", json=CREDENTIALS)
    token = client.get_cookie("session_token").value

    with app.test_client() as fresh:
        response = fresh.get("/secret", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200


def test_login_failures_are_identical(client) -> None:
    _register(client)

    wrong_password = client.post("/login", json={"email": "ada@example.com", "password": "nope"})
    unknown_email = client.post("/login", json={"email": "ghost@example.com", "password": "secret123"})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.get_json() == unknown_email.get_json() == {"error": "invalid_credentials"}
    assert client.get_cookie("session_token") is None


def test_duplicate_registration_keeps_original(client) -> None:
    assert _register(client).status_code == 303

    duplicate = _register(client, name="Impostor", email="Ada@Example.COM", password="other")

    assert duplicate.status_code == 422
    assert duplicate.get_json()["context"]["fields"] == ["email"]
    login = client.post("/login", json=CREDENTIALS)
    assert login.status_code == 303


def test_register_rejects_blank_fields(client) -> None:
    response = client.post("/register", data={"name": "", "email": "", "password": ""})

    assert response.status_code == 422
    assert response.get_json()["context"]["fields"] == ["email", "name", "password"]
    session = SessionLocal()
    try:
        assert session.scalars(select(User)).all() == []
    finally:
        session.close()


def test_login_rotates_existing_session(app, client) -> None:
    _register(client)
    client.post("/login", json=CREDENTIALS)
    first = client.get_cookie("session_token").value

    client.post("/login", json=CREDENTIALS)
    second = client.get_cookie("session_token").value

    guard = app.extensions["authgate.container"].session_guard
    assert first != second
    assert guard.validate(first) is None
    assert guard.validate(second).email == "ada@example.com"


def test_logout_revokes_server_side(app, client) -> None:
    _register(client)
    client.post("/login", json=CREDENTIALS)
    token = client.get_cookie("session_token").value

    client.get("/logout")
    client.get("/logout")

    assert app.extensions["authgate.container"].session_guard.validate(token) is None
    session = SessionLocal()
    try:
        row = session.scalars(select(SessionToken).where(SessionToken.token == token)).one()
        assert row.revoked_at is not None
    finally:
        session.close()


def test_repeated_failures_lock_login(client) -> None:
    _register(client)

    for _ in range(5):
        assert client.post("/login", json={"email": "ada@example.com", "password": "x"}).status_code == 401

    locked = client.post("/login", json=CREDENTIALS)
    assert locked.status_code == 429
    assert locked.get_json()["error"] == "account_locked"


def test_login_redirects_to_requested_page(client) -> None:
    _register(client)

    response = client.post("/login", data={**CREDENTIALS, "next": "/secret"})

    assert response.headers["Location"] == "/secret"


def test_audit_trail_is_recorded(client) -> None:
    _register(client)
    client.post("/login", json={"email": "ada@example.com", "password": "nope"})
    client.post("/login", json=CREDENTIALS)
    client.post("/logout")

    session = SessionLocal()
    try:
        actions = [row.action for row in session.scalars(select(AuditLog).order_by(AuditLog.id))]
    finally:
        session.close()
    assert actions == ["register", "login_failed", "login_success", "logout"]


def test_security_headers_and_health(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json() == {"ok": True, "database": "ok"}
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Request-ID"]


def test_index_reports_authentication_state(client) -> None:
    assert client.get("/").get_json() == {"ok": True, "authenticated": False}

    _register(client)
    client.post("/login", json=CREDENTIALS)

    assert client.get("/").get_json() == {"ok": True, "authenticated": True}


def test_purge_sessions_command(app, client) -> None:
    _register(client)
    client.post("/login", json=CREDENTIALS)
    client.post("/logout")

    result = app.test_cli_runner().invoke(args=["purge-sessions"])

    assert result.exit_code == 0
    assert "Removed 1 session(s)" in result.output
    session = SessionLocal()
    try:
        entry = session.scalars(
            select(AuditLog).where(AuditLog.action == "sessions_purged")
        ).one()
    finally:
        session.close()
    assert json.loads(entry.details_json) == {"removed": 1}


@pytest.mark.parametrize("target", ["/\t/evil.com", "/\n/evil.com"])
def test_login_with_unsafe_next_leaves_no_session(client, target: str) -> None:
    _register(client)

    response = client.post("/login", data={**CREDENTIALS, "next": target})

    assert response.status_code == 422
    assert "Location" not in response.headers
    assert client.get_cookie("session_token") is None
    session = SessionLocal()
    try:
        assert session.scalars(select(SessionToken)).all() == []
    finally:
        session.close()
