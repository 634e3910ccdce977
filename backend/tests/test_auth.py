from __future__ import annotations

from datetime import timedelta

from conftest import make_settings
from usermgmt.core.security import create_access_token, decode_token, hash_password, verify_password
from usermgmt.models.user import User


def test_login_returns_token_for_session(client, users):
    resp = client.post("/auth/login", json={"email": "Alice@Example.com ", "password": "wonderland"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["id"] == "user-alice"

    claims = decode_token(body["access_token"], make_settings())
    assert claims["sub"] == "user-alice"
    assert claims["email"] == "alice@example.com"

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.json() == {"id": "user-alice", "email": "alice@example.com"}


def test_login_rejects_bad_password(client, users):
    resp = client.post("/auth/login", json={"email": "alice@example.com", "password": "nope"})

    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid email or password"


def test_login_rejects_user_without_local_password(client, users):
    resp = client.post("/auth/login", json={"email": "bob@example.com", "password": ""})

    assert resp.status_code == 401


def test_login_with_malformed_body_is_invalid_input(client, users):
    resp = client.post("/auth/login", json={"email": "alice@example.com"})

    assert resp.status_code == 400
    assert resp.json() == {"detail": "Invalid input."}


def test_token_form_login(client, users):
    resp = client.post("/auth/token", data={"username": "alice@example.com", "password": "wonderland"})

    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "alice@example.com"


def test_me_ignores_auth_bypass(bypass_client, users):
    resp = bypass_client.get("/auth/me")

    assert resp.status_code == 401


def test_expired_token_is_no_session(client, users):
    token = create_access_token(
        {"sub": "user-alice", "email": "alice@example.com"},
        make_settings(),
        expires_delta=timedelta(minutes=-5),
    )

    resp = client.get("/user-management/account", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401


def test_token_signed_with_other_secret_is_no_session(client, users):
    token = create_access_token(
        {"sub": "user-alice", "email": "alice@example.com"},
        make_settings(jwt_secret_key="someone-else"),
    )

    resp = client.get("/user-management/account", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401


def test_verify_password_handles_missing_and_foreign_hashes():
    hashed = hash_password("s3cret")

    assert verify_password("s3cret", hashed) is True
    assert verify_password("wrong", hashed) is False
    assert verify_password("s3cret", None) is False
    assert verify_password("s3cret", "s3cret") is False


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_login_matches_mixed_case_stored_email(client, db, users):
    db.add(
        User(
            id="user-carol",
            name="Carol",
            email="Carol.Smith@Example.com",
            password_hash=hash_password("tea-party"),
        )
    )
    db.commit()

    resp = client.post("/auth/login", json={"email": "carol.smith@example.com", "password": "tea-party"})

    assert resp.status_code == 200
    assert resp.json()["user"]["id"] == "user-carol"
