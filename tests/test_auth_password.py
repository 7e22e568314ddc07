import time

import jwt
import pytest

from nextrade.auth import (
    bearer_token,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from nextrade.errors import InvalidToken, Unauthorized
from nextrade.models import Role


def test_password_hash_is_salted_one_way():
    h1 = hash_password("secret")
    h2 = hash_password("secret")
    assert "secret" not in h1
    assert h1 != h2
    assert verify_password("secret", h1)
    assert not verify_password("wrong", h1)


def test_token_round_trip(settings):
    token = create_access_token(7, Role.WHOLESALER, settings)
    principal = decode_access_token(token, settings)
    assert principal.user_id == 7
    assert principal.role is Role.WHOLESALER


def test_token_expires_after_one_day(settings):
    token = create_access_token(7, Role.RETAILER, settings)
    claims = jwt.decode(token, settings.jwt_secret, algorithms=["HS256"])
    assert claims["exp"] - claims["iat"] == 60 * 60 * 24


def test_expired_token_rejected(settings):
    token = create_access_token(1, Role.RETAILER, settings, expires_delta=-10)
    with pytest.raises(InvalidToken):
        decode_access_token(token, settings)


def test_foreign_signature_rejected(settings):
    forged = jwt.encode(
        {"sub": "1", "role": "wholesaler", "exp": int(time.time()) + 60},
        "some-other-key",
        algorithm="HS256",
    )
    with pytest.raises(InvalidToken):
        decode_access_token(forged, settings)


def test_unknown_role_claim_rejected(settings):
    token = jwt.encode(
        {"sub": "1", "role": "superuser", "exp": int(time.time()) + 60},
        settings.jwt_secret,
        algorithm="HS256",
    )
    with pytest.raises(InvalidToken):
        decode_access_token(token, settings)


@pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer   ", "Basic abc", "token-without-scheme"])
def test_bearer_header_required(header):
    with pytest.raises(Unauthorized):
        bearer_token(header)


def test_password_login_flow(client, signup):
    signup("PwUser", "pw@example.com", "retailer", password="secret")

    r = client.post("/api/login", json={"email": "pw@example.com", "password": "secret"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["token"]
    assert body["user"]["email"] == "pw@example.com"
    assert "password" not in body["user"]


def test_wrong_password_and_unknown_email_are_indistinguishable(client, signup):
    signup("PwUser", "pw@example.com", "retailer", password="secret")

    wrong = client.post("/api/login", json={"email": "pw@example.com", "password": "wrong"})
    unknown = client.post("/api/login", json={"email": "nobody@example.com", "password": "secret"})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json() == {"success": False, "message": "Invalid credentials"}


def test_duplicate_email_rejected_without_new_record(client, signup):
    signup("First", "dup@example.com", "wholesaler")

    r = client.post(
        "/api/signup",
        json={"name": "Second", "email": "dup@example.com", "password": "other", "role": "retailer"},
    )
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Email already registered"}

    wholesalers = client.get("/api/wholesalers").json()["wholesalers"]
    assert [w["name"] for w in wholesalers] == ["First"]
    # original credentials still work, the second password does not
    assert client.post("/api/login", json={"email": "dup@example.com", "password": "other"}).status_code == 401


def test_invalid_and_missing_tokens(client):
    r = client.get("/api/products/my")
    assert r.status_code == 401
    assert r.json()["message"] == "Unauthorized"

    r = client.get("/api/products/my", headers={"Authorization": "Bearer not.a.jwt"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid token"


def test_token_role_is_trusted_until_expiry(client, signup, settings):
    # Verification does not re-read the user: the role in the token decides.
    user = signup("Shop", "shop@example.com", "retailer")
    token = create_access_token(user["id"], Role.RETAILER, settings)
    r = client.get("/api/orders", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200


def test_login_with_email_exactly_as_typed_at_signup(client, signup):
    signup("Bob", "Bob@Example.COM", "retailer", password="secret")

    for typed in ("Bob@Example.COM", "bob@example.com", "BOB@EXAMPLE.COM"):
        r = client.post("/api/login", json={"email": typed, "password": "secret"})
        assert r.status_code == 200, typed
        assert r.json()["user"]["email"] == "bob@example.com"


def test_signup_email_uniqueness_ignores_case(client, signup):
    signup("Bob", "bob@example.com", "retailer")
    r = client.post(
        "/api/signup",
        json={"name": "Bobby", "email": "BOB@example.com", "password": "x", "role": "retailer"},
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Email already registered"
