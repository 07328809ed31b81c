"""Auth API: login, token verification, profile, logout."""
from datetime import datetime, timedelta, timezone

from jose import jwt

from app.config import settings
from app.services.auth import create_access_token, decode_access_token


def _login(client, email, password):
    return client.post("/auth/login", json={"email": email, "password": password})


def test_login_success_returns_token_and_user(client, exam_admin, exam_board):
    r = _login(client, "admin.examinations@coep.ac.in", "admin123")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Login successful"
    data = body["data"]
    assert data["token"]
    assert data["user"]["role"] == "admin"
    assert data["user"]["university_body"]["name"] == "Board of Examinations"
    assert data["user"]["last_login"] is not None
    assert decode_access_token(data["token"])["sub"] == str(exam_admin.id)


def test_login_email_is_case_insensitive(client, exam_admin):
    r = _login(client, "Admin.Examinations@COEP.ac.in", "admin123")
    assert r.status_code == 200


def test_login_wrong_password(client, exam_admin):
    r = _login(client, "admin.examinations@coep.ac.in", "wrong-password")
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Invalid credentials"}


def test_login_unknown_email_same_message(client):
    r = _login(client, "nobody@coep.ac.in", "whatever1")
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid credentials"


def test_login_deactivated_account(client, make_user):
    make_user("gone@coep.ac.in", role="admin", is_active=False)
    r = _login(client, "gone@coep.ac.in", "Password1")
    assert r.status_code == 401
    assert r.json()["message"] == "Account is deactivated"


def test_login_validation_error_envelope(client):
    r = client.post("/auth/login", json={"email": "not-an-email", "password": ""})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert {e["field"] for e in body["errors"]} >= {"email", "password"}


def test_me_requires_token(client):
    r = client.get("/auth/me")
    assert r.status_code == 401
    assert r.json()["message"] == "Access token required"
    assert r.headers.get("www-authenticate") == "Bearer"


def test_me_with_garbage_token(client):
    r = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid token"


def test_me_with_expired_token(client, exam_admin):
    past = datetime.now(timezone.utc) - timedelta(hours=2)
    token = jwt.encode(
        {"sub": str(exam_admin.id), "role": "admin", "iat": int(past.timestamp()), "exp": int(past.timestamp()) + 60},
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    r = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["message"] == "Token expired"


def test_token_for_deactivated_user_is_rejected(client, make_user, auth):
    user = make_user("sleepy@coep.ac.in", role="sub_admin", is_active=False)
    r = client.get("/auth/me", headers=auth(user))
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid or inactive user"


def test_legacy_role_token_claims_canonical_role(exam_admin):
    payload = decode_access_token(create_access_token(exam_admin.id, "committee_director"))
    assert payload["role"] == "admin"


def test_verify_token(client, exam_sub_admin, auth):
    r = client.post("/auth/verify-token", headers=auth(exam_sub_admin))
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["user"]["email"] == "clerk.examinations@coep.ac.in"
    assert data["exp"] > int(datetime.now(timezone.utc).timestamp())


def test_me_returns_affiliation(client, exam_sub_admin, auth):
    r = client.get("/auth/me", headers=auth(exam_sub_admin))
    assert r.status_code == 200
    user = r.json()["data"]["user"]
    assert user["role"] == "sub_admin"
    assert user["university_body"]["type"] == "Board"


def test_update_profile_and_login_with_new_password(client, exam_sub_admin, auth):
    r = client.put(
        "/auth/me",
        headers=auth(exam_sub_admin),
        json={"first_name": "Asha", "designation": "Clerk", "password": "NewPassw0rd"},
    )
    assert r.status_code == 200
    assert r.json()["data"]["user"]["first_name"] == "Asha"
    assert _login(client, "clerk.examinations@coep.ac.in", "NewPassw0rd").status_code == 200


def test_update_profile_rejects_weak_password(client, exam_sub_admin, auth):
    r = client.put("/auth/me", headers=auth(exam_sub_admin), json={"password": "short"})
    assert r.status_code == 400
    assert r.json()["message"] == "Validation failed"


def test_logout(client, exam_sub_admin, auth):
    r = client.post("/auth/logout", headers=auth(exam_sub_admin))
    assert r.status_code == 200
    assert r.json()["message"] == "Logout successful"
