from datetime import timedelta

from gigplanner.security_utils import create_access_token


def test_login_returns_bearer_token(anon_client, admin) -> None:
    response = anon_client.post(
        "/api/auth/login", json={"username": "admin", "password": "correct-horse"}
    )

    assert response.status_code == 200
    token = response.json()["accessToken"]
    me = anon_client.get("/api/auth/user", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["username"] == "admin"


def test_login_with_wrong_password(anon_client, admin) -> None:
    response = anon_client.post("/api/auth/login", json={"username": "admin", "password": "nope"})
    assert response.status_code == 401


def test_admin_routes_require_a_token(anon_client) -> None:
    assert anon_client.get("/api/planners").status_code == 401
    assert anon_client.get("/api/venues", headers={"Authorization": "Bearer abc"}).status_code == 401


def test_expired_token_is_rejected(anon_client, admin) -> None:
    token = create_access_token({"sub": str(admin.id)}, expires_delta=timedelta(minutes=-1))

    response = anon_client.get("/api/auth/user", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.headers["x-token-expired"] == "true"


def test_setup_admin_only_once(anon_client) -> None:
    payload = {
        "username": "owner",
        "password": "long-enough-password",
        "name": "Owner",
        "email": "Owner@GigPlanner.io",
    }

    first = anon_client.post("/api/auth/setup-admin", json=payload)
    assert first.status_code == 201
    assert first.json()["user"]["email"] == "owner@gigplanner.io"

    assert anon_client.post("/api/auth/setup-admin", json=payload).status_code == 409


def test_health(anon_client) -> None:
    assert anon_client.get("/health").json() == {"status": "ok"}
