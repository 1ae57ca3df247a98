from sqlalchemy import select

from app.models import User, UserRole
from tests.conftest import auth_headers


def _register(client, username="owner", password="s3cret-pass"):
    return client.post(
        "/api/auth/company/register",
        json={
            "name": "Lakeside Chemists",
            "drugLicenseNumber": "DL-44-0091",
            "address": "3 Lake View",
            "contactEmail": "Owner@Lakeside.test",
            "contactPhone": "9822222222",
            "lowStockThreshold": 5,
            "adminUsername": username,
            "adminPassword": password,
        },
    )


def test_register_then_login(client, db):
    response = _register(client)

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["account"]["contact_email"] == "owner@lakeside.test"
    admin = db.scalar(select(User).where(User.username == "owner"))
    assert admin.role == UserRole.ACCOUNT_ADMIN

    login = client.post("/api/auth/login", json={"username": "owner", "password": "s3cret-pass"})
    assert login.status_code == 200
    token = login.json()["access_token"]
    me = client.get("/api/accounts/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["name"] == "Lakeside Chemists"


def test_duplicate_username_is_rejected(client):
    assert _register(client).status_code == 201

    response = _register(client)

    assert response.status_code == 400
    assert response.json() == {"error": "Username already exists"}


def test_login_with_wrong_password(client):
    _register(client)

    response = client.post("/api/auth/login", json={"username": "owner", "password": "not-the-one"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}


def test_missing_token_is_unauthorized(client):
    assert client.get("/api/medicine-stocks").status_code == 401


def test_garbage_token_is_unauthorized(client):
    response = client.get("/api/medicine-stocks", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_account_admin_cannot_touch_inventory(client, admin_headers):
    assert client.get("/api/medicine-stocks", headers=admin_headers).status_code == 403


def test_app_admin_cannot_manage_users(client, headers):
    assert client.get("/api/users", headers=headers).status_code == 403


def test_account_admin_manages_users(client, account, admin_headers):
    created = client.post(
        "/api/users",
        json={
            "username": "counter.staff",
            "password": "counter-pass-1",
            "fullName": "Counter Staff",
            "email": "staff@greencross.test",
            "role": "App Admin",
        },
        headers=admin_headers,
    )
    assert created.status_code == 201, created.text
    user = created.json()
    assert user["role"] == "app_admin"
    assert user["account_id"] == account.id

    updated = client.put(f"/api/users/{user['id']}", json={"fullName": "Front Counter"}, headers=admin_headers)
    assert updated.json()["full_name"] == "Front Counter"

    listed = client.get("/api/users", headers=admin_headers)
    assert [row["username"] for row in listed.json()] == ["counter.staff"]

    assert client.delete(f"/api/users/{user['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"/api/users/{user['id']}", headers=admin_headers).status_code == 404


def test_users_are_scoped_to_account(client, db, admin_headers):
    from tests.conftest import make_account

    other = make_account(db, name="Other Pharmacy", email="other@pharmacy.test")
    client.post(
        "/api/users",
        json={
            "username": "elsewhere",
            "password": "elsewhere-pass",
            "fullName": "Elsewhere",
            "email": "e@other.test",
        },
        headers=auth_headers(other.id, role=UserRole.ACCOUNT_ADMIN),
    )

    assert client.get("/api/users", headers=admin_headers).json() == []


def test_account_admin_updates_account_settings(client, admin_headers):
    response = client.put(
        "/api/accounts/me",
        json={"lowStockThreshold": 25, "expiryAlertLeadTime": 60},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["low_stock_threshold"] == 25
    assert response.json()["expiry_alert_lead_time"] == 60


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_auth_failures_use_the_error_body(client, admin_headers):
    missing = client.get("/api/medicine-stocks")
    forbidden = client.get("/api/medicine-stocks", headers=admin_headers)

    assert missing.json() == {"error": "Invalid authentication credentials"}
    assert missing.headers["www-authenticate"] == "Bearer"
    assert forbidden.status_code == 403
    assert forbidden.json() == {"error": "Role required: app_admin"}
