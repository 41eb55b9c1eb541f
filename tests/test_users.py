import pytest

from orders.models import Order

pytestmark = pytest.mark.django_db


def test_register_returns_tokens(api_client):
    resp = api_client.post("/api/v1/auth/register/", {
        "email": "New@Example.com", "password": "Str0ng-pass!", "name": "New",
    }, format="json")
    assert resp.status_code == 201
    body = resp.json()
    assert body["access"] and body["refresh"]
    assert body["user"]["email"] == "new@example.com"
    assert body["user"]["role"] == "customer"


def test_register_duplicate_email(api_client, user):
    resp = api_client.post("/api/v1/auth/register/", {"email": "BUYER@example.com", "password": "Str0ng-pass!"}, format="json")
    assert resp.status_code == 400
    assert resp.json()["email"] == ["Email already exists"]


def test_login(api_client, user):
    resp = api_client.post("/api/v1/auth/login/", {"email": user.email, "password": "Str0ng-pass!"}, format="json")
    assert resp.status_code == 200
    assert "access" in resp.json()

    bad = api_client.post("/api/v1/auth/login/", {"email": user.email, "password": "wrong"}, format="json")
    assert bad.status_code == 401


def test_suspended_user_cannot_login(api_client, user):
    user.status = "suspended"
    user.save()
    resp = api_client.post("/api/v1/auth/login/", {"email": user.email, "password": "Str0ng-pass!"}, format="json")
    assert resp.status_code == 403


def test_jwt_access_works(api_client, user):
    tokens = api_client.post("/api/v1/auth/login/", {"email": user.email, "password": "Str0ng-pass!"}, format="json").json()
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
    assert api_client.get("/api/v1/profile/").json()["email"] == user.email


def test_profile_update_and_password_change(auth_client, user):
    resp = auth_client.patch("/api/v1/profile/", {"name": "Renamed"}, format="json")
    assert resp.status_code == 200
    user.refresh_from_db()
    assert user.name == "Renamed"

    bad = auth_client.patch("/api/v1/profile/password/", {"currentPassword": "nope", "newPassword": "An0ther-pass!"}, format="json")
    assert bad.status_code == 400
    ok = auth_client.patch("/api/v1/profile/password/", {"currentPassword": "Str0ng-pass!", "newPassword": "An0ther-pass!"}, format="json")
    assert ok.status_code == 200
    user.refresh_from_db()
    assert user.check_password("An0ther-pass!")


def test_user_dashboard(auth_client, user, service):
    Order.objects.create(user=user, service=service, status="completed", total_amount=1000, transaction_id="TXN-a")
    Order.objects.create(user=user, service=service, status="pending", total_amount=500, transaction_id="TXN-b")

    body = auth_client.get("/api/v1/dashboard/user/").json()
    assert body["totalOrders"] == 2
    assert body["totalSpent"] == 1000
    assert body["ordersByStatus"]["pending"] == 1


def test_admin_dashboard(admin_client, user, service):
    Order.objects.create(user=user, service=service, status="processing", total_amount=1000, transaction_id="TXN-a")
    body = admin_client.get("/api/v1/dashboard/admin/").json()
    assert body["totalRevenue"] == 1000
    assert body["topServices"][0]["name"] == service.name


def test_admin_suspend_and_vip(admin_client, admin_user, user):
    resp = admin_client.patch(f"/api/v1/admin/users/{user.pk}/status/", {"status": "suspended"}, format="json")
    assert resp.status_code == 200
    user.refresh_from_db()
    assert user.status == "suspended"

    admin_client.patch(f"/api/v1/admin/users/{user.pk}/vip/", {"isVip": True}, format="json")
    user.refresh_from_db()
    assert user.is_vip is True

    own = admin_client.patch(f"/api/v1/admin/users/{admin_user.pk}/status/", {"status": "suspended"}, format="json")
    assert own.status_code == 400


def test_admin_user_list(admin_client, user):
    emails = [u["email"] for u in admin_client.get("/api/v1/admin/users/").json()]
    assert user.email in emails


def test_customer_cannot_use_admin_user_endpoints(auth_client, user):
    assert auth_client.get("/api/v1/admin/users/").status_code == 403
