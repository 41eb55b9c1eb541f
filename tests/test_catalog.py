import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from orders.models import Order
from services.models import Service, Review

pytestmark = pytest.mark.django_db

ADMIN_URL = "/api/v1/admin/services/"


@pytest.fixture
def media(settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path
    return tmp_path


def test_public_list_shows_active_only(api_client, service, digital_service):
    Service.objects.create(name="Hidden", category="TikTok", price=100, is_active=False)

    names = [s["name"] for s in api_client.get("/api/v1/services/").json()]
    assert sorted(names) == ["Growth eBook", "Instagram Followers"]

    only_ig = api_client.get("/api/v1/services/", {"category": "Instagram"}).json()
    assert [s["id"] for s in only_ig] == [service.id]


def test_categories(api_client):
    assert "Digital Library" in api_client.get("/api/v1/services/categories/").json()


def test_detail_includes_rating(api_client, service, user):
    Review.objects.create(user=user, service=service, rating=4)
    body = api_client.get(f"/api/v1/services/{service.id}/").json()
    assert body["rating"] == 4
    assert body["review_count"] == 1


def test_review_requires_completed_order(auth_client, user, service):
    payload = {"service": service.id, "rating": 5, "comment": "great"}
    assert auth_client.post("/api/v1/reviews/", payload, format="json").status_code == 403

    Order.objects.create(user=user, service=service, status="completed", total_amount=1000, transaction_id="TXN-r")
    resp = auth_client.post("/api/v1/reviews/", payload, format="json")
    assert resp.status_code == 201
    assert resp.json()["user_name"] == "Buyer"


@pytest.mark.parametrize("price,cents", [("19.99", 1999), (19.99, 1999), (1999, 1999), ("0.005", 1)])
def test_admin_create_normalizes_price(admin_client, price, cents):
    resp = admin_client.post(ADMIN_URL, {"name": "Likes", "category": "TikTok", "price": price}, format="json")
    assert resp.status_code == 201
    assert resp.json()["price"] == cents


@pytest.mark.parametrize("price", ["abc", True, None, -1])
def test_admin_create_rejects_bad_price(admin_client, price):
    resp = admin_client.post(ADMIN_URL, {"name": "Likes", "category": "TikTok", "price": price}, format="json")
    assert resp.status_code == 400


def test_admin_create_rejects_unknown_category(admin_client):
    resp = admin_client.post(ADMIN_URL, {"name": "Likes", "category": "MySpace", "price": 100}, format="json")
    assert resp.status_code == 400


def test_admin_upload_image(media, admin_client):
    image = SimpleUploadedFile("cover.png", b"\x89PNG\r\n\x1a\n", content_type="image/png")
    resp = admin_client.post(ADMIN_URL, {
        "name": "Views", "category": "YouTube", "price": "4.99", "image": image,
    }, format="multipart")

    assert resp.status_code == 201
    stored = Service.objects.get(pk=resp.json()["id"]).image.name
    assert stored.startswith("uploads/services/")
    assert stored.endswith(".png")


def test_admin_upload_rejects_wrong_image_type(media, admin_client):
    bad = SimpleUploadedFile("cover.gif", b"GIF89a", content_type="image/gif")
    resp = admin_client.post(ADMIN_URL, {
        "name": "Views", "category": "YouTube", "price": "4.99", "image": bad,
    }, format="multipart")
    assert resp.status_code == 400
    assert not (media / "uploads").exists()


def test_admin_upload_digital_file(media, admin_client):
    pdf = SimpleUploadedFile("guide.pdf", b"%PDF-1.4", content_type="application/pdf")
    resp = admin_client.post(ADMIN_URL, {
        "name": "Guide", "category": "Digital Library", "price": "9.99", "digital_file": pdf,
    }, format="multipart")

    assert resp.status_code == 201
    assert resp.json()["has_digital_file"] is True
    assert Service.objects.get(pk=resp.json()["id"]).digital_file.name.startswith("digital-library/digital-")


def test_admin_delete_deactivates_service_with_orders(admin_client, user, service):
    Order.objects.create(user=user, service=service, total_amount=1000, transaction_id="TXN-d")
    resp = admin_client.delete(f"{ADMIN_URL}{service.id}/")
    assert resp.status_code == 200
    service.refresh_from_db()
    assert service.is_active is False


def test_admin_delete_unused_service(admin_client, service):
    assert admin_client.delete(f"{ADMIN_URL}{service.id}/").status_code == 204
    assert not Service.objects.filter(pk=service.id).exists()


def test_admin_patch(admin_client, service):
    resp = admin_client.patch(f"{ADMIN_URL}{service.id}/", {"price": "12.50"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["price"] == 1250


def test_catalog_admin_needs_staff(auth_client):
    assert auth_client.get(ADMIN_URL).status_code == 403
