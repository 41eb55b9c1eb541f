from decimal import Decimal

import pytest

from affiliates.models import Affiliate
from core.models import SiteSetting
from notifications.models import Notification
from orders.checkout import CheckoutError, CheckoutItem, place_checkout, current_tax_rate
from orders.models import Order
from payments.models import Payment

pytestmark = pytest.mark.django_db

URL = "/api/v1/orders/checkout/"


def test_checkout_ignores_client_price(auth_client, service):
    resp = auth_client.post(URL, {
        "items": [{"serviceId": service.id, "quantity": 2, "link": "https://instagram.com/me", "price": 1}],
        "paymentMethod": "payoneer",
    }, format="json")

    assert resp.status_code == 201
    body = resp.json()
    assert body["totalAmount"] == 2000
    assert body["taxAmount"] == 300
    assert body["amountDue"] == 2300
    assert body["transactionId"].startswith("TXN-")

    order = Order.objects.get()
    assert order.status == "pending"
    assert order.total_amount == 2000
    assert order.details["link"] == "https://instagram.com/me"

    payment = Payment.objects.get(transaction_id=body["transactionId"])
    assert payment.amount == 2300
    assert payment.status == "pending"
    assert payment.tax_rate == Decimal("15.00")


def test_checkout_creates_no_notification(auth_client, service):
    auth_client.post(URL, {
        "items": [{"serviceId": service.id, "quantity": 1, "link": "https://x.test"}],
    }, format="json")
    assert Notification.objects.count() == 0


def test_one_payment_shared_by_all_orders(user, service, digital_service):
    result = place_checkout(user, [
        CheckoutItem(service.id, 1, "https://x.test"),
        CheckoutItem(digital_service.id, 1),
    ], "payoneer")

    assert len(result.orders) == 2
    assert {o.transaction_id for o in result.orders} == {result.transaction_id}
    assert Payment.objects.filter(transaction_id=result.transaction_id).count() == 1
    assert result.subtotal == 1000 + 1999


def test_unknown_service_rolls_back(user, service):
    with pytest.raises(CheckoutError):
        place_checkout(user, [CheckoutItem(service.id, 1, "https://x.test"), CheckoutItem(9999, 1)], "payoneer")
    assert Order.objects.count() == 0
    assert Payment.objects.count() == 0


def test_inactive_service_rejected(auth_client, service):
    service.is_active = False
    service.save()
    resp = auth_client.post(URL, {"items": [{"serviceId": service.id, "quantity": 1, "link": "https://x.test"}]}, format="json")
    assert resp.status_code == 400


def test_engagement_service_requires_link(user, service):
    with pytest.raises(CheckoutError, match="link"):
        place_checkout(user, [CheckoutItem(service.id, 1, "  ")], "payoneer")


def test_unsupported_method(user, service):
    with pytest.raises(CheckoutError, match="Unsupported"):
        place_checkout(user, [CheckoutItem(service.id, 1, "https://x.test")], "paystack")


def test_empty_cart_is_400(auth_client):
    resp = auth_client.post(URL, {"items": []}, format="json")
    assert resp.status_code == 400


def test_requires_auth(api_client, service):
    resp = api_client.post(URL, {"items": [{"serviceId": service.id}]}, format="json")
    assert resp.status_code in (401, 403)


def test_tax_rate_from_site_setting(user, service):
    SiteSetting.objects.create(key="taxRate", value="10")
    result = place_checkout(user, [CheckoutItem(service.id, 1, "https://x.test")], "payoneer")
    assert result.tax_amount == 100
    assert result.payment.amount == 1100


@pytest.mark.parametrize("raw,expected", [
    ("abc", Decimal("15.00")),
    ("NaN", Decimal("15.00")),
    ("150", Decimal("100.00")),
    ("-3", Decimal("0.00")),
    ("7.5", Decimal("7.50")),
])
def test_tax_rate_is_sanitized(raw, expected):
    SiteSetting.objects.create(key="taxRate", value=raw)
    assert current_tax_rate() == expected


def test_referral_sets_pending_commission(user, make_user, service):
    partner = make_user(email="partner@example.com")
    Affiliate.objects.create(user=partner, referral_code="PARTNER", commission_rate=Decimal("10"))

    result = place_checkout(user, [CheckoutItem(service.id, 3, "https://x.test")], "payoneer", "PARTNER")
    order = result.orders[0]
    assert order.affiliate.referral_code == "PARTNER"
    assert order.commission_amount == 300
    assert order.commission_status == "pending"


def test_self_referral_is_ignored(user, service):
    Affiliate.objects.create(user=user, referral_code="SELFIE")
    result = place_checkout(user, [CheckoutItem(service.id, 1, "https://x.test")], "payoneer", "SELFIE")
    assert result.orders[0].affiliate is None
    assert result.orders[0].commission_status == "none"


def test_idempotency_key_replays_first_response(auth_client, service):
    payload = {"items": [{"serviceId": service.id, "quantity": 1, "link": "https://x.test"}]}
    first = auth_client.post(URL, payload, format="json", HTTP_IDEMPOTENCY_KEY="cart-1")
    second = auth_client.post(URL, payload, format="json", HTTP_IDEMPOTENCY_KEY="cart-1")

    assert first.status_code == 201
    assert second.status_code == 200
    assert second.json()["transactionId"] == first.json()["transactionId"]
    assert Payment.objects.count() == 1
