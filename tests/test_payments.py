from urllib.parse import urlparse, parse_qs

import pytest

from notifications.models import Notification
from orders.checkout import CheckoutItem, place_checkout
from orders.models import Order
from payments.models import Payment, GatewayLog
from payments.payoneer import GatewayError
from payments.payoneer_mock import TOKEN_PREFIX
from payments.services import finalize_payment, redirect_for

pytestmark = pytest.mark.django_db

CREATE_URL = "/api/v1/payments/payoneer/create/"
CALLBACK_URL = "/api/v1/payments/payoneer/callback/"


@pytest.fixture
def checkout(user, service):
    return place_checkout(user, [CheckoutItem(service.id, 2, "https://x.test")], "payoneer")


@pytest.fixture
def started(auth_client, checkout):
    resp = auth_client.post(CREATE_URL, {"transactionId": checkout.transaction_id}, format="json")
    assert resp.status_code == 200
    checkout.payment.refresh_from_db()
    return checkout.payment


def _query(url):
    return parse_qs(urlparse(url).query)


# ---- create -----------------------------------------------------------------

def test_create_uses_stored_amount(auth_client, checkout):
    resp = auth_client.post(CREATE_URL, {"transactionId": checkout.transaction_id, "amount": 1}, format="json")

    assert resp.status_code == 200
    body = resp.json()
    assert body["transactionId"] == checkout.transaction_id
    assert body["url"].startswith("http://shop.test/mock-payoneer/checkout?")
    assert _query(body["url"])["amount"] == [str(checkout.amount_due)]

    payment = Payment.objects.get(transaction_id=checkout.transaction_id)
    assert payment.gateway_reference.startswith(TOKEN_PREFIX)
    assert payment.redirect_url == body["url"]


def test_create_missing_id(auth_client):
    resp = auth_client.post(CREATE_URL, {}, format="json")
    assert resp.status_code == 400


def test_create_other_users_payment_is_404(client_for, make_user, checkout):
    resp = client_for(make_user()).post(CREATE_URL, {"transactionId": checkout.transaction_id}, format="json")
    assert resp.status_code == 404


def test_create_rejects_paid_payment(auth_client, checkout):
    Payment.objects.filter(pk=checkout.payment.pk).update(status="paid")
    resp = auth_client.post(CREATE_URL, {"transactionId": checkout.transaction_id}, format="json")
    assert resp.status_code == 400


def test_create_when_disabled(settings, auth_client, checkout):
    settings.PAYONEER_ENABLED = False
    resp = auth_client.post(CREATE_URL, {"transactionId": checkout.transaction_id}, format="json")
    assert resp.status_code == 503
    assert resp.json()["error"] == "Payoneer is disabled"


def test_create_gateway_error_is_502(mocker, auth_client, checkout):
    gateway = mocker.Mock()
    gateway.create_payment_intent.side_effect = GatewayError("boom")
    mocker.patch("payments.views.get_gateway", return_value=gateway)

    resp = auth_client.post(CREATE_URL, {"transactionId": checkout.transaction_id}, format="json")
    assert resp.status_code == 502


# ---- callback ---------------------------------------------------------------

def test_success_callback_marks_paid_and_notifies(api_client, started):
    resp = api_client.get(CALLBACK_URL, {
        "txId": started.gateway_reference, "refId": started.transaction_id, "status": "success",
    })

    assert resp.status_code == 302
    assert resp["Location"].startswith("http://shop.test/payment/success?")

    started.refresh_from_db()
    assert started.status == "paid"
    assert started.paid_at is not None
    order = Order.objects.get(transaction_id=started.transaction_id)
    assert order.status == "processing"
    assert Notification.objects.filter(order=order, kind="order_paid", user=order.user).count() == 1


def test_duplicate_callback_is_a_noop(api_client, started):
    params = {"txId": started.gateway_reference, "refId": started.transaction_id, "status": "success"}
    api_client.get(CALLBACK_URL, params)
    second = api_client.get(CALLBACK_URL, params)

    assert second.status_code == 302
    assert "/payment/success" in second["Location"]
    assert Notification.objects.filter(kind="order_paid").count() == 1
    assert Order.objects.get(transaction_id=started.transaction_id).status == "processing"


def test_failure_callback(api_client, started):
    resp = api_client.get(CALLBACK_URL, {"refId": started.transaction_id, "status": "declined"})

    assert "/payment/failed" in resp["Location"]
    started.refresh_from_db()
    assert started.status == "failed"
    assert Order.objects.get(transaction_id=started.transaction_id).status == "failed"
    assert Notification.objects.count() == 0


def test_failure_after_success_changes_nothing(api_client, started):
    api_client.get(CALLBACK_URL, {"txId": started.gateway_reference, "refId": started.transaction_id, "status": "success"})
    resp = api_client.get(CALLBACK_URL, {"refId": started.transaction_id, "status": "failed"})

    assert "/payment/failed" in resp["Location"]
    assert _query(resp["Location"])["status"] == ["paid"]
    started.refresh_from_db()
    assert started.status == "paid"


def test_success_replay_still_lands_on_success(api_client, started):
    params = {"txId": started.gateway_reference, "refId": started.transaction_id, "status": "success"}
    api_client.get(CALLBACK_URL, params)
    resp = api_client.get(CALLBACK_URL, params)
    assert "/payment/success" in resp["Location"]


def test_callback_crash_escapes_reference(mocker, api_client):
    mocker.patch("payments.views.finalize_payment", side_effect=RuntimeError("boom"))
    resp = api_client.get(CALLBACK_URL, {"refId": "TXN-1&error=none", "status": "success"})

    q = _query(resp["Location"])
    assert q["error"] == ["internal_error"]
    assert q["transactionId"] == ["TXN-1&error=none"]


def test_unknown_transaction(api_client, started):
    before = list(Order.objects.values_list("id", "status"))

    resp = api_client.get(CALLBACK_URL, {"refId": "TXN-missing", "status": "success"})

    assert _query(resp["Location"])["error"] == ["record_missing"]
    assert list(Order.objects.values_list("id", "status")) == before
    assert Payment.objects.get().status == "pending"
    assert Notification.objects.count() == 0


def test_token_mismatch_fails_verification(api_client, started):
    resp = api_client.get(CALLBACK_URL, {
        "txId": f"{TOKEN_PREFIX}forged", "refId": started.transaction_id, "status": "success",
    })
    assert _query(resp["Location"])["error"] == ["verification_failed"]
    started.refresh_from_db()
    assert started.status == "pending"


def test_unhandled_status_does_not_mutate(started):
    outcome = finalize_payment(started.transaction_id, "maybe", started.gateway_reference)
    assert outcome.result == "ignored"
    started.refresh_from_db()
    assert started.status == "pending"


def test_gateway_error_during_verify_is_not_paid(mocker, started):
    gateway = mocker.Mock()
    gateway.verify_payment.side_effect = GatewayError("down")
    outcome = finalize_payment(started.transaction_id, "success", started.gateway_reference, gateway=gateway)
    assert outcome.result == "verification_failed"
    started.refresh_from_db()
    assert started.status == "pending"


def test_callback_is_logged(api_client, started):
    api_client.get(CALLBACK_URL, {"txId": started.gateway_reference, "refId": started.transaction_id, "status": "success"})
    assert GatewayLog.objects.filter(transaction_id=started.transaction_id, endpoint="callback").exists()


def test_receipt_sent_after_commit(django_capture_on_commit_callbacks, mocker, started):
    send = mocker.patch("payments.services.send_payment_receipt")
    with django_capture_on_commit_callbacks(execute=True):
        finalize_payment(started.transaction_id, "success", started.gateway_reference)
    send.assert_called_once()


def test_redirect_for_failed_status(started):
    outcome = finalize_payment(started.transaction_id, "cancelled")
    q = _query(redirect_for(outcome))
    assert q["status"] == ["failed"]
    assert q["transactionId"] == [started.transaction_id]


# ---- verify / details ---------------------------------------------------------

def test_verify_reports_status(auth_client, started):
    resp = auth_client.post("/api/v1/payments/payoneer/verify/", {"transactionId": started.transaction_id}, format="json")
    assert resp.json() == {"success": False, "status": "pending"}

    finalize_payment(started.transaction_id, "success", started.gateway_reference)
    resp = auth_client.post("/api/v1/payments/payoneer/verify/", {"transactionId": started.transaction_id}, format="json")
    assert resp.json() == {"success": True, "status": "paid"}


def test_details_for_mock_page(api_client, started):
    resp = api_client.get(f"/api/v1/payments/payoneer/details/{started.transaction_id}/")
    assert resp.status_code == 200
    assert resp.json()["amount"] == started.amount
    assert resp.json()["customerName"] == "Buyer"


def test_details_hidden_in_live_mode(settings, api_client, started):
    settings.PAYONEER_MODE = "live"
    resp = api_client.get(f"/api/v1/payments/payoneer/details/{started.transaction_id}/")
    assert resp.status_code == 404


# ---- admin --------------------------------------------------------------------

def test_admin_marks_paid_once(admin_client, started):
    url = f"/api/v1/admin/payments/{started.pk}/status/"
    first = admin_client.patch(url, {"status": "paid"}, format="json")
    second = admin_client.patch(url, {"status": "paid"}, format="json")

    assert first.status_code == 200
    assert first.json()["status"] == "paid"
    assert second.status_code == 400
    assert Notification.objects.filter(kind="order_paid").count() == 1


def test_admin_refund_only_from_paid(admin_client, started):
    url = f"/api/v1/admin/payments/{started.pk}/status/"
    assert admin_client.patch(url, {"status": "refunded"}, format="json").status_code == 400
    admin_client.patch(url, {"status": "paid"}, format="json")
    resp = admin_client.patch(url, {"status": "refunded"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["status"] == "refunded"


def test_admin_list_requires_staff(auth_client, admin_client, started):
    assert auth_client.get("/api/v1/admin/payments/").status_code == 403
    resp = admin_client.get("/api/v1/admin/payments/", {"status": "pending"})
    assert resp.status_code == 200
    assert [p["transaction_id"] for p in resp.json()] == [started.transaction_id]
