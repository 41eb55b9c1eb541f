import pytest

from affiliates import services as affiliate_services
from affiliates.models import Affiliate, Payout
from notifications.models import Notification
from orders.models import Order
from payments.payouts import PayoneerPayoutProvider

pytestmark = pytest.mark.django_db


@pytest.fixture
def affiliate(user):
    return Affiliate.objects.create(user=user, referral_code="BUYER10")


@pytest.fixture
def earn(make_user, service, affiliate):
    """Create a referred order with the given commission state."""
    customer = make_user()

    def _earn(amount, commission_status="approved", status="completed"):
        return Order.objects.create(
            user=customer, service=service, status=status, total_amount=amount * 10,
            transaction_id="TXN-aff", affiliate=affiliate,
            commission_amount=amount, commission_status=commission_status,
        )

    return _earn


def test_join(client_for, make_user):
    resp = client_for(make_user()).post("/api/v1/affiliates/join/", {"referralCode": "SPRING"}, format="json")
    assert resp.status_code == 201
    assert resp.json()["referral_code"] == "SPRING"
    assert resp.json()["commission_rate"] == "10.00"


def test_join_twice_or_taken_code(auth_client, affiliate, client_for, make_user):
    assert auth_client.post("/api/v1/affiliates/join/", {"referralCode": "OTHER"}, format="json").status_code == 400
    resp = client_for(make_user()).post("/api/v1/affiliates/join/", {"referralCode": "buyer10"}, format="json")
    assert resp.status_code == 400
    assert resp.json()["error"] == "Referral code already exists"


def test_validate_code(api_client, affiliate):
    assert api_client.get("/api/v1/affiliates/validate-code/", {"code": "BUYER10"}).json() == {"valid": True, "code": "BUYER10"}
    assert api_client.get("/api/v1/affiliates/validate-code/", {"code": "NOPE"}).status_code == 404
    assert api_client.get("/api/v1/affiliates/validate-code/").status_code == 400


def test_me_stats(auth_client, earn):
    earn(1000)
    earn(700, "pending", "processing")
    earn(300, "paid")
    earn(999, "cancelled", "cancelled")

    stats = auth_client.get("/api/v1/affiliates/me/").json()["stats"]
    assert stats["approvedEarnings"] == 1000
    assert stats["pendingEarnings"] == 700
    assert stats["paidEarnings"] == 300
    assert stats["totalEarnings"] == 2000
    assert stats["totalOrders"] == 4


def test_request_payout_below_minimum(auth_client, earn):
    earn(2499)
    resp = auth_client.post("/api/v1/affiliates/request-payout/")
    assert resp.status_code == 400
    assert resp.json()["error"] == "Minimum withdrawal amount is $25.00"


def test_manual_payout_workflow(auth_client, admin_client, admin_user, affiliate, earn):
    a = earn(1500)
    b = earn(1000)

    resp = auth_client.post("/api/v1/affiliates/request-payout/")
    assert resp.status_code == 201
    payout = Payout.objects.get()
    assert payout.amount == 2500
    assert payout.method == "manual"
    assert set(Order.objects.filter(pk__in=[a.pk, b.pk]).values_list("commission_status", flat=True)) == {"requested"}
    assert Notification.objects.filter(kind="payout_requested", user=admin_user).exists()

    queue = admin_client.get("/api/v1/admin/payout-requests/").json()
    assert queue[0]["affiliateId"] == affiliate.id
    assert queue[0]["requestedEarnings"] == 2500

    resp = admin_client.post(f"/api/v1/admin/affiliates/{affiliate.id}/payout/")
    assert resp.status_code == 200
    assert resp.json()["ordersPaid"] == 2
    payout.refresh_from_db()
    assert payout.status == "completed"
    assert admin_client.get("/api/v1/admin/payout-requests/").json() == []


def test_admin_affiliate_list_and_update(admin_client, affiliate, earn):
    earn(400)
    rows = admin_client.get("/api/v1/admin/affiliates/").json()
    assert rows[0]["stats"]["approvedEarnings"] == 400

    resp = admin_client.patch(f"/api/v1/admin/affiliates/{affiliate.id}/", {"commission_rate": "12.5", "is_active": False}, format="json")
    assert resp.status_code == 200
    affiliate.refresh_from_db()
    assert str(affiliate.commission_rate) == "12.50"
    assert affiliate.is_active is False


def test_admin_endpoints_need_staff(auth_client, affiliate):
    assert auth_client.get("/api/v1/admin/affiliates/").status_code == 403
    assert auth_client.post(f"/api/v1/admin/affiliates/{affiliate.id}/payout/").status_code == 403


# ---- Payoneer payouts -----------------------------------------------------------

def test_payoneer_payout_submitted(auth_client, earn):
    earn(3000)
    resp = auth_client.post("/api/v1/payouts/request/", {"method": "payoneer", "email": "me@example.com"}, format="json")

    assert resp.status_code == 200
    payout = Payout.objects.get(pk=resp.json()["payoutId"])
    assert payout.method == "payoneer"
    assert payout.transaction_id.startswith("payoneer_tx_")
    assert Order.objects.get().commission_status == "requested"


def test_payoneer_payout_failure_releases_commission(auth_client, earn):
    earn(3000)
    resp = auth_client.post("/api/v1/payouts/request/", {"method": "payoneer", "email": "fail@payoneer.com"}, format="json")

    assert resp.status_code == 502
    assert resp.json()["error"] == "Payout processing failed"
    assert Payout.objects.get().status == "failed"
    order = Order.objects.get()
    assert order.commission_status == "approved"
    assert order.payout is None


def test_payoneer_payout_disabled(settings, auth_client, earn):
    settings.PAYONEER_ENABLED = False
    earn(3000)
    resp = auth_client.post("/api/v1/payouts/request/", {"method": "payoneer", "email": "me@example.com"}, format="json")
    assert resp.status_code == 503
    assert not Payout.objects.exists()


def test_payoneer_payout_wrong_method(auth_client, affiliate):
    resp = auth_client.post("/api/v1/payouts/request/", {"method": "paypal", "email": "me@example.com"}, format="json")
    assert resp.status_code == 400


def test_payoneer_payout_needs_active_affiliate(auth_client, affiliate):
    affiliate.is_active = False
    affiliate.save()
    resp = auth_client.post("/api/v1/payouts/request/", {"method": "payoneer", "email": "me@example.com"}, format="json")
    assert resp.status_code == 403


def test_refresh_payout_settles_commission(mocker, affiliate, earn):
    earn(3000)
    provider = PayoneerPayoutProvider(enabled=True, env="sandbox", mode="mock")
    payout = affiliate_services.request_payoneer_payout(affiliate, "me@example.com", provider=provider)

    mocker.patch.object(provider, "get_payout_status", return_value="completed")
    payout = affiliate_services.refresh_payout(payout, provider=provider)

    assert payout.status == "completed"
    assert Order.objects.get().commission_status == "paid"


def test_manual_payout_skips_payoneer_in_flight(affiliate, earn):
    earn(3000)
    provider = PayoneerPayoutProvider(enabled=True, env="sandbox", mode="mock")
    payoneer = affiliate_services.request_payoneer_payout(affiliate, "me@example.com", provider=provider)

    assert affiliate_services.payout_requests() == []
    assert affiliate_services.payout_affiliate(affiliate.id) == 0

    payoneer.refresh_from_db()
    assert payoneer.status == "pending"
    assert Order.objects.get().commission_status == "requested"


def test_payout_status_lists_recent(auth_client, earn):
    earn(3000)
    auth_client.post("/api/v1/payouts/request/", {"method": "payoneer", "email": "me@example.com"}, format="json")
    rows = auth_client.get("/api/v1/payouts/status/").json()
    assert len(rows) == 1
    assert rows[0]["status"] == "pending"
