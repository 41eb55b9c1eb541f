import pytest
import requests

from core.models import SiteSetting
from core.rates import RateCache, RateUnavailable, fetch_rates

pytestmark = pytest.mark.django_db


@pytest.fixture(autouse=True)
def _fresh_rate_cache(mocker):
    mocker.patch("core.views.default_cache", return_value=RateCache("http://rates.test", fetcher=lambda url: {"EUR": 0.9}))


def test_health(api_client):
    assert api_client.get("/api/v1/health/").json()["status"] == "ok"


def test_public_config(settings, api_client):
    settings.PAYONEER_ENABLED = False
    body = api_client.get("/api/v1/config/").json()
    assert body == {"payoneerEnabled": False, "payoneerMode": "mock", "currency": "USD"}


def test_tax_rate_default_and_override(api_client, admin_client):
    assert api_client.get("/api/v1/settings/taxRate/").json()["value"] == "15"

    resp = admin_client.patch("/api/v1/admin/settings/taxRate/", {"value": "8.25"}, format="json")
    assert resp.status_code == 200
    assert SiteSetting.get_value("taxRate") == "8.25"
    assert api_client.get("/api/v1/settings/taxRate/").json()["value"] == "8.25"


@pytest.mark.parametrize("value", ["abc", "101", "-1", "NaN"])
def test_tax_rate_validation(admin_client, value):
    resp = admin_client.patch("/api/v1/admin/settings/taxRate/", {"value": value}, format="json")
    assert resp.status_code == 400


def test_unknown_setting(api_client):
    assert api_client.get("/api/v1/settings/nothing/").status_code == 404


def test_settings_admin_only(auth_client):
    assert auth_client.patch("/api/v1/admin/settings/taxRate/", {"value": "5"}, format="json").status_code == 403


def test_currency_rates_endpoint(api_client):
    body = api_client.get("/api/v1/currency/rates/").json()
    assert body == {"base": "USD", "rates": {"EUR": 0.9}, "stale": False}


def test_currency_rates_unavailable(mocker, api_client):
    def boom(url):
        raise requests.ConnectionError("down")

    mocker.patch("core.views.default_cache", return_value=RateCache("http://rates.test", fetcher=boom))
    assert api_client.get("/api/v1/currency/rates/").status_code == 503


# ---- RateCache ------------------------------------------------------------------

class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_rate_cache_refreshes_after_ttl():
    calls = []
    clock = Clock()

    def fetch(url):
        calls.append(url)
        return {"EUR": 0.9 + len(calls) / 100}

    cache = RateCache("u", ttl_seconds=100, fetcher=fetch, clock=clock)
    first = cache.get()
    clock.now = 50
    assert cache.get() == first
    clock.now = 150
    assert cache.get() != first
    assert len(calls) == 2


def test_rate_cache_serves_stale_on_failure():
    clock = Clock()
    state = {"fail": False}

    def fetch(url):
        if state["fail"]:
            raise requests.Timeout("slow")
        return {"EUR": 0.9}

    cache = RateCache("u", ttl_seconds=10, fetcher=fetch, clock=clock)
    cache.get()
    state["fail"] = True
    clock.now = 20
    assert cache.get() == {"EUR": 0.9}
    assert cache.stale is True


def test_rate_cache_never_fetched_raises():
    def fetch(url):
        raise requests.Timeout("slow")

    with pytest.raises(RateUnavailable):
        RateCache("u", fetcher=fetch).get()


def test_fetch_rates_rejects_malformed(mocker):
    r = mocker.Mock()
    r.json.return_value = {"result": "error"}
    mocker.patch("core.rates.requests.get", return_value=r)
    with pytest.raises(RateUnavailable):
        fetch_rates("http://rates.test")
