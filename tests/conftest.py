import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from services.models import Service


@pytest.fixture(autouse=True)
def _reset_state(settings):
    cache.clear()
    settings.PAYONEER_ENABLED = True
    settings.PAYONEER_MODE = "mock"
    settings.PAYONEER_ENV = "sandbox"
    settings.DEFAULT_TAX_RATE = "15"
    settings.FRONTEND_URL = "http://shop.test"
    settings.BACKEND_URL = "http://api.test"
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_user(django_user_model):
    counter = {"n": 0}

    def _make(**kwargs):
        counter["n"] += 1
        kwargs.setdefault("email", f"user{counter['n']}@example.com")
        kwargs.setdefault("password", "Str0ng-pass!")
        return django_user_model.objects.create_user(**kwargs)

    return _make


@pytest.fixture
def user(make_user):
    return make_user(email="buyer@example.com", name="Buyer")


@pytest.fixture
def admin_user(django_user_model):
    return django_user_model.objects.create_superuser(email="admin@example.com", password="Adm1n-pass!")


@pytest.fixture
def client_for(db):
    def _auth(u):
        c = APIClient()
        c.force_authenticate(user=u)
        return c

    return _auth


@pytest.fixture
def auth_client(client_for, user):
    return client_for(user)


@pytest.fixture
def admin_client(client_for, admin_user):
    return client_for(admin_user)


@pytest.fixture
def service(db):
    return Service.objects.create(
        name="Instagram Followers", category="Instagram", price=1000, duration="24 hours",
    )


@pytest.fixture
def digital_service(db):
    return Service.objects.create(name="Growth eBook", category="Digital Library", price=1999)
