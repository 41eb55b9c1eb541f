from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import SimpleUploadedFile

from core.uploads import validate_digital_file, validate_service_image, service_image_path, digital_file_path
from orders.delays import parse_duration
from orders.details import (
    DigitalDetails, EngagementDetails, GenericDetails, parse_details, render_details, to_json,
)
from orders.signals import commission_after
from services.pricing import floor_percent_of, format_cents, normalize_price, percent_of, validate_price


# ---- pricing ------------------------------------------------------------------

@pytest.mark.parametrize("value,cents", [
    (1999, 1999),
    ("19.99", 1999),
    (" 5 ", 500),
    (0.1, 10),
    (Decimal("2.345"), 235),
])
def test_normalize_price(value, cents):
    assert normalize_price(value) == cents


@pytest.mark.parametrize("value", ["ten", "inf", None, [], False])
def test_normalize_price_rejects(value):
    with pytest.raises(ValueError):
        normalize_price(value)


def test_validate_price_bounds():
    assert validate_price(0)
    assert not validate_price(-1)
    assert not validate_price(2**53)
    assert not validate_price(True)


def test_percentages():
    assert percent_of(1001, Decimal("15")) == 150  # 150.15
    assert percent_of(1010, Decimal("15")) == 152  # 151.5 rounds up
    assert floor_percent_of(1999, Decimal("10")) == 199
    assert format_cents(123456) == "$1,234.56"


# ---- order details ------------------------------------------------------------

def test_engagement_details_roundtrip_shape():
    raw = to_json(EngagementDetails(quantity=1000, link="https://ig.test/me", unit_price=499))
    assert raw == {"quantity": 1000, "link": "https://ig.test/me", "unit_price": 499, "kind": "engagement"}
    assert isinstance(parse_details(raw), EngagementDetails)


def test_digital_details_render():
    view = render_details(to_json(DigitalDetails(quantity=1, unit_price=1999)))
    assert view["kind"] == "digital"
    assert {"label": "Quantity", "value": "1"} in view["rows"]


def test_unknown_details_fall_back_to_generic():
    details = parse_details({"note": "legacy", "nested": {"a": 1}, "count": 3})
    assert isinstance(details, GenericDetails)
    assert dict(details.rows()) == {"note": "legacy", "count": "3"}


def test_malformed_tagged_details():
    assert isinstance(parse_details({"kind": "engagement", "quantity": "lots"}), GenericDetails)
    assert parse_details(None).rows() == []


# ---- delays -------------------------------------------------------------------

@pytest.mark.parametrize("text,expected", [
    ("24 hours", timedelta(hours=24)),
    ("3-5 days", timedelta(days=5)),
    ("30 minutes", timedelta(minutes=30)),
    ("1 Day", timedelta(days=1)),
    ("", timedelta(hours=24)),
    (None, timedelta(hours=24)),
    ("soon", timedelta(hours=24)),
])
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected


# ---- commission -----------------------------------------------------------------

@pytest.mark.parametrize("status,before,after", [
    ("completed", "pending", "approved"),
    ("cancelled", "pending", "cancelled"),
    ("cancelled", "approved", "cancelled"),
    ("failed", "pending", "cancelled"),
    ("completed", "none", "none"),
    ("cancelled", "paid", "paid"),
])
def test_commission_after(status, before, after):
    assert commission_after(status, before) == after


# ---- uploads ------------------------------------------------------------------

def test_image_rules():
    validate_service_image(SimpleUploadedFile("a.webp", b"x", content_type="image/webp"))
    with pytest.raises(ValidationError):
        validate_service_image(SimpleUploadedFile("a.png", b"x", content_type="text/plain"))
    with pytest.raises(ValidationError):
        validate_service_image(SimpleUploadedFile("a.svg", b"x", content_type="image/png"))


def test_image_size_limit(settings):
    settings.SERVICE_IMAGE_MAX_BYTES = 10
    with pytest.raises(ValidationError, match="too large"):
        validate_service_image(SimpleUploadedFile("a.png", b"x" * 11, content_type="image/png"))


def test_digital_rules(settings):
    validate_digital_file(SimpleUploadedFile("a.zip", b"x", content_type="application/octet-stream"))
    with pytest.raises(ValidationError):
        validate_digital_file(SimpleUploadedFile("a.exe", b"x", content_type="application/octet-stream"))
    settings.DIGITAL_FILE_MAX_BYTES = 1
    with pytest.raises(ValidationError):
        validate_digital_file(SimpleUploadedFile("a.pdf", b"xx", content_type="application/pdf"))


def test_upload_paths():
    assert service_image_path(None, "Photo.JPG").startswith("uploads/services/")
    assert service_image_path(None, "Photo.JPG").endswith(".jpg")
    assert digital_file_path(None, "book.pdf").startswith("digital-library/digital-")
