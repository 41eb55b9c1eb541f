# core/uploads.py
from __future__ import annotations

import os
import secrets
import time

from django.conf import settings
from django.core.exceptions import ValidationError

# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------
IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}
IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".webp"}

DIGITAL_TYPES = {
    "application/pdf",
    "application/zip",
    "application/x-zip-compressed",
    "application/octet-stream",  # some browsers send this for .zip
}
DIGITAL_EXTS = {".pdf", ".zip"}


def _suffix() -> str:
    return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"


def _ext(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lower()


def _human(n: int) -> str:
    return f"{n // (1024 * 1024)}MB"


# ---------------------------------------------------------------------------
# Validators (run in serializers, before anything touches storage)
# ---------------------------------------------------------------------------
def validate_service_image(f) -> None:
    limit = getattr(settings, "SERVICE_IMAGE_MAX_BYTES", 5 * 1024 * 1024)
    ctype = (getattr(f, "content_type", "") or "").lower()
    if ctype not in IMAGE_TYPES or _ext(f.name) not in IMAGE_EXTS:
        raise ValidationError("Invalid file type. Only JPG, JPEG, PNG, and WEBP are allowed.")
    if f.size > limit:
        raise ValidationError(f"Image too large (max {_human(limit)}).")


def validate_digital_file(f) -> None:
    limit = getattr(settings, "DIGITAL_FILE_MAX_BYTES", 500 * 1024 * 1024)
    ctype = (getattr(f, "content_type", "") or "").lower()
    ext = _ext(f.name)
    if ext not in DIGITAL_EXTS or (ctype and ctype not in DIGITAL_TYPES):
        raise ValidationError("Invalid file type. Only PDF and ZIP files are allowed.")
    if f.size > limit:
        raise ValidationError(f"File too large (max {_human(limit)}).")


# ---------------------------------------------------------------------------
# upload_to callables (referenced from migrations, keep them module-level)
# ---------------------------------------------------------------------------
def service_image_path(instance, filename: str) -> str:
    return f"uploads/services/{_suffix()}{_ext(filename)}"


def digital_file_path(instance, filename: str) -> str:
    return f"digital-library/digital-{_suffix()}{_ext(filename)}"

