from __future__ import annotations

from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models

from core.uploads import service_image_path, digital_file_path

# ---------------------------------------------------------------------------
# Choices
# ---------------------------------------------------------------------------
DIGITAL_LIBRARY = "Digital Library"

CATEGORY_CHOICES = [
    ("Instagram", "Instagram"),
    ("Facebook", "Facebook"),
    ("TikTok", "TikTok"),
    ("YouTube", "YouTube"),
    ("Other Services", "Other Services"),
    (DIGITAL_LIBRARY, "Digital Library"),
]
CATEGORIES = [k for k, _ in CATEGORY_CHOICES]


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
class Service(models.Model):
    name = models.CharField(max_length=200)
    name_en = models.CharField(max_length=200, blank=True)
    description = models.TextField(blank=True)
    description_en = models.TextField(blank=True)

    # Authoritative unit price, USD cents
    price = models.PositiveIntegerField()
    category = models.CharField(max_length=32, choices=CATEGORY_CHOICES, db_index=True)
    duration = models.CharField(max_length=64, blank=True, help_text='Estimated delivery, e.g. "24 hours", "3-5 days"')

    image = models.FileField(upload_to=service_image_path, blank=True, null=True)
    digital_file = models.FileField(upload_to=digital_file_path, blank=True, null=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("category", "price")
        indexes = [models.Index(fields=["is_active", "category"], name="service_active_cat_idx")]

    def __str__(self):
        return f"{self.name} | {self.category} | {self.price}c"

    @property
    def is_digital(self) -> bool:
        return self.category == DIGITAL_LIBRARY


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------
class Review(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="reviews")
    service = models.ForeignKey(Service, on_delete=models.CASCADE, related_name="reviews")
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at",)

    def __str__(self):
        return f"{self.user_id} -> {self.service_id}: {self.rating}"
