from __future__ import annotations

from rest_framework import serializers

from core.uploads import validate_service_image, validate_digital_file
from .models import Service, Review, CATEGORIES
from .pricing import normalize_price, validate_price


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------
class PriceField(serializers.Field):
    """Accepts dollars as string/float or cents as int; stores cents."""

    default_error_messages = {"invalid": "Invalid price value"}

    def to_internal_value(self, data):
        try:
            cents = normalize_price(data)
        except ValueError:
            self.fail("invalid")
        if not validate_price(cents):
            self.fail("invalid")
        return cents

    def to_representation(self, value):
        return value


# ---------------------------------------------------------------------------
# Read serializers (models → JSON)
# ---------------------------------------------------------------------------
class ServiceSerializer(serializers.ModelSerializer):
    image = serializers.SerializerMethodField()
    has_digital_file = serializers.SerializerMethodField()

    class Meta:
        model = Service
        fields = [
            "id",
            "name",
            "name_en",
            "description",
            "description_en",
            "price",
            "category",
            "duration",
            "image",
            "has_digital_file",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_image(self, obj: Service):
        return obj.image.url if obj.image else None

    def get_has_digital_file(self, obj: Service) -> bool:
        return bool(obj.digital_file)


class ReviewSerializer(serializers.ModelSerializer):
    user_name = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = ["id", "service", "rating", "comment", "user_name", "created_at"]
        read_only_fields = ["id", "user_name", "created_at"]

    def get_user_name(self, obj: Review) -> str:
        return obj.user.display_name

    def validate_service(self, service: Service):
        if not service.is_active:
            raise serializers.ValidationError("Service is currently unavailable")
        return service


# ---------------------------------------------------------------------------
# Write serializers (admin, multipart or JSON)
# ---------------------------------------------------------------------------
class ServiceWriteSerializer(serializers.ModelSerializer):
    price = PriceField()
    image = serializers.FileField(required=False, allow_null=True, validators=[validate_service_image])
    digital_file = serializers.FileField(required=False, allow_null=True, validators=[validate_digital_file])

    class Meta:
        model = Service
        fields = [
            "name",
            "name_en",
            "description",
            "description_en",
            "price",
            "category",
            "duration",
            "image",
            "digital_file",
            "is_active",
        ]

    def validate_category(self, v: str):
        if v not in CATEGORIES:
            raise serializers.ValidationError(f"Unknown category '{v}'. Choose one of: {', '.join(CATEGORIES)}.")
        return v

    def validate_name(self, v: str):
        v = (v or "").strip()
        if not v:
            raise serializers.ValidationError("Name is required.")
        return v

    def to_representation(self, instance):
        return ServiceSerializer(instance, context=self.context).data
