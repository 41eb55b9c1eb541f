from decimal import Decimal, InvalidOperation

from rest_framework import serializers

from .models import SiteSetting

NUMERIC_KEYS = {"taxRate"}


class SiteSettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = SiteSetting
        fields = ["key", "value", "updated_at"]
        read_only_fields = ["key", "updated_at"]

    def validate_value(self, v: str):
        v = str(v).strip()
        key = getattr(self.instance, "key", None) or self.context.get("key")
        if key in NUMERIC_KEYS:
            try:
                d = Decimal(v)
            except InvalidOperation:
                raise serializers.ValidationError("Must be a number.")
            if not d.is_finite():
                raise serializers.ValidationError("Must be a number.")
            if d < 0 or d > 100:
                raise serializers.ValidationError("Must be between 0 and 100.")
        return v
