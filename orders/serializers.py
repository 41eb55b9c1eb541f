from __future__ import annotations

from rest_framework import serializers

from .details import render_details
from .models import Order, STATUS_CHOICES

STATUS_KEYS = [k for k, _ in STATUS_CHOICES]


# ---------------------------------------------------------------------------
# Checkout input
# ---------------------------------------------------------------------------
class CheckoutItemSerializer(serializers.Serializer):
    serviceId = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, max_value=10_000_000, default=1)
    link = serializers.CharField(required=False, allow_blank=True, max_length=500, default="")
    # Accepted for compatibility with older carts; never used for pricing
    price = serializers.JSONField(required=False, write_only=True)


class CheckoutSerializer(serializers.Serializer):
    items = CheckoutItemSerializer(many=True, allow_empty=False)
    paymentMethod = serializers.CharField(default="payoneer")
    referralCode = serializers.CharField(required=False, allow_blank=True, max_length=32)


# ---------------------------------------------------------------------------
# Read serializers
# ---------------------------------------------------------------------------
class OrderSerializer(serializers.ModelSerializer):
    service_name = serializers.CharField(source="service.name", read_only=True)
    category = serializers.CharField(source="service.category", read_only=True)
    details_view = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "service",
            "service_name",
            "category",
            "status",
            "total_amount",
            "currency",
            "transaction_id",
            "details",
            "details_view",
            "last_notify_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_details_view(self, obj: Order):
        return render_details(obj.details)


class AdminOrderSerializer(OrderSerializer):
    user_email = serializers.EmailField(source="user.email", read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + [
            "user",
            "user_email",
            "affiliate",
            "commission_amount",
            "commission_status",
        ]
        read_only_fields = fields


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=STATUS_KEYS)
