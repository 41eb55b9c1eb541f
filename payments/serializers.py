# payments/serializers.py
from rest_framework import serializers
from .models import Payment

ADMIN_STATUSES = ["paid", "failed", "expired", "refunded"]


class TransactionRequestSerializer(serializers.Serializer):
    transactionId = serializers.CharField(max_length=64)


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = [
            "id", "transaction_id", "amount", "tax_rate", "currency", "method", "status",
            "redirect_url", "paid_at", "created_at", "updated_at",
        ]
        read_only_fields = fields


class AdminPaymentSerializer(PaymentSerializer):
    user_email = serializers.EmailField(source="user.email", read_only=True)

    class Meta(PaymentSerializer.Meta):
        fields = PaymentSerializer.Meta.fields + ["user", "user_email", "gateway_reference"]
        read_only_fields = fields


class PaymentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ADMIN_STATUSES)
