from rest_framework import serializers
from .models import Affiliate, Payout


class JoinSerializer(serializers.Serializer):
    referralCode = serializers.CharField(min_length=3, max_length=32)


class AffiliateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Affiliate
        fields = ["id", "user", "referral_code", "commission_rate", "is_active", "created_at"]
        read_only_fields = fields


class AdminAffiliateSerializer(AffiliateSerializer):
    email = serializers.EmailField(source="user.email", read_only=True)
    stats = serializers.SerializerMethodField()

    class Meta(AffiliateSerializer.Meta):
        fields = AffiliateSerializer.Meta.fields + ["email", "stats"]
        read_only_fields = fields

    def get_stats(self, obj):
        return {
            "totalOrders": getattr(obj, "total_orders", 0),
            "pendingEarnings": getattr(obj, "pending_earnings", 0),
            "approvedEarnings": getattr(obj, "approved_earnings", 0),
            "requestedEarnings": getattr(obj, "requested_earnings", 0),
            "paidEarnings": getattr(obj, "paid_earnings", 0),
        }


class AffiliateUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Affiliate
        fields = ["commission_rate", "is_active"]


class PayoutSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payout
        fields = ["id", "amount", "currency", "method", "status", "transaction_id", "created_at", "updated_at"]
        read_only_fields = fields


class PayoneerPayoutRequestSerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=["payoneer"], error_messages={"invalid_choice": "Unsupported payout method"})
    email = serializers.EmailField()
