from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=6)
    role = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ("id", "email", "name", "phone", "password", "role", "is_vip", "status", "date_joined")
        read_only_fields = ("id", "role", "is_vip", "status", "date_joined")
        extra_kwargs = {
            "email": {"required": True},
        }

    def validate_email(self, v: str):
        v = User.objects.normalize_email(v).lower()
        if User.objects.filter(email__iexact=v).exists():
            raise serializers.ValidationError("Email already exists")
        return v

    def create(self, validated_data):
        # Ensure password is hashed using create_user; public sign-up never grants staff
        return User.objects.create_user(**validated_data)


class ProfileSerializer(serializers.ModelSerializer):
    role = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ("id", "email", "name", "phone", "role", "is_vip", "status", "date_joined")
        read_only_fields = ("id", "role", "is_vip", "status", "date_joined")

    def validate_name(self, v: str):
        if v and len(v.strip()) < 2:
            raise serializers.ValidationError("Name must be at least 2 characters.")
        return v.strip()

    def validate_email(self, v: str):
        v = User.objects.normalize_email(v).lower()
        if User.objects.filter(email__iexact=v).exclude(pk=self.instance.pk).exists():
            raise serializers.ValidationError("Email already exists")
        return v


class PasswordChangeSerializer(serializers.Serializer):
    currentPassword = serializers.CharField()
    newPassword = serializers.CharField(min_length=6)

    def validate_currentPassword(self, v):
        if not self.context["user"].check_password(v):
            raise serializers.ValidationError("Incorrect current password")
        return v

    def validate_newPassword(self, v):
        validate_password(v, self.context["user"])
        return v


class AdminUserSerializer(serializers.ModelSerializer):
    role = serializers.CharField(read_only=True)
    order_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = User
        fields = ("id", "email", "name", "phone", "role", "is_vip", "status", "is_active", "order_count", "date_joined")
        read_only_fields = fields


class UserStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[k for k, _ in User.STATUS])


class UserVipSerializer(serializers.Serializer):
    isVip = serializers.BooleanField()


# ---- Schemas for Swagger docs ----

class LoginRequestSchema(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField()


class TokenPairSchema(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()
