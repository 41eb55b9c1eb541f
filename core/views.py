# core/views.py
from django.conf import settings
from rest_framework.views import APIView
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.response import Response
from rest_framework import status

from drf_spectacular.utils import extend_schema

from .models import SiteSetting
from .rates import RateUnavailable, default_cache
from .serializers import SiteSettingSerializer

# Fallbacks for keys that have no row yet
SETTING_DEFAULTS = {
    "taxRate": lambda: str(settings.DEFAULT_TAX_RATE),
}


class HealthView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response({"status": "ok", "app": "SocialBoost", "version": "1.0"})


@extend_schema(description="Public runtime flags for the storefront.")
class PublicConfigView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({
            "payoneerEnabled": bool(settings.PAYONEER_ENABLED),
            "payoneerMode": settings.PAYONEER_MODE,
            "currency": settings.STORE_CURRENCY,
        })


class SettingDetailView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, key: str):
        row = SiteSetting.objects.filter(key=key).first()
        if row:
            return Response(SiteSettingSerializer(row).data)
        if key in SETTING_DEFAULTS:
            return Response({"key": key, "value": SETTING_DEFAULTS[key](), "updated_at": None})
        return Response({"detail": "Setting not found."}, status=status.HTTP_404_NOT_FOUND)


@extend_schema(request=SiteSettingSerializer, responses={200: SiteSettingSerializer})
class AdminSettingView(APIView):
    permission_classes = [IsAdminUser]

    def patch(self, request, key: str):
        row = SiteSetting.objects.filter(key=key).first()
        ser = SiteSettingSerializer(row, data={"value": request.data.get("value")}, context={"key": key})
        ser.is_valid(raise_exception=True)
        if row is None:
            row = SiteSetting.objects.create(key=key, value=ser.validated_data["value"])
        else:
            row = ser.save()
        return Response(SiteSettingSerializer(row).data)


@extend_schema(description="USD-based exchange rates for price display (cached, stale on upstream failure).")
class CurrencyRatesView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        cache = default_cache()
        try:
            rates = cache.get()
        except RateUnavailable as e:
            return Response({"detail": str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response({"base": "USD", "rates": rates, "stale": cache.stale})
