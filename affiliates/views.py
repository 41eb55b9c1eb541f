import logging

from rest_framework import status
from rest_framework.views import APIView
from rest_framework.permissions import AllowAny, IsAuthenticated, IsAdminUser
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse

from payments.payoneer import GatewayDisabled, GatewayError
from .models import Affiliate
from .serializers import (
    JoinSerializer,
    AffiliateSerializer,
    AdminAffiliateSerializer,
    AffiliateUpdateSerializer,
    PayoutSerializer,
    PayoneerPayoutRequestSerializer,
)
from . import services

logger = logging.getLogger(__name__)


def _own_affiliate(request):
    return Affiliate.objects.filter(user=request.user).first()


# ---------------------------
# Affiliate self-service
# ---------------------------
@extend_schema(request=JoinSerializer, responses={201: AffiliateSerializer})
class JoinView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        ser = JoinSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            affiliate = services.join(request.user, ser.validated_data["referralCode"])
        except services.AffiliateError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(AffiliateSerializer(affiliate).data, status=status.HTTP_201_CREATED)


class AffiliateMeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        affiliate = _own_affiliate(request)
        if not affiliate:
            return Response({"error": "Affiliate account not found"}, status=status.HTTP_404_NOT_FOUND)
        data = AffiliateSerializer(affiliate).data
        data["stats"] = services.stats(affiliate)
        return Response(data)


@extend_schema(parameters=[OpenApiParameter("code", str, required=True)])
class ValidateCodeView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        code = (request.query_params.get("code") or "").strip()
        if not code:
            return Response({"error": "Code required"}, status=status.HTTP_400_BAD_REQUEST)
        affiliate = Affiliate.objects.filter(referral_code=code, is_active=True).first()
        if not affiliate:
            return Response({"error": "Invalid or inactive referral code"}, status=status.HTTP_404_NOT_FOUND)
        return Response({"valid": True, "code": affiliate.referral_code})


@extend_schema(request=None, responses={201: PayoutSerializer, 400: OpenApiResponse(description="Below minimum")})
class RequestPayoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        affiliate = _own_affiliate(request)
        if not affiliate:
            return Response({"error": "Affiliate account not found"}, status=status.HTTP_404_NOT_FOUND)
        try:
            payout = services.request_payout(affiliate)
        except services.AffiliateError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(PayoutSerializer(payout).data, status=status.HTTP_201_CREATED)


# ---------------------------
# Payoneer payouts
# ---------------------------
@extend_schema(
    request=PayoneerPayoutRequestSerializer,
    responses={
        200: OpenApiResponse(description="{success, payoutId, status}"),
        502: OpenApiResponse(description="Payout processing failed"),
        503: OpenApiResponse(description="Payoneer is disabled"),
    },
)
class PayoneerPayoutRequestView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        ser = PayoneerPayoutRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        affiliate = _own_affiliate(request)
        if not affiliate or not affiliate.is_active:
            return Response({"error": "Affiliate account not active"}, status=status.HTTP_403_FORBIDDEN)

        try:
            payout = services.request_payoneer_payout(affiliate, ser.validated_data["email"])
        except services.AffiliateError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except GatewayDisabled as e:
            return Response({"error": str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        except GatewayError as e:
            return Response(
                {"error": "Payout processing failed", "message": str(e)},
                status=status.HTTP_502_BAD_GATEWAY,
            )
        return Response({"success": True, "payoutId": payout.id, "status": payout.status})


class PayoutStatusView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        affiliate = _own_affiliate(request)
        if not affiliate:
            return Response([])
        payouts = list(affiliate.payouts.all()[:10])
        for i, payout in enumerate(payouts):
            try:
                payouts[i] = services.refresh_payout(payout)
            except GatewayError as e:
                logger.warning("Payout %s status refresh failed: %s", payout.id, e)
        return Response(PayoutSerializer(payouts, many=True).data)


# ---------------------------
# Admin
# ---------------------------
class AdminPayoutRequestsView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request):
        return Response(services.payout_requests())


class AdminAffiliateListView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request):
        return Response(AdminAffiliateSerializer(services.admin_overview(), many=True).data)


@extend_schema(request=AffiliateUpdateSerializer, responses={200: AffiliateSerializer})
class AdminAffiliateDetailView(APIView):
    permission_classes = [IsAdminUser]

    def patch(self, request, pk: int):
        affiliate = Affiliate.objects.filter(pk=pk).first()
        if not affiliate:
            return Response({"error": "Affiliate not found"}, status=status.HTTP_404_NOT_FOUND)
        ser = AffiliateUpdateSerializer(affiliate, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        ser.save()
        return Response(AffiliateSerializer(affiliate).data)


@extend_schema(request=None, responses={200: OpenApiResponse(description="{message, ordersPaid}")})
class AdminAffiliatePayoutView(APIView):
    permission_classes = [IsAdminUser]

    def post(self, request, pk: int):
        if not Affiliate.objects.filter(pk=pk).exists():
            return Response({"error": "Affiliate not found"}, status=status.HTTP_404_NOT_FOUND)
        paid = services.payout_affiliate(pk)
        return Response({"message": "Payout processed successfully", "ordersPaid": paid})
