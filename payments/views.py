# payments/views.py
import logging
from urllib.parse import urlencode

from django.conf import settings
from django.db import transaction
from django.http import HttpResponseRedirect
from rest_framework import generics, filters, status
from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated, AllowAny, IsAdminUser
from rest_framework.response import Response

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse

from .models import Payment
from .payoneer import GatewayDisabled, GatewayError, get_gateway
from .serializers import (
    TransactionRequestSerializer,
    AdminPaymentSerializer,
    PaymentStatusSerializer,
)
from .services import finalize_payment, redirect_for, mark_paid, mark_failed, mark_expired

logger = logging.getLogger(__name__)


# ---- customer endpoints -----------------------------------------------------

@extend_schema(
    description="Start the Payoneer checkout for a pending payment. The amount is the one stored at checkout.",
    request=TransactionRequestSerializer,
    responses={
        200: OpenApiResponse(description="{url, transactionId}"),
        400: OpenApiResponse(description="Missing id or payment not pending"),
        404: OpenApiResponse(description="Unknown transaction"),
        503: OpenApiResponse(description="Payoneer is disabled"),
    },
)
class PayoneerCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        tx_id = str(request.data.get("transactionId") or "").strip()
        if not tx_id:
            return Response({"error": "Missing transaction ID"}, status=status.HTTP_400_BAD_REQUEST)

        payment = Payment.objects.filter(transaction_id=tx_id, user=request.user).first()
        if not payment:
            return Response({"error": "Payment record not found or access denied"}, status=status.HTTP_404_NOT_FOUND)
        if payment.status == "paid":
            return Response({"error": "Payment already completed"}, status=status.HTTP_400_BAD_REQUEST)
        if payment.status != "pending":
            return Response({"error": f"Payment is {payment.status}"}, status=status.HTTP_400_BAD_REQUEST)

        try:
            intent = get_gateway().create_payment_intent(
                payment.amount, payment.currency, payment.transaction_id, user=request.user,
            )
        except GatewayDisabled as e:
            return Response({"error": str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        except GatewayError as e:
            logger.error("Payoneer intent failed for %s: %s", tx_id, e)
            return Response({"error": str(e)}, status=status.HTTP_502_BAD_GATEWAY)

        # Only a still-pending payment gets the new token
        Payment.objects.filter(pk=payment.pk, status="pending").update(
            gateway_reference=intent.gateway_token, redirect_url=intent.url,
        )
        return Response({"url": intent.url, "transactionId": payment.transaction_id})


@extend_schema(request=TransactionRequestSerializer, responses={200: OpenApiResponse(description="{success, status}")})
class PayoneerVerifyView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        ser = TransactionRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        payment = Payment.objects.filter(
            transaction_id=ser.validated_data["transactionId"], user=request.user,
        ).first()
        if payment and payment.status == "paid":
            return Response({"success": True, "status": "paid"})
        return Response({"success": False, "status": payment.status if payment else "not_found"})


@extend_schema(description="Public fields for the simulated checkout page (mock mode only).")
class PayoneerDetailsView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, transaction_id: str):
        if settings.PAYONEER_MODE == "live":
            return Response({"error": "Not available"}, status=status.HTTP_404_NOT_FOUND)
        payment = Payment.objects.select_related("user").filter(transaction_id=transaction_id).first()
        if not payment:
            return Response({"error": "Payment not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response({
            "amount": payment.amount,
            "currency": payment.currency,
            "transactionId": payment.transaction_id,
            "customerName": payment.user.display_name,
            "status": payment.status,
        })


@extend_schema(
    description="Gateway redirect target. Always answers with a redirect to the storefront.",
    parameters=[
        OpenApiParameter("txId", str, description="Gateway token"),
        OpenApiParameter("refId", str, description="Our transaction id"),
        OpenApiParameter("status", str, description="success | failed | failure | cancelled | declined"),
    ],
    responses={302: OpenApiResponse(description="Redirect to /payment/success or /payment/failed")},
)
class PayoneerCallbackView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = []

    def get(self, request):
        tx_id = request.query_params.get("refId") or ""
        requested = request.query_params.get("status") or ""
        try:
            outcome = finalize_payment(
                transaction_id=tx_id,
                status=requested,
                gateway_token=request.query_params.get("txId") or "",
            )
            target = redirect_for(outcome, requested)
        except Exception:
            logger.exception("Payoneer callback crashed for %s", tx_id)
            query = urlencode({"error": "internal_error", "transactionId": tx_id})
            target = f"{settings.FRONTEND_URL}/payment/failed?{query}"
        return HttpResponseRedirect(target)


# ---- admin ------------------------------------------------------------------

class AdminPaymentListView(generics.ListAPIView):
    permission_classes = [IsAdminUser]
    serializer_class = AdminPaymentSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["status", "method", "currency"]
    search_fields = ["transaction_id", "user__email", "gateway_reference"]
    ordering_fields = ["created_at", "amount", "id"]
    ordering = ["-id"]

    def get_queryset(self):
        return Payment.objects.select_related("user")


@extend_schema(request=PaymentStatusSerializer, responses={200: AdminPaymentSerializer})
class AdminPaymentStatusView(APIView):
    """
    Manual override. ``paid``/``failed``/``expired`` go through the same
    finalization as the gateway callback (orders move, notifications fire once).
    """

    permission_classes = [IsAdminUser]

    def patch(self, request, pk: int):
        ser = PaymentStatusSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        new_status = ser.validated_data["status"]

        payment = Payment.objects.filter(pk=pk).first()
        if not payment:
            return Response({"detail": "Payment not found."}, status=status.HTTP_404_NOT_FOUND)

        if new_status == "refunded":
            with transaction.atomic():
                done = Payment.objects.filter(pk=pk, status="paid").update(status="refunded")
            if not done:
                return Response({"detail": "Only paid payments can be refunded."}, status=status.HTTP_400_BAD_REQUEST)
            payment.refresh_from_db()
        else:
            handler = {"paid": mark_paid, "failed": mark_failed, "expired": mark_expired}[new_status]
            outcome = handler(payment)
            if outcome.result == "already_final":
                return Response(
                    {"detail": f"Payment is already {outcome.payment.status}."},
                    status=status.HTTP_400_BAD_REQUEST,
                )
            payment = outcome.payment

        logger.info("Admin %s set payment %s -> %s", request.user.id, payment.transaction_id, payment.status)
        return Response(AdminPaymentSerializer(payment).data)
