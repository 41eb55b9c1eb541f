# orders/views.py
import logging
import os

from django.db import transaction
from django.http import FileResponse
from rest_framework import generics, filters, status
from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated, IsAdminUser
from rest_framework.response import Response

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, OpenApiResponse

from core import idempotency
from services.models import DIGITAL_LIBRARY
from .checkout import CheckoutError, CheckoutItem, place_checkout
from .filters import AdminOrderFilter
from .models import Order, InvalidTransition
from .serializers import (
    CheckoutSerializer,
    OrderSerializer,
    AdminOrderSerializer,
    OrderStatusSerializer,
)
from .services import change_status, delete_pending_order, report_delay, DelayNotAllowed, OrderLocked

logger = logging.getLogger(__name__)


# ---- helpers ----------------------------------------------------------------

def _own_order(request, pk):
    return Order.objects.select_related("service").filter(pk=pk, user=request.user).first()


def _not_found():
    return Response({"detail": "Order not found."}, status=status.HTTP_404_NOT_FOUND)


# ---- checkout ---------------------------------------------------------------

@extend_schema(
    description="Create one pending order per cart item plus one pending payment. "
                "Prices come from the catalog; any client price is ignored. "
                "Send `Idempotency-Key` to make retries safe.",
    request=CheckoutSerializer,
    responses={201: OpenApiResponse(description="{transactionId, totalAmount, taxAmount, amountDue, orders}")},
)
class CheckoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        ser = CheckoutSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        items = [
            CheckoutItem(service_id=i["serviceId"], quantity=i["quantity"], link=i.get("link") or "")
            for i in data["items"]
        ]
        key = idempotency.key_from(request)

        try:
            with transaction.atomic():
                if key:
                    idempotency.ensure(request.user, key)
                result = place_checkout(request.user, items, data["paymentMethod"], data.get("referralCode"))
                body = {
                    "transactionId": result.transaction_id,
                    "totalAmount": result.subtotal,
                    "taxAmount": result.tax_amount,
                    "amountDue": result.amount_due,
                    "orders": OrderSerializer(result.orders, many=True).data,
                }
                if key:
                    idempotency.finalize(request.user, key, body)
        except idempotency.DuplicateRequest as e:
            return Response(e.response_json, status=status.HTTP_200_OK)
        except CheckoutError as e:
            logger.info("Checkout rejected for user %s: %s", request.user.id, e)
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(body, status=status.HTTP_201_CREATED)


# ---- customer orders --------------------------------------------------------

@extend_schema(responses={200: OrderSerializer(many=True)})
class MyOrdersView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        qs = Order.objects.filter(user=request.user).select_related("service").order_by("-created_at", "-id")
        return Response(OrderSerializer(qs, many=True).data)


class OrderDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: OrderSerializer})
    def get(self, request, pk: int):
        order = _own_order(request, pk)
        if not order:
            return _not_found()
        return Response(OrderSerializer(order).data)

    def delete(self, request, pk: int):
        order = _own_order(request, pk)
        if not order:
            return _not_found()
        try:
            delete_pending_order(order)
        except OrderLocked as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"detail": "Order deleted"})


@extend_schema(
    description="Download the purchased file of a completed Digital Library order.",
    responses={
        200: OpenApiResponse(description="File attachment"),
        403: OpenApiResponse(description="Order not completed or not a digital product"),
        404: OpenApiResponse(description="Order or file not found"),
    },
)
class OrderDownloadView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk: int):
        order = _own_order(request, pk)
        if not order:
            return _not_found()
        if order.status != "completed":
            return Response({"detail": "Order is not completed yet."}, status=status.HTTP_403_FORBIDDEN)
        if order.service.category != DIGITAL_LIBRARY:
            return Response({"detail": "This order has no downloadable product."}, status=status.HTTP_403_FORBIDDEN)

        f = order.service.digital_file
        if not f or not f.storage.exists(f.name):
            return Response({"detail": "File not found."}, status=status.HTTP_404_NOT_FOUND)

        logger.info("Digital download: order=%s user=%s", order.id, request.user.id)
        return FileResponse(f.open("rb"), as_attachment=True, filename=os.path.basename(f.name))


@extend_schema(description="Tell the admins an in-progress order is overdue (once per 24h).")
class ReportDelayView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk: int):
        order = _own_order(request, pk)
        if not order:
            return _not_found()
        try:
            order = report_delay(order)
        except DelayNotAllowed as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"detail": "Delay reported successfully", "data": OrderSerializer(order).data})


# ---- admin ------------------------------------------------------------------

class AdminOrderListView(generics.ListAPIView):
    """Every order that reached payment (unpaid ``pending`` rows are hidden)."""

    permission_classes = [IsAdminUser]
    serializer_class = AdminOrderSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = AdminOrderFilter
    search_fields = ["transaction_id", "user__email", "service__name"]
    ordering_fields = ["created_at", "total_amount", "id"]
    ordering = ["-id"]

    def get_queryset(self):
        return Order.objects.exclude(status="pending").select_related("service", "user")


@extend_schema(request=OrderStatusSerializer, responses={200: AdminOrderSerializer})
class AdminOrderStatusView(APIView):
    permission_classes = [IsAdminUser]

    def patch(self, request, pk: int):
        ser = OrderStatusSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            order = change_status(pk, ser.validated_data["status"], request.user)
        except Order.DoesNotExist:
            return _not_found()
        except InvalidTransition as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(AdminOrderSerializer(order).data)
