# services/views.py
import logging

from django.db.models import Avg, Count
from rest_framework.views import APIView
from rest_framework.permissions import AllowAny, IsAuthenticated, IsAdminUser
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework import status

from drf_spectacular.utils import extend_schema, OpenApiParameter

from orders.models import Order
from .models import Service, Review, CATEGORIES
from .serializers import ServiceSerializer, ServiceWriteSerializer, ReviewSerializer

logger = logging.getLogger(__name__)


# ===================== Public catalog =====================
@extend_schema(
    description="Active services, optionally filtered by category.",
    parameters=[OpenApiParameter("category", str, required=False, enum=CATEGORIES)],
    responses={200: ServiceSerializer(many=True)},
)
class ServiceListView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        qs = Service.objects.filter(is_active=True)
        category = request.query_params.get("category")
        if category:
            qs = qs.filter(category=category)
        return Response(ServiceSerializer(qs, many=True).data)


class CategoryListView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        return Response(CATEGORIES)


@extend_schema(responses={200: ServiceSerializer})
class ServiceDetailView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, pk: int):
        service = Service.objects.filter(pk=pk).first()
        if not service:
            return Response({"detail": "Service not found."}, status=status.HTTP_404_NOT_FOUND)
        data = ServiceSerializer(service).data
        data.update(service.reviews.aggregate(rating=Avg("rating"), review_count=Count("id")))
        return Response(data)


# ===================== Reviews =====================
@extend_schema(responses={200: ReviewSerializer(many=True)})
class ServiceReviewListView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, pk: int):
        qs = Review.objects.filter(service_id=pk).select_related("user")
        return Response(ReviewSerializer(qs, many=True).data)


@extend_schema(request=ReviewSerializer, responses={201: ReviewSerializer})
class ReviewCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        ser = ReviewSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        service = ser.validated_data["service"]

        purchased = Order.objects.filter(user=request.user, service=service, status="completed").exists()
        if not purchased:
            return Response(
                {"detail": "You can only review services you have purchased and completed."},
                status=status.HTTP_403_FORBIDDEN,
            )

        review = ser.save(user=request.user)
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)


# ===================== Admin =====================
class AdminServiceListView(APIView):
    permission_classes = [IsAdminUser]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    @extend_schema(responses={200: ServiceSerializer(many=True)})
    def get(self, request):
        return Response(ServiceSerializer(Service.objects.all(), many=True).data)

    @extend_schema(request=ServiceWriteSerializer, responses={201: ServiceSerializer})
    def post(self, request):
        ser = ServiceWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        service = ser.save()
        logger.info("Service created: id=%s category=%s price=%s", service.id, service.category, service.price)
        return Response(ser.data, status=status.HTTP_201_CREATED)


class AdminServiceDetailView(APIView):
    permission_classes = [IsAdminUser]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def _update(self, request, pk: int, partial: bool):
        service = Service.objects.filter(pk=pk).first()
        if not service:
            return Response({"detail": "Service not found."}, status=status.HTTP_404_NOT_FOUND)
        ser = ServiceWriteSerializer(service, data=request.data, partial=partial)
        ser.is_valid(raise_exception=True)
        ser.save()
        return Response(ser.data)

    @extend_schema(request=ServiceWriteSerializer, responses={200: ServiceSerializer})
    def put(self, request, pk: int):
        # Multipart edits resend only what changed, so PUT is partial too
        return self._update(request, pk, partial=True)

    @extend_schema(request=ServiceWriteSerializer, responses={200: ServiceSerializer})
    def patch(self, request, pk: int):
        return self._update(request, pk, partial=True)

    def delete(self, request, pk: int):
        service = Service.objects.filter(pk=pk).first()
        if not service:
            return Response({"detail": "Service not found."}, status=status.HTTP_404_NOT_FOUND)
        if service.orders.exists():
            # Orders keep pointing at the catalog row; retire it instead
            service.is_active = False
            service.save(update_fields=["is_active", "updated_at"])
            return Response({"detail": "Service deactivated (has orders)."})
        service.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
