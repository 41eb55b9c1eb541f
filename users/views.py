# users/views.py
import logging

from django.contrib.auth import get_user_model, authenticate
from django.db.models import Count, Sum, Q

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated, IsAdminUser

from rest_framework_simplejwt.tokens import RefreshToken

from drf_spectacular.utils import extend_schema, OpenApiResponse

from orders.models import Order, STATUS_CHOICES as ORDER_STATUSES
from .serializers import (
    UserSerializer,
    ProfileSerializer,
    PasswordChangeSerializer,
    AdminUserSerializer,
    UserStatusSerializer,
    UserVipSerializer,
    LoginRequestSchema,
    TokenPairSchema,
)

logger = logging.getLogger(__name__)
User = get_user_model()


# ---------------------------
# Helpers
# ---------------------------
def _token_pair(user) -> dict:
    refresh = RefreshToken.for_user(user)
    return {"refresh": str(refresh), "access": str(refresh.access_token)}


def _status_counts(qs) -> dict:
    counts = {k: 0 for k, _ in ORDER_STATUSES}
    for row in qs.values("status").annotate(n=Count("id")):
        counts[row["status"]] = row["n"]
    return counts


# ---------------------------
# Register / Login
# ---------------------------
@extend_schema(
    description="Register a new customer account and return JWT tokens.",
    request=UserSerializer,
    responses={
        201: TokenPairSchema,
        400: OpenApiResponse(description="Validation error"),
    },
)
class RegisterView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = UserSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        user = serializer.save()
        logger.info("New customer registered: id=%s", user.id)

        return Response(
            {**_token_pair(user), "user": ProfileSerializer(user).data},
            status=status.HTTP_201_CREATED,
        )


@extend_schema(
    description="Login with email & password, return JWT tokens.",
    request=LoginRequestSchema,
    responses={
        200: TokenPairSchema,
        401: OpenApiResponse(description="Invalid credentials"),
        403: OpenApiResponse(description="Account suspended"),
        400: OpenApiResponse(description="Bad request"),
    },
)
class LoginView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        email = request.data.get("email")
        password = request.data.get("password")

        if not email or not password:
            return Response({"detail": "email and password are required"}, status=status.HTTP_400_BAD_REQUEST)

        user = authenticate(request, username=email, password=password)
        if not user:
            return Response({"detail": "Invalid credentials"}, status=status.HTTP_401_UNAUTHORIZED)
        if user.status == "suspended":
            return Response({"detail": "Account suspended"}, status=status.HTTP_403_FORBIDDEN)

        return Response(
            {**_token_pair(user), "user": ProfileSerializer(user).data},
            status=status.HTTP_200_OK,
        )


# ---------------------------
# Profile
# ---------------------------
class ProfileView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: ProfileSerializer})
    def get(self, request):
        return Response(ProfileSerializer(request.user).data)

    @extend_schema(request=ProfileSerializer, responses={200: ProfileSerializer})
    def patch(self, request):
        ser = ProfileSerializer(request.user, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        ser.save()
        return Response({"detail": "Profile updated successfully", "data": ser.data})


@extend_schema(request=PasswordChangeSerializer, responses={200: OpenApiResponse(description="Password updated")})
class PasswordChangeView(APIView):
    permission_classes = [IsAuthenticated]

    def patch(self, request):
        ser = PasswordChangeSerializer(data=request.data, context={"user": request.user})
        ser.is_valid(raise_exception=True)
        request.user.set_password(ser.validated_data["newPassword"])
        request.user.save(update_fields=["password"])
        return Response({"detail": "Password updated successfully"})


# ---------------------------
# Dashboards
# ---------------------------
@extend_schema(description="Customer dashboard: order counts, spend, recent orders, unread notifications.")
class UserDashboardView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        user = request.user
        orders = Order.objects.filter(user=user)
        spent = orders.exclude(status__in=["pending", "cancelled", "failed"]).aggregate(s=Sum("total_amount"))["s"]
        recent = orders.select_related("service").order_by("-id")[:5]
        return Response({
            "totalOrders": orders.count(),
            "ordersByStatus": _status_counts(orders),
            "totalSpent": spent or 0,
            "recentOrders": [
                {
                    "id": o.id,
                    "serviceName": o.service.name if o.service_id else "Unknown Service",
                    "status": o.status,
                    "totalAmount": o.total_amount,
                    "createdAt": o.created_at,
                }
                for o in recent
            ],
            "unreadNotifications": user.notifications.filter(is_read=False).count(),
        })


@extend_schema(description="Store-wide stats for admins.")
class AdminDashboardView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request):
        orders = Order.objects.all()
        counted = orders.exclude(status__in=["pending", "cancelled", "failed"])
        top = (
            counted.values("service_id", "service__name")
            .annotate(orders=Count("id"), revenue=Sum("total_amount"))
            .order_by("-revenue")[:5]
        )
        return Response({
            "totalUsers": User.objects.filter(is_staff=False).count(),
            "totalOrders": orders.count(),
            "ordersByStatus": _status_counts(orders),
            "totalRevenue": counted.aggregate(s=Sum("total_amount"))["s"] or 0,
            "topServices": [
                {"serviceId": r["service_id"], "name": r["service__name"], "orders": r["orders"], "revenue": r["revenue"]}
                for r in top
            ],
        })


# ---------------------------
# Admin: users
# ---------------------------
class AdminUserListView(APIView):
    permission_classes = [IsAdminUser]

    @extend_schema(responses={200: AdminUserSerializer(many=True)})
    def get(self, request):
        qs = User.objects.annotate(order_count=Count("orders", filter=~Q(orders__status="pending")))
        search = request.query_params.get("search")
        if search:
            qs = qs.filter(Q(email__icontains=search) | Q(name__icontains=search))
        return Response(AdminUserSerializer(qs, many=True).data)


def _get_user_or_404(pk):
    return User.objects.filter(pk=pk).first()


@extend_schema(request=UserStatusSerializer, responses={200: ProfileSerializer})
class AdminUserStatusView(APIView):
    permission_classes = [IsAdminUser]

    def patch(self, request, pk: int):
        user = _get_user_or_404(pk)
        if not user:
            return Response({"detail": "User not found."}, status=status.HTTP_404_NOT_FOUND)
        ser = UserStatusSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        if user.pk == request.user.pk and ser.validated_data["status"] == "suspended":
            return Response({"detail": "You cannot suspend your own account."}, status=status.HTTP_400_BAD_REQUEST)
        user.status = ser.validated_data["status"]
        user.save(update_fields=["status"])
        logger.info("Admin %s set user %s status=%s", request.user.id, user.id, user.status)
        return Response(ProfileSerializer(user).data)


@extend_schema(request=UserVipSerializer, responses={200: ProfileSerializer})
class AdminUserVipView(APIView):
    permission_classes = [IsAdminUser]

    def patch(self, request, pk: int):
        user = _get_user_or_404(pk)
        if not user:
            return Response({"detail": "User not found."}, status=status.HTTP_404_NOT_FOUND)
        ser = UserVipSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        user.is_vip = ser.validated_data["isVip"]
        user.save(update_fields=["is_vip"])
        return Response(ProfileSerializer(user).data)
