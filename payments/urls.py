# payments/urls.py
from django.urls import path
from .views import (
    PayoneerCreateView,
    PayoneerVerifyView,
    PayoneerDetailsView,
    PayoneerCallbackView,
    AdminPaymentListView,
    AdminPaymentStatusView,
)

urlpatterns = [
    path("payments/payoneer/create/", PayoneerCreateView.as_view(), name="payoneer-create"),
    path("payments/payoneer/verify/", PayoneerVerifyView.as_view(), name="payoneer-verify"),
    path("payments/payoneer/details/<str:transaction_id>/", PayoneerDetailsView.as_view(), name="payoneer-details"),
    path("payments/payoneer/callback/", PayoneerCallbackView.as_view(), name="payoneer-callback"),

    path("admin/payments/", AdminPaymentListView.as_view(), name="admin-payments"),
    path("admin/payments/<int:pk>/status/", AdminPaymentStatusView.as_view(), name="admin-payment-status"),
]
