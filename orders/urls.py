from django.urls import path
from .views import (
    CheckoutView,
    MyOrdersView,
    OrderDetailView,
    OrderDownloadView,
    ReportDelayView,
    AdminOrderListView,
    AdminOrderStatusView,
)

urlpatterns = [
    path("orders/checkout/", CheckoutView.as_view(), name="orders-checkout"),
    path("orders/my/", MyOrdersView.as_view(), name="orders-my"),
    path("orders/<int:pk>/", OrderDetailView.as_view(), name="orders-detail"),
    path("orders/<int:pk>/download/", OrderDownloadView.as_view(), name="orders-download"),
    path("orders/<int:pk>/report-delay/", ReportDelayView.as_view(), name="orders-report-delay"),

    path("admin/orders/", AdminOrderListView.as_view(), name="admin-orders"),
    path("admin/orders/<int:pk>/status/", AdminOrderStatusView.as_view(), name="admin-order-status"),
]
