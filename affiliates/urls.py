from django.urls import path
from .views import (
    JoinView,
    AffiliateMeView,
    ValidateCodeView,
    RequestPayoutView,
    PayoneerPayoutRequestView,
    PayoutStatusView,
    AdminPayoutRequestsView,
    AdminAffiliateListView,
    AdminAffiliateDetailView,
    AdminAffiliatePayoutView,
)

urlpatterns = [
    path("affiliates/join/", JoinView.as_view(), name="affiliate-join"),
    path("affiliates/me/", AffiliateMeView.as_view(), name="affiliate-me"),
    path("affiliates/validate-code/", ValidateCodeView.as_view(), name="affiliate-validate-code"),
    path("affiliates/request-payout/", RequestPayoutView.as_view(), name="affiliate-request-payout"),

    path("payouts/request/", PayoneerPayoutRequestView.as_view(), name="payout-request"),
    path("payouts/status/", PayoutStatusView.as_view(), name="payout-status"),

    path("admin/payout-requests/", AdminPayoutRequestsView.as_view(), name="admin-payout-requests"),
    path("admin/affiliates/", AdminAffiliateListView.as_view(), name="admin-affiliates"),
    path("admin/affiliates/<int:pk>/", AdminAffiliateDetailView.as_view(), name="admin-affiliate-detail"),
    path("admin/affiliates/<int:pk>/payout/", AdminAffiliatePayoutView.as_view(), name="admin-affiliate-payout"),
]
