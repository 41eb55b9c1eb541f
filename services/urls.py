# services/urls.py
from django.urls import path
from .views import (
    ServiceListView,
    CategoryListView,
    ServiceDetailView,
    ServiceReviewListView,
    ReviewCreateView,
    AdminServiceListView,
    AdminServiceDetailView,
)

urlpatterns = [
    path("services/", ServiceListView.as_view(), name="service-list"),
    path("services/categories/", CategoryListView.as_view(), name="service-categories"),
    path("services/<int:pk>/", ServiceDetailView.as_view(), name="service-detail"),
    path("services/<int:pk>/reviews/", ServiceReviewListView.as_view(), name="service-reviews"),
    path("reviews/", ReviewCreateView.as_view(), name="review-create"),

    path("admin/services/", AdminServiceListView.as_view(), name="admin-service-list"),
    path("admin/services/<int:pk>/", AdminServiceDetailView.as_view(), name="admin-service-detail"),
]
