from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path, include

# DRF Spectacular (API docs)
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView, SpectacularRedocView


urlpatterns = [
    # --- Admin ---
    path("admin/", admin.site.urls),

    # --- Allauth (browser / Google sign-in) ---
    path("accounts/", include("allauth.urls")),

    # --- Health, config, site settings, currency rates ---
    path("api/v1/", include("core.urls")),

    # --- Auth, profile, dashboards, admin users ---
    path("api/v1/", include("users.urls")),

    # --- Catalog & reviews ---
    path("api/v1/", include("services.urls")),

    # --- Checkout & orders ---
    path("api/v1/", include("orders.urls")),

    # --- Payoneer (create / verify / callback) ---
    path("api/v1/", include("payments.urls")),

    # --- Notifications ---
    path("api/v1/", include("notifications.urls")),

    # --- Affiliates & payouts ---
    path("api/v1/", include("affiliates.urls")),

    # --- API Schema + Docs ---
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
]

if settings.DEBUG:
    urlpatterns += static(f"{settings.MEDIA_URL}uploads/", document_root=settings.MEDIA_ROOT / "uploads")
