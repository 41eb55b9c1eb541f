from django.urls import path
from .views import HealthView, PublicConfigView, SettingDetailView, AdminSettingView, CurrencyRatesView

urlpatterns = [
    path("health/", HealthView.as_view(), name="health"),
    path("config/", PublicConfigView.as_view(), name="public-config"),
    path("settings/<str:key>/", SettingDetailView.as_view(), name="setting-detail"),
    path("admin/settings/<str:key>/", AdminSettingView.as_view(), name="admin-setting"),
    path("currency/rates/", CurrencyRatesView.as_view(), name="currency-rates"),
]
