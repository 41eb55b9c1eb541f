# users/urls.py

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    RegisterView, LoginView, ProfileView, PasswordChangeView,
    UserDashboardView, AdminDashboardView,
    AdminUserListView, AdminUserStatusView, AdminUserVipView,
)

urlpatterns = [
    path('auth/register/',      RegisterView.as_view(),       name='user-register'),
    path('auth/login/',         LoginView.as_view(),          name='user-login'),
    path('auth/token/refresh/', TokenRefreshView.as_view(),   name='token-refresh'),

    path('profile/',            ProfileView.as_view(),        name='profile'),
    path('profile/password/',   PasswordChangeView.as_view(), name='profile-password'),

    path('dashboard/user/',     UserDashboardView.as_view(),  name='dashboard-user'),
    path('dashboard/admin/',    AdminDashboardView.as_view(), name='dashboard-admin'),

    path('admin/users/',                 AdminUserListView.as_view(),   name='admin-users'),
    path('admin/users/<int:pk>/status/', AdminUserStatusView.as_view(), name='admin-user-status'),
    path('admin/users/<int:pk>/vip/',    AdminUserVipView.as_view(),    name='admin-user-vip'),
]
